"""Event types for the streaming crawl API."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

# Type alias for event callback functions
EventEmitter = Callable[["CrawlEvent"], None]


class RunState(str, Enum):
    """States a crawl run moves through."""

    IDLE = "idle"
    FETCHING = "fetching"
    CONVERTING = "converting"
    PERSISTING = "persisting"
    CLEANING_UP = "cleaning_up"
    DONE = "done"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (RunState.DONE, RunState.FAILED)


class SkipReason(str, Enum):
    """Reasons for skipping a page during conversion."""

    NO_CONTENT_MATCH = "no_content_match"
    DRY_RUN = "dry_run"


class EventType(str, Enum):
    """Types of events emitted during a crawl run."""

    # Lifecycle events
    STARTED = "started"
    COMPLETED = "completed"
    FAILED = "failed"

    # Fetch phase
    FETCH_STARTED = "fetch_started"
    PAGE_FETCHED = "page_fetched"
    FETCH_COMPLETED = "fetch_completed"

    # Conversion phase
    CONVERSION_STARTED = "conversion_started"
    PAGE_CONVERTED = "page_converted"
    PAGE_SAVED = "page_saved"
    PAGE_SKIPPED = "page_skipped"
    PAGE_FAILED = "page_failed"

    # Cleanup
    WORKSPACE_REMOVED = "workspace_removed"


@dataclass
class CrawlEvent:
    """
    Event emitted during a crawl run.

    Example:
        async for event in crawler.run():
            if event.type == EventType.PAGE_SAVED:
                print(f"Saved: {event.output_path}")
            elif event.type == EventType.PAGE_FAILED:
                print(f"Error: {event.path} - {event.error}")
    """

    type: EventType

    # Timestamp (always UTC)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    # Common fields
    url: Optional[str] = None
    message: Optional[str] = None
    error: Optional[str] = None

    # Progress tracking
    current: Optional[int] = None
    total: Optional[int] = None

    # Typed payload fields for specific events
    path: Optional[Path] = None
    output_path: Optional[Path] = None
    skip_reason: Optional[SkipReason] = None

    @property
    def is_error(self) -> bool:
        """Check if this is an error event."""
        return self.type in (EventType.FAILED, EventType.PAGE_FAILED)


@dataclass
class RunStats:
    """Cumulative statistics for a crawl run."""

    pages_fetched: int = 0
    documents_found: int = 0
    pages_converted: int = 0
    pages_skipped: int = 0
    pages_failed: int = 0
    files_saved: int = 0
    duration_seconds: float = 0.0

    def to_dict(self) -> dict:
        """Convert stats to dictionary for serialization."""
        return {
            "pages_fetched": self.pages_fetched,
            "documents_found": self.documents_found,
            "pages_converted": self.pages_converted,
            "pages_skipped": self.pages_skipped,
            "pages_failed": self.pages_failed,
            "files_saved": self.files_saved,
            "duration_seconds": round(self.duration_seconds, 2),
        }
