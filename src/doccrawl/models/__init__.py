"""Doccrawl configuration, data and event models."""

from .config import (
    DEFAULT_IGNORE_SELECTORS,
    DEFAULT_USER_AGENT,
    ConversionConfig,
    CrawlConfig,
    DocCrawlConfig,
    NetworkConfig,
    OutputConfig,
)
from .documents import CrawlTarget, Document, FilterRule, MarkdownArtifact
from .events import CrawlEvent, EventEmitter, EventType, RunState, RunStats, SkipReason

__all__ = [
    # Config
    "DEFAULT_IGNORE_SELECTORS",
    "DEFAULT_USER_AGENT",
    "ConversionConfig",
    "CrawlConfig",
    "DocCrawlConfig",
    "NetworkConfig",
    "OutputConfig",
    # Data
    "CrawlTarget",
    "Document",
    "FilterRule",
    "MarkdownArtifact",
    # Events
    "CrawlEvent",
    "EventEmitter",
    "EventType",
    "RunState",
    "RunStats",
    "SkipReason",
]
