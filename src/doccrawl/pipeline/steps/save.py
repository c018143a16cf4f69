"""SaveStep - Markdown file saving pipeline step."""

import asyncio
import logging
from pathlib import Path
from typing import Optional

from ...models.events import CrawlEvent, EventEmitter, EventType, SkipReason
from ...storage.file_store import LocalFileStore
from ..base import PageContext

logger = logging.getLogger(__name__)


class SaveStep:
    """
    Pipeline step that writes ctx.artifact to ctx.output_path.

    Creates parent directories as needed.

    Example:
        save_step = SaveStep(base_output_dir=Path("./docs"))

        ctx = await save_step.execute(ctx)
        if not ctx.should_skip:
            print(f"Saved to {ctx.output_path}")
    """

    name = "save"

    def __init__(
        self,
        base_output_dir: Optional[Path] = None,
        store: Optional[LocalFileStore] = None,
        dry_run: bool = False,
    ) -> None:
        """
        Initialize the save step.

        Args:
            base_output_dir: Optional base directory for output path validation.
                            If set, output paths must be within this directory.
            store: File store used for writing
            dry_run: Report what would be written without writing
        """
        self._base_output_dir = base_output_dir
        self._store = store or LocalFileStore()
        self._dry_run = dry_run

    def _validate_output_path(self, output_path: Path) -> Path:
        """
        Validate that output path is safe.

        Args:
            output_path: The path to validate

        Returns:
            Resolved absolute path

        Raises:
            ValueError: If path is outside base directory (if configured)
        """
        resolved = output_path.resolve()

        if self._base_output_dir is not None:
            base_resolved = self._base_output_dir.resolve()
            try:
                resolved.relative_to(base_resolved)
            except ValueError as err:
                raise ValueError(f"Output path {resolved} is outside base directory {base_resolved}") from err

        return resolved

    async def execute(
        self,
        ctx: PageContext,
        emit: Optional[EventEmitter] = None,
    ) -> PageContext:
        """
        Execute the save step.

        Args:
            ctx: Page context with a markdown artifact
            emit: Optional callback to emit events

        Returns:
            PageContext (unchanged, or skipped on dry runs)

        Raises:
            ValueError: If there is nothing to save or the path escapes the output directory
            OSError: If the file cannot be written
        """
        if ctx.artifact is None:
            raise ValueError("No markdown to save")

        validated_path = self._validate_output_path(ctx.output_path)

        if self._dry_run:
            ctx.skip(SkipReason.DRY_RUN)
            logger.info(f"[dry-run] Would save {validated_path}")
            if emit:
                emit(
                    CrawlEvent(
                        type=EventType.PAGE_SKIPPED,
                        url=ctx.url,
                        path=ctx.source_path,
                        output_path=validated_path,
                        message=f"[dry-run] Would save to {validated_path}",
                        skip_reason=SkipReason.DRY_RUN,
                    )
                )
            return ctx

        # Write content (use asyncio.to_thread to avoid blocking)
        await asyncio.to_thread(self._store.write_text, validated_path, ctx.artifact.text)

        logger.info(f"Converted {ctx.relative_path} to markdown")

        if emit:
            emit(
                CrawlEvent(
                    type=EventType.PAGE_SAVED,
                    url=ctx.url,
                    path=ctx.source_path,
                    output_path=validated_path,
                    message=f"Saved to {validated_path}",
                )
            )

        return ctx
