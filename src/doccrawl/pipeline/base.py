"""Base classes for the per-document conversion pipeline."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Protocol, runtime_checkable

from bs4 import BeautifulSoup, Tag

from ..models.documents import Document, MarkdownArtifact
from ..models.events import CrawlEvent, EventEmitter, EventType, SkipReason

logger = logging.getLogger(__name__)


@dataclass
class PageContext:
    """
    Context object passed through pipeline steps.

    Contains all state for converting a single fetched page, accumulated
    as it moves through the pipeline.

    Attributes:
        url: The URL the page was fetched from
        source_path: Workspace file holding the raw HTML
        output_path: Target path for the markdown file
        relative_path: output_path relative to the output directory
        document: Raw HTML once read
        soup: Parsed document
        content: Element matched by the content selector
        cleaned: Copy of content with noise removed
        artifact: Converted markdown
        should_skip: If True, remaining steps will be skipped
        skip_reason: Why the page was skipped
        error: Error message if an exception occurred
    """

    url: str
    source_path: Path
    output_path: Path
    relative_path: Path

    # Content (accumulated through pipeline)
    document: Optional[Document] = None
    soup: Optional[BeautifulSoup] = field(default=None, repr=False)
    content: Optional[Tag] = field(default=None, repr=False)
    cleaned: Optional[Tag] = field(default=None, repr=False)
    artifact: Optional[MarkdownArtifact] = None

    # Status
    should_skip: bool = False
    skip_reason: Optional[SkipReason] = None
    error: Optional[str] = None

    def skip(self, reason: SkipReason) -> None:
        self.should_skip = True
        self.skip_reason = reason

    def discard_intermediates(self) -> None:
        """Drop the parsed trees and raw HTML once they are no longer needed."""
        self.document = None
        self.soup = None
        self.content = None
        self.cleaned = None


@runtime_checkable
class PipelineStep(Protocol):
    """
    Protocol for pipeline steps.

    Each step receives a PageContext, processes it, and returns
    the (possibly modified) context.

    Error Handling Contract:
    - For expected skips (no content match): call ctx.skip(reason)
    - For unexpected failures: raise an exception
    - The pipeline will catch exceptions and set ctx.error

    Example implementation:
        class SelectStep:
            name = "select"

            async def execute(
                self,
                ctx: PageContext,
                emit: Optional[EventEmitter] = None
            ) -> PageContext:
                ctx.content = select_content(ctx.soup, self.selector)
                if ctx.content is None:
                    ctx.skip(SkipReason.NO_CONTENT_MATCH)
                return ctx
    """

    name: str

    async def execute(
        self,
        ctx: PageContext,
        emit: Optional[EventEmitter] = None,
    ) -> PageContext:
        """
        Execute this pipeline step.

        Args:
            ctx: The page context with accumulated state
            emit: Optional callback to emit events

        Returns:
            The (possibly modified) page context
        """
        ...


@dataclass
class ConversionPipeline:
    """
    Pipeline for processing a single page through multiple steps.

    Steps are executed in order. If a step sets ctx.should_skip = True,
    remaining steps are skipped. If a step raises an exception, the
    error is captured in ctx.error, logged with the offending file, and
    processing stops. Exceptions never escape the pipeline.

    Example:
        pipeline = ConversionPipeline(steps=[
            ReadStep(store),
            SelectStep("main"),
            StripStep(ignore_selectors, strip_inline_handlers=True),
            ConvertStep(HtmlToMarkdown(ignore_selectors)),
        ])

        ctx = await pipeline.execute(url, source_path, output_path, relative_path)
        if ctx.error:
            print(f"Failed: {ctx.error}")
    """

    steps: list[PipelineStep]

    async def execute(
        self,
        url: str,
        source_path: Path,
        output_path: Path,
        relative_path: Path,
        emit: Optional[EventEmitter] = None,
    ) -> PageContext:
        """
        Execute the pipeline for a fetched page.

        Args:
            url: The page URL
            source_path: Workspace file with the raw HTML
            output_path: Where the markdown should go
            relative_path: output_path relative to the output directory
            emit: Optional callback for emitting events

        Returns:
            PageContext with final state (check error/should_skip for status)
        """
        ctx = PageContext(
            url=url,
            source_path=source_path,
            output_path=output_path,
            relative_path=relative_path,
        )
        return await self.run(ctx, emit)

    async def run(
        self,
        ctx: PageContext,
        emit: Optional[EventEmitter] = None,
    ) -> PageContext:
        """Run the steps over an existing context."""
        for step in self.steps:
            if ctx.should_skip or ctx.error:
                break

            try:
                ctx = await step.execute(ctx, emit)
            except Exception as e:
                ctx.error = f"{step.name}: {e}"
                ctx.should_skip = True
                logger.error(f"Error processing {ctx.source_path}: {ctx.error}")

                if emit:
                    emit(
                        CrawlEvent(
                            type=EventType.PAGE_FAILED,
                            url=ctx.url,
                            path=ctx.source_path,
                            error=ctx.error,
                        )
                    )
                break

        return ctx
