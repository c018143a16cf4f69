"""Pipeline step for HTML to Markdown conversion."""

import logging
from typing import Optional

from ...conversion.markdown import HtmlToMarkdown
from ...conversion.protocols import MarkdownConverter
from ...models.documents import MarkdownArtifact
from ...models.events import CrawlEvent, EventEmitter, EventType
from ..base import PageContext

logger = logging.getLogger(__name__)


class ConvertStep:
    """
    Pipeline step that converts the cleaned content to Markdown.

    Reads ctx.cleaned (falling back to ctx.content when no strip step ran)
    and writes ctx.artifact.

    Example:
        step = ConvertStep(HtmlToMarkdown(ignore_selectors=["script", ".ad"]))
        ctx = await step.execute(ctx, emit=callback)
        # ctx.artifact.text now contains the converted content
    """

    name = "convert"

    def __init__(self, converter: Optional[MarkdownConverter] = None):
        """
        Initialize the convert step.

        Args:
            converter: Markdown converter (uses default if None)
        """
        self._converter = converter or HtmlToMarkdown()

    async def execute(
        self,
        ctx: PageContext,
        emit: Optional[EventEmitter] = None,
    ) -> PageContext:
        """
        Convert the page content to Markdown.

        Args:
            ctx: Page context with cleaned content
            emit: Optional event emitter

        Returns:
            Updated context with the markdown artifact
        """
        content = ctx.cleaned if ctx.cleaned is not None else ctx.content
        if content is None:
            raise ValueError("No HTML content to convert")

        markdown = self._converter.convert(content)
        ctx.artifact = MarkdownArtifact(relative_path=ctx.relative_path, text=markdown)

        if emit:
            emit(
                CrawlEvent(
                    type=EventType.PAGE_CONVERTED,
                    url=ctx.url,
                    path=ctx.source_path,
                    message=f"Converted to {len(markdown)} characters of Markdown",
                )
            )

        logger.debug(f"Converted {ctx.source_path} to {len(markdown)} characters of Markdown")
        return ctx
