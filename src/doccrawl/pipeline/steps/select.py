"""SelectStep - locate the main content of a page."""

import logging
from typing import Optional

from ...conversion.selector import select_content
from ...models.events import CrawlEvent, EventEmitter, EventType, SkipReason
from ..base import PageContext

logger = logging.getLogger(__name__)


class SelectStep:
    """
    Pipeline step that picks the first element matching the content selector.

    A page with no match is skipped with a warning, never dropped silently.

    Example:
        step = SelectStep("main")
        ctx = await step.execute(ctx)
        if ctx.skip_reason == SkipReason.NO_CONTENT_MATCH:
            ...
    """

    name = "select"

    def __init__(self, selector: str) -> None:
        """
        Initialize the select step.

        Args:
            selector: CSS selector for the content element
        """
        self.selector = selector

    async def execute(
        self,
        ctx: PageContext,
        emit: Optional[EventEmitter] = None,
    ) -> PageContext:
        """
        Select the content element from ctx.soup into ctx.content.

        Args:
            ctx: Page context with a parsed document
            emit: Optional event emitter

        Returns:
            Updated context, skipped if nothing matched
        """
        if ctx.soup is None:
            raise ValueError("No parsed document to select from")

        ctx.content = select_content(ctx.soup, self.selector)

        if ctx.content is None:
            message = f'No content found with selector "{self.selector}" in {ctx.source_path}'
            logger.warning(message)
            ctx.skip(SkipReason.NO_CONTENT_MATCH)
            if emit:
                emit(
                    CrawlEvent(
                        type=EventType.PAGE_SKIPPED,
                        url=ctx.url,
                        path=ctx.source_path,
                        message=message,
                        skip_reason=SkipReason.NO_CONTENT_MATCH,
                    )
                )

        return ctx
