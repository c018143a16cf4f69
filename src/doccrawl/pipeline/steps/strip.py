"""StripStep - remove noise from the selected content."""

from collections.abc import Iterable
from typing import Optional

from ...conversion.stripper import strip_noise
from ...models.events import EventEmitter
from ..base import PageContext


class StripStep:
    """Pipeline step that writes a cleaned copy of ctx.content to ctx.cleaned."""

    name = "strip"

    def __init__(self, ignore_selectors: Iterable[str], strip_inline_handlers: bool = True) -> None:
        self.ignore_selectors = tuple(ignore_selectors)
        self.strip_inline_handlers = strip_inline_handlers

    async def execute(
        self,
        ctx: PageContext,
        emit: Optional[EventEmitter] = None,
    ) -> PageContext:
        if ctx.content is None:
            raise ValueError("No content to strip")

        ctx.cleaned = strip_noise(ctx.content, self.ignore_selectors, self.strip_inline_handlers)
        return ctx
