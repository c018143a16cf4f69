"""ReadStep - load and parse a fetched page."""

import asyncio
import logging
from typing import Optional

from ...conversion.selector import parse_document
from ...models.documents import Document
from ...models.events import EventEmitter
from ...storage.file_store import LocalFileStore
from ..base import PageContext

logger = logging.getLogger(__name__)


class ReadStep:
    """
    Pipeline step that reads raw HTML from the workspace and parses it.

    Fills ctx.document and ctx.soup. Read or parse errors propagate and
    are recorded by the pipeline as a per-document failure.
    """

    name = "read"

    def __init__(self, store: Optional[LocalFileStore] = None) -> None:
        self._store = store or LocalFileStore()

    async def execute(
        self,
        ctx: PageContext,
        emit: Optional[EventEmitter] = None,
    ) -> PageContext:
        html = await asyncio.to_thread(self._store.read_text, ctx.source_path)
        ctx.document = Document(url=ctx.url, html=html, path=ctx.source_path)
        ctx.soup = parse_document(html)
        logger.debug(f"Read {len(html)} characters from {ctx.source_path}")
        return ctx
