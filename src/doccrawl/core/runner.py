"""Main DocCrawler class with streaming event API."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import AsyncIterator
from pathlib import Path
from types import TracebackType
from typing import Callable

from ..conversion.markdown import HtmlToMarkdown
from ..discovery.crawler import HTML_SUFFIXES, SiteCrawler
from ..discovery.filters import CrawlFilter
from ..discovery.protocols import CrawlResult, SiteFetcher
from ..http.client import AsyncHttpClient
from ..models.config import DocCrawlConfig
from ..models.events import CrawlEvent, EventType, RunState, RunStats, SkipReason
from ..pipeline.base import ConversionPipeline
from ..pipeline.steps import ConvertStep, ReadStep, SaveStep, SelectStep, StripStep
from ..storage.file_store import LocalFileStore

logger = logging.getLogger(__name__)


def markdown_relative_path(source_path: Path, workspace: Path) -> Path:
    """
    Compute the output-relative markdown path for a workspace HTML file.

    The site structure is kept; the .html/.htm extension becomes .md.

    Args:
        source_path: HTML file inside the workspace
        workspace: Workspace root

    Returns:
        Relative path ending in .md
    """
    relative = source_path.relative_to(workspace)
    if relative.suffix.lower() in HTML_SUFFIXES:
        return relative.with_suffix(".md")
    return relative.with_name(relative.name + ".md")


class DocCrawler:
    """
    Primary API for doccrawl - streaming events.

    A run fetches the site into a temporary workspace, converts every
    fetched page to markdown one at a time, writes the results under the
    output directory and always removes the workspace afterwards.

    States: IDLE -> FETCHING -> CONVERTING <-> PERSISTING -> CLEANING_UP
    -> DONE, or FAILED when the run itself fails. Failures on a single
    page are reported and the run carries on.

    Example:
        config = DocCrawlConfig(
            url="https://docs.example.com/",
            crawl={"path_pattern": "^/docs/.*"},
        )

        async with DocCrawler(config) as crawler:
            async for event in crawler.run():
                if event.type == EventType.PAGE_SAVED:
                    print(f"Saved: {event.output_path}")
                elif event.type == EventType.PAGE_FAILED:
                    print(f"Error: {event.path} - {event.error}")

        print(f"Stats: {crawler.stats.to_dict()}")
    """

    def __init__(
        self,
        config: DocCrawlConfig,
        fetcher: SiteFetcher | None = None,
        store: LocalFileStore | None = None,
    ):
        """
        Initialize the DocCrawler.

        Args:
            config: Configuration for the run
            fetcher: Site fetcher to use; an aiohttp-backed SiteCrawler
                     is created on context entry if None
            store: File store (local filesystem by default)
        """
        self.config = config
        self._store = store or LocalFileStore()
        self._fetcher = fetcher
        self._http_client: AsyncHttpClient | None = None
        self._state = RunState.IDLE
        self._stats = RunStats()
        self._collected: list[CrawlEvent] = []

        conversion = config.conversion
        self._convert_pipeline = ConversionPipeline(
            steps=[
                ReadStep(self._store),
                SelectStep(conversion.selector),
                StripStep(conversion.ignore_selectors, conversion.strip_inline_handlers),
                ConvertStep(HtmlToMarkdown(conversion.ignore_selectors)),
            ]
        )
        self._persist_pipeline = ConversionPipeline(
            steps=[
                SaveStep(
                    base_output_dir=config.output.directory,
                    store=self._store,
                    dry_run=config.dry_run,
                )
            ]
        )

    @property
    def state(self) -> RunState:
        """Current run state."""
        return self._state

    @property
    def stats(self) -> RunStats:
        """Get current run statistics."""
        return self._stats

    async def __aenter__(self) -> DocCrawler:
        """Enter async context and create the default fetcher if needed."""
        if self._fetcher is None:
            self._http_client = AsyncHttpClient(
                max_retries=self.config.network.max_retries,
                user_agent=self.config.network.user_agent,
                default_timeout=self.config.network.timeout,
            )
            await self._http_client.__aenter__()
            self._fetcher = SiteCrawler(self._http_client, store=self._store, emit=self._collect)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Exit async context and close the HTTP client."""
        if self._http_client:
            await self._http_client.__aexit__(exc_type, exc_val, exc_tb)
            self._http_client = None
            self._fetcher = None

    def _collect(self, event: CrawlEvent) -> None:
        self._collected.append(event)

    def _drain(self) -> list[CrawlEvent]:
        events, self._collected = self._collected, []
        return events

    def _set_state(self, state: RunState) -> None:
        logger.debug(f"State {self._state.value} -> {state.value}")
        self._state = state

    def _cleanup_workspace(self, workspace: Path) -> bool:
        """Remove the fetch workspace; never raises."""
        try:
            removed = self._store.remove_tree(workspace)
        except OSError as e:
            logger.error(f"Failed to remove workspace {workspace}: {e}")
            return False
        if removed:
            logger.info("Cleaned up temporary files")
        return removed

    def _ordered_sources(self, result: CrawlResult, workspace: Path) -> list[Path]:
        """HTML files in discovery order, then any others found in the workspace."""
        on_disk: list[Path] = []
        for suffix in HTML_SUFFIXES:
            on_disk.extend(self._store.list_files(workspace, suffix))

        present = set(on_disk)
        ordered = [path for path in result.pages.values() if path in present]
        known = set(ordered)
        ordered.extend(sorted(path for path in on_disk if path not in known))
        return ordered

    async def run(self) -> AsyncIterator[CrawlEvent]:
        """
        Execute the run, yielding events.

        Yields:
            CrawlEvent objects for each significant operation

        Raises:
            RuntimeError: If no fetcher is available or the instance already ran
            Exception: Whatever the fetch phase raised, after cleanup
        """
        if self._fetcher is None:
            raise RuntimeError("DocCrawler not initialized. Use 'async with' context manager.")
        if self._state is not RunState.IDLE:
            raise RuntimeError("DocCrawler instances can only run once")

        config = self.config
        output_dir = config.output.directory
        workspace = config.workspace_dir
        start_time = time.monotonic()

        yield CrawlEvent(
            type=EventType.STARTED,
            url=config.url,
            message=f"Starting crawl of {config.url}",
        )

        try:
            # Phase 1: fetch into the workspace
            self._set_state(RunState.FETCHING)
            self._store.make_dirs(output_dir)
            self._store.remove_tree(workspace)
            self._store.make_dirs(workspace)

            yield CrawlEvent(
                type=EventType.FETCH_STARTED,
                url=config.url,
                message=f"Fetching {config.url}",
            )

            link_filter = CrawlFilter(config.base_domain, config.filter_rule)
            result = await self._fetcher.fetch(
                config.url,
                workspace,
                link_filter,
                max_depth=config.crawl.max_depth,
                delay=config.crawl.delay_seconds,
            )
            for event in self._drain():
                yield event

            self._stats.pages_fetched = len(result.pages)
            yield CrawlEvent(
                type=EventType.FETCH_COMPLETED,
                total=len(result.pages),
                message="Website scraping completed",
            )

            # Phase 2: convert and persist each document
            self._set_state(RunState.CONVERTING)
            sources = self._ordered_sources(result, workspace)
            urls_by_path = {path: url for url, path in result.pages.items()}
            self._stats.documents_found = len(sources)

            yield CrawlEvent(
                type=EventType.CONVERSION_STARTED,
                total=len(sources),
                message=f"Found {len(sources)} HTML files to process",
            )

            for source_path in sources:
                self._set_state(RunState.CONVERTING)
                relative_path = markdown_relative_path(source_path, workspace)
                url = urls_by_path.get(source_path, source_path.relative_to(workspace).as_posix())

                ctx = await self._convert_pipeline.execute(
                    url,
                    source_path,
                    output_dir / relative_path,
                    relative_path,
                    emit=self._collect,
                )

                if not ctx.should_skip and not ctx.error:
                    self._set_state(RunState.PERSISTING)
                    ctx = await self._persist_pipeline.run(ctx, emit=self._collect)

                ctx.discard_intermediates()

                for event in self._drain():
                    yield event

                if ctx.error:
                    self._stats.pages_failed += 1
                elif ctx.artifact is None:
                    self._stats.pages_skipped += 1
                else:
                    self._stats.pages_converted += 1
                    if ctx.skip_reason is not SkipReason.DRY_RUN:
                        self._stats.files_saved += 1

            # Phase 3: cleanup
            self._set_state(RunState.CLEANING_UP)
            self._cleanup_workspace(workspace)
            yield CrawlEvent(
                type=EventType.WORKSPACE_REMOVED,
                path=workspace,
                message="Cleaning up temporary files...",
            )

            self._stats.duration_seconds = time.monotonic() - start_time
            self._set_state(RunState.DONE)
            yield CrawlEvent(
                type=EventType.COMPLETED,
                message=(
                    f"Documentation processing completed: {self._stats.files_saved} saved, "
                    f"{self._stats.pages_skipped} skipped, "
                    f"{self._stats.pages_failed} failed"
                ),
            )

        except Exception as e:
            self._drain()
            self._set_state(RunState.CLEANING_UP)
            self._cleanup_workspace(workspace)
            self._stats.duration_seconds = time.monotonic() - start_time
            self._set_state(RunState.FAILED)
            logger.error(f"Error during crawling: {e}")
            yield CrawlEvent(
                type=EventType.FAILED,
                error=str(e),
                message=f"Crawl failed: {e}",
            )
            raise

        finally:
            # Consumer stopped iterating before a terminal state
            if not self._state.is_terminal:
                self._cleanup_workspace(workspace)


def crawl_blocking(
    url: str,
    on_event: Callable[[CrawlEvent], None] | None = None,
    **kwargs: object,
) -> RunStats:
    """
    Blocking crawl with optional event callback.

    This is a convenience wrapper for sync code that can't use async/await.
    For async code, use the DocCrawler class directly.

    WARNING: Do not call from within an existing event loop (e.g., Jupyter,
    asyncio-based frameworks). Use the async DocCrawler API instead.

    Args:
        url: The URL to crawl
        on_event: Optional callback for events (for progress tracking)
        **kwargs: Additional config options passed to DocCrawlConfig

    Returns:
        Statistics for the finished run

    Example:
        stats = crawl_blocking(
            "https://docs.example.com/",
            on_event=print,
            output={"directory": "./docs"},
        )
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        pass
    else:
        raise RuntimeError("crawl_blocking() called from async context. Use 'async with DocCrawler()' instead.")

    config = DocCrawlConfig(url=url, **kwargs)  # type: ignore[arg-type]

    async def _run() -> RunStats:
        async with DocCrawler(config) as crawler:
            async for event in crawler.run():
                if on_event:
                    on_event(event)
            return crawler.stats

    return asyncio.run(_run())
