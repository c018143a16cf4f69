"""Link-following site fetcher that mirrors pages into a workspace."""

import logging
import re
from collections import deque
from pathlib import Path, PurePosixPath
from typing import Optional
from urllib.parse import unquote, urlparse

from ..http.client import decode_html
from ..http.protocols import HttpClient
from ..http.rate_limiter import RequestThrottle
from ..models.events import CrawlEvent, EventEmitter, EventType
from ..storage.file_store import LocalFileStore
from .filters import SeenUrlTracker
from .links import extract_links
from .protocols import CrawlResult, LinkPredicate

logger = logging.getLogger(__name__)

HTML_SUFFIXES = (".html", ".htm")

_UNSAFE_CHARS_RE = re.compile(r'[<>:"/\\|?*\x00-\x1f]')


def _safe_segment(segment: str) -> str:
    """Make a single path segment safe for the local filesystem."""
    cleaned = _UNSAFE_CHARS_RE.sub("_", segment).strip()
    if cleaned in ("", ".", ".."):
        return "_"
    return cleaned


def _is_within(path: Path, root: Path) -> bool:
    try:
        path.resolve().relative_to(root.resolve())
    except ValueError:
        return False
    return True


def url_to_site_path(url: str) -> Path:
    """
    Map a URL to a workspace-relative file path mirroring the site structure.

    The host becomes the top directory. Directory-like paths (trailing
    slash or no .html/.htm suffix) get an ``index.html`` file; query strings
    and fragments are ignored. Segments are percent-decoded before they are
    sanitized, so encoded separators and dot segments stay inside the host
    directory.

    Examples:
        https://example.com/            -> example.com/index.html
        https://example.com/docs/intro  -> example.com/docs/intro/index.html
        https://example.com/page.html   -> example.com/page.html

    Args:
        url: Absolute URL

    Returns:
        Relative path ending in .html or .htm
    """
    parsed = urlparse(url)
    host = (parsed.hostname or "unknown-host").lower()
    if parsed.port:
        host = f"{host}_{parsed.port}"

    decoded = (unquote(s) for s in parsed.path.split("/"))
    segments = [_safe_segment(s) for s in decoded if s and s not in (".", "..")]

    if not segments or parsed.path.endswith("/"):
        segments.append("index.html")
    elif PurePosixPath(segments[-1]).suffix.lower() not in HTML_SUFFIXES:
        segments.append("index.html")

    return Path(_safe_segment(host), *segments)


class SiteCrawler:
    """
    Fetches a site breadth-first and writes each HTML page to a workspace.

    Features:
    - Breadth-first crawling from a single start URL
    - Depth limiting
    - Acceptance predicate consulted for every link before it is followed
    - Delay between requests
    - Pages saved by site structure (host/path/index.html)

    Example:
        async with AsyncHttpClient() as client:
            crawler = SiteCrawler(client)
            result = await crawler.fetch(
                "https://docs.example.com/",
                Path("./docs/.crawl"),
                CrawlFilter("docs.example.com", FilterRule()),
                max_depth=10,
                delay=0.1,
            )
    """

    def __init__(
        self,
        http_client: HttpClient,
        store: Optional[LocalFileStore] = None,
        emit: Optional[EventEmitter] = None,
    ):
        """
        Initialize the crawler.

        Args:
            http_client: HTTP client for fetching pages
            store: File store for workspace writes (local filesystem by default)
            emit: Optional callback receiving PAGE_FETCHED events
        """
        self._client = http_client
        self._store = store or LocalFileStore()
        self._emit = emit

    async def _fetch_page(self, url: str, throttle: RequestThrottle, required: bool) -> Optional[tuple[str, str]]:
        """
        Fetch a page.

        Args:
            url: URL to fetch
            throttle: Request pacing
            required: Propagate network errors instead of logging them

        Returns:
            (final URL, decoded HTML), or None if the page is not usable HTML
        """
        try:
            async with throttle.limit(url):
                response = await self._client.get(url)
        except Exception as e:
            if required:
                raise
            logger.warning(f"Failed to fetch {url}: {e}")
            return None

        if response.status_code != 200:
            logger.warning(f"Skipping {url}: HTTP {response.status_code}")
            return None

        if not response.is_html:
            logger.debug(f"Skipping {url}: not HTML ({response.content_type})")
            return None

        return response.url or url, decode_html(response.content, response.content_type)

    async def fetch(
        self,
        start_url: str,
        workspace: Path,
        accept: LinkPredicate,
        *,
        max_depth: int,
        delay: float,
    ) -> CrawlResult:
        """
        Crawl from start_url and save pages into the workspace.

        Args:
            start_url: The URL to start crawling from
            workspace: Directory receiving raw HTML files
            accept: Link acceptance predicate
            max_depth: Maximum link depth (start URL is depth 0)
            delay: Seconds between requests

        Returns:
            CrawlResult with saved pages and followed links
        """
        result = CrawlResult()
        self._store.make_dirs(workspace)

        if not accept(start_url):
            logger.warning(f"Start URL {start_url} is rejected by the link filter")
            return result

        throttle = RequestThrottle(delay=delay)
        seen = SeenUrlTracker()
        seen.add(start_url)

        # BFS queue: (url, depth)
        queue: deque[tuple[str, int]] = deque()
        queue.append((start_url, 0))

        while queue:
            url, depth = queue.popleft()

            page = await self._fetch_page(url, throttle, required=(url == start_url))
            if page is None:
                continue
            final_url, html = page

            if final_url != url:
                if not accept(final_url):
                    logger.info(f"Skipping {url}: redirected to filtered URL {final_url}")
                    continue
                seen.add(final_url)

            path = workspace / url_to_site_path(final_url)
            if not _is_within(path, workspace):
                logger.warning(f"Skipping {url}: {path} is outside the workspace")
                continue
            if path in result.pages.values():
                logger.debug(f"Skipping {url}: {path} already saved")
                continue

            self._store.write_text(path, html)
            result.pages[final_url] = path
            logger.debug(f"Fetched {final_url} -> {path}")

            if self._emit:
                self._emit(
                    CrawlEvent(
                        type=EventType.PAGE_FETCHED,
                        url=final_url,
                        path=path,
                        current=len(result.pages),
                    )
                )

            if depth >= max_depth:
                continue

            followed: list[str] = []
            for link in extract_links(html, final_url):
                if not accept(link):
                    continue
                followed.append(link)
                if seen.add(link):
                    queue.append((link, depth + 1))

            result.links[final_url] = followed

        logger.info(f"Crawl complete: fetched {len(result.pages)} pages, {len(seen)} unique URLs seen")
        return result
