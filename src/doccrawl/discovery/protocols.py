"""Protocol definitions for URL discovery and fetching."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Protocol

# Predicate deciding whether a discovered link is followed
LinkPredicate = Callable[[str], bool]


class UrlFilter(Protocol):
    """
    Protocol for URL filtering.

    Implementations decide which URLs to follow during discovery.
    """

    def should_include(self, url: str) -> bool:
        """
        Determine if a URL should be included.

        Args:
            url: The URL to check

        Returns:
            True if the URL should be included, False to filter it out
        """
        ...


@dataclass
class CrawlResult:
    """
    Outcome of a site fetch.

    Attributes:
        pages: Saved pages, URL -> workspace file, in discovery order
        links: URL -> accepted links found on that page
    """

    pages: dict[str, Path] = field(default_factory=dict)
    links: dict[str, list[str]] = field(default_factory=dict)


class SiteFetcher(Protocol):
    """
    Protocol for site fetchers.

    A fetcher crawls from a start URL, asks the predicate about every
    discovered link before following it, and writes raw HTML into the
    workspace directory.
    """

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
        Crawl a site into the workspace.

        Args:
            start_url: Where to start
            workspace: Directory receiving raw HTML files
            accept: Link acceptance predicate
            max_depth: Maximum link depth from the start URL
            delay: Seconds between requests

        Returns:
            CrawlResult describing the pages written
        """
        ...
