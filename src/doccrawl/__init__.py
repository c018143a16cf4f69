"""
doccrawl - Crawl a documentation site and convert its pages to markdown.

Usage:
    from doccrawl import DocCrawler, DocCrawlConfig

    config = DocCrawlConfig(
        url="https://docs.example.com/",
        crawl={"path_pattern": "^/docs/.*"},
    )

    async with DocCrawler(config) as crawler:
        async for event in crawler.run():
            print(event)
"""

__version__ = "1.0.0"

from .conversion import HtmlToMarkdown
from .core.runner import DocCrawler, crawl_blocking
from .discovery import CrawlFilter, SiteCrawler, accept_url
from .models.config import (
    ConversionConfig,
    CrawlConfig,
    DocCrawlConfig,
    NetworkConfig,
    OutputConfig,
)
from .models.events import CrawlEvent, EventType, RunState, RunStats, SkipReason

__all__ = [
    "__version__",
    # Core
    "DocCrawler",
    "crawl_blocking",
    # Config
    "DocCrawlConfig",
    "CrawlConfig",
    "ConversionConfig",
    "OutputConfig",
    "NetworkConfig",
    # Building blocks
    "CrawlFilter",
    "SiteCrawler",
    "HtmlToMarkdown",
    "accept_url",
    # Events
    "CrawlEvent",
    "EventType",
    "RunState",
    "RunStats",
    "SkipReason",
]
