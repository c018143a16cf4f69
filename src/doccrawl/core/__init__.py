"""Run orchestration for doccrawl."""

from .runner import DocCrawler, crawl_blocking, markdown_relative_path

__all__ = ["DocCrawler", "crawl_blocking", "markdown_relative_path"]
