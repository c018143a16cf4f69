"""URL discovery for doccrawl (link filtering, site crawling)."""

from .crawler import SiteCrawler, url_to_site_path
from .filters import CrawlFilter, SeenUrlTracker, accept_url, normalize_url
from .links import extract_links
from .protocols import CrawlResult, LinkPredicate, SiteFetcher, UrlFilter

__all__ = [
    # Protocols
    "LinkPredicate",
    "SiteFetcher",
    "UrlFilter",
    # Crawling
    "CrawlResult",
    "SiteCrawler",
    "extract_links",
    "url_to_site_path",
    # Filters
    "CrawlFilter",
    "SeenUrlTracker",
    "accept_url",
    "normalize_url",
]
