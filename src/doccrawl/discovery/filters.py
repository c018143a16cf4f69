"""URL filtering utilities for discovery."""

import logging
from urllib.parse import urlparse, urlunparse

from ..models.documents import FilterRule

logger = logging.getLogger(__name__)


def accept_url(url: str, base_domain: str, rule: FilterRule) -> bool:
    """
    Decide whether a discovered link should be followed and kept.

    Never raises: a malformed URL is simply rejected.

    Args:
        url: The absolute URL to check
        base_domain: Hostname of the start URL
        rule: Domain restriction and path pattern to apply

    Returns:
        True if the URL passes the rule
    """
    try:
        parsed = urlparse(url)
        hostname = parsed.hostname
    except ValueError:
        return False

    if not parsed.scheme or not hostname:
        return False

    if rule.restrict_to_base_domain and hostname != base_domain.lower():
        return False

    path = parsed.path or "/"
    return not (rule.path_pattern is not None and rule.path_pattern.search(path) is None)


def normalize_url(url: str) -> str:
    """
    Normalize a URL for consistent comparison.

    Lowercases scheme and host, drops the fragment and trailing slash.

    Args:
        url: The URL to normalize

    Returns:
        Normalized URL string
    """
    parsed = urlparse(url)

    return urlunparse(
        (
            parsed.scheme.lower(),
            parsed.netloc.lower(),
            parsed.path.rstrip("/") or "/",
            parsed.params,
            parsed.query,
            "",  # Remove fragment
        )
    )


class CrawlFilter:
    """
    Link filter bound to a base domain and a rule.

    Implements the UrlFilter protocol and can be called directly, so it
    can be handed to a fetcher as an acceptance predicate.

    Example:
        link_filter = CrawlFilter("example.com", FilterRule(path_pattern=re.compile("^/docs/")))
        link_filter("https://example.com/docs/intro")  # True
        link_filter("https://example.com/blog/post")   # False
    """

    def __init__(self, base_domain: str, rule: FilterRule):
        """
        Initialize the filter.

        Args:
            base_domain: Hostname links must match when the rule restricts domains
            rule: The acceptance rule
        """
        self.base_domain = base_domain.lower()
        self.rule = rule

    def should_include(self, url: str) -> bool:
        """Check if URL passes the rule."""
        accepted = accept_url(url, self.base_domain, self.rule)
        if not accepted:
            logger.debug(f"Filtered out {url}")
        return accepted

    def __call__(self, url: str) -> bool:
        return self.should_include(url)


class SeenUrlTracker:
    """
    Track seen URLs to prevent duplicates during discovery.

    Uses URL normalization for consistent comparison.
    """

    def __init__(self) -> None:
        self._seen: set[str] = set()

    def add(self, url: str) -> bool:
        """
        Add a URL to the tracker.

        Args:
            url: The URL to add

        Returns:
            True if URL was new, False if already seen
        """
        normalized = normalize_url(url)
        if normalized in self._seen:
            return False
        self._seen.add(normalized)
        return True

    def __len__(self) -> int:
        """Return number of unique URLs seen."""
        return len(self._seen)
