"""Link extraction from static HTML."""

import logging
from typing import Optional
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

# Patterns to skip when extracting links
SKIP_PREFIXES = ("javascript:", "#", "mailto:", "tel:", "data:")


def _resolve_url(href: str, base_url: str) -> Optional[str]:
    """Resolve href against base_url and drop the fragment."""
    try:
        absolute_url = urljoin(base_url, href)
        parsed = urlparse(absolute_url)
    except ValueError:
        return None

    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        return None

    clean_url = f"{parsed.scheme}://{parsed.netloc}{parsed.path}"
    if parsed.query:
        clean_url += f"?{parsed.query}"
    return clean_url


def extract_links(html: str, base_url: str) -> list[str]:
    """
    Extract absolute http(s) links from <a href> elements.

    Links appear in document order; duplicates are kept for the caller to
    de-duplicate.

    Args:
        html: Page HTML
        base_url: URL of the page, for resolving relative links

    Returns:
        List of absolute URLs without fragments
    """
    soup = BeautifulSoup(html, "html.parser")

    base_tag = soup.find("base", href=True)
    if base_tag is not None:
        base_url = urljoin(base_url, str(base_tag["href"]))

    links: list[str] = []
    for anchor in soup.find_all("a", href=True):
        href = str(anchor["href"]).strip()
        if not href or href.lower().startswith(SKIP_PREFIXES):
            continue

        resolved = _resolve_url(href, base_url)
        if resolved:
            links.append(resolved)

    return links
