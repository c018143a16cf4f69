"""Main content selection from parsed HTML documents."""

import logging
import re
from typing import Optional, Union

from bs4 import BeautifulSoup, Tag

logger = logging.getLogger(__name__)

_META_CHARSET_RE = re.compile(r'charset=["\']?([^"\'\s>/;]+)', re.IGNORECASE)


def _detect_encoding(html: bytes) -> str:
    """Detect character encoding from an HTML <meta> declaration."""
    head = html[:2048].decode("latin-1", errors="ignore")
    charset_match = _META_CHARSET_RE.search(head)
    if charset_match:
        return charset_match.group(1).strip()
    return "utf-8"


def parse_document(html: Union[str, bytes]) -> BeautifulSoup:
    """
    Parse HTML into a BeautifulSoup tree.

    Bytes are decoded using the charset declared in the document,
    falling back to UTF-8 with replacement.

    Args:
        html: Raw HTML text or bytes

    Returns:
        Parsed document
    """
    if isinstance(html, bytes):
        encoding = _detect_encoding(html)
        try:
            html = html.decode(encoding, errors="replace")
        except LookupError:
            html = html.decode("utf-8", errors="replace")
    return BeautifulSoup(html, "html.parser")


def select_content(document: Union[BeautifulSoup, Tag], selector: str) -> Optional[Tag]:
    """
    Locate the main content element.

    Only the first element matching the selector, in document order, is
    returned, even when several match.

    Args:
        document: Parsed document (or any subtree)
        selector: CSS selector expression

    Returns:
        The first matching element, or None if nothing matches

    Raises:
        ValueError: If the selector is not valid CSS
    """
    try:
        element = document.select_one(selector)
    except Exception as err:
        raise ValueError(f"Invalid CSS selector {selector!r}: {err}") from err

    if element is None:
        logger.debug(f"No element matches selector {selector!r}")
    return element
