"""Noise removal from extracted content."""

import copy
import logging
from collections.abc import Iterable

from bs4 import Tag

logger = logging.getLogger(__name__)

INLINE_EVENT_HANDLERS = frozenset(
    {
        "onclick",
        "onload",
        "onmouseover",
        "onmouseout",
        "onkeydown",
        "onkeyup",
        "onkeypress",
    }
)


def remove_matching(content: Tag, selectors: Iterable[str]) -> int:
    """
    Decompose every descendant of content matching any selector, in place.

    Selectors are applied one at a time, in order.

    Returns:
        Number of elements removed
    """
    removed = 0
    for selector in selectors:
        for element in content.select(selector):
            # Already gone with an ancestor matched by this selector
            if element.decomposed:
                continue
            element.decompose()
            removed += 1
    return removed


def remove_inline_handlers(content: Tag) -> int:
    """
    Drop inline event handler attributes from content and its descendants, in place.

    Elements, their other attributes and their children are kept.

    Returns:
        Number of attributes removed
    """
    removed = 0
    for element in [content, *content.find_all(True)]:
        for attr in [name for name in element.attrs if name.lower() in INLINE_EVENT_HANDLERS]:
            del element[attr]
            removed += 1
    return removed


def strip_noise(content: Tag, ignore_selectors: Iterable[str], strip_inline_handlers: bool) -> Tag:
    """
    Return a cleaned copy of the content subtree.

    The input element, and the document it belongs to, are left untouched.

    Args:
        content: Extracted content element
        ignore_selectors: CSS selectors for descendants to remove
        strip_inline_handlers: Also remove onclick/onload/... attributes

    Returns:
        A detached, cleaned copy of content
    """
    cleaned = copy.copy(content)

    removed = remove_matching(cleaned, ignore_selectors)
    handlers = remove_inline_handlers(cleaned) if strip_inline_handlers else 0

    logger.debug(f"Stripped {removed} elements and {handlers} inline handlers")
    return cleaned
