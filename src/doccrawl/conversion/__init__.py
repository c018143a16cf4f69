"""Content conversion for doccrawl (selection, noise stripping, HTML to Markdown)."""

from .markdown import BLOCKED_TAGS, HtmlToMarkdown
from .protocols import MarkdownConverter
from .selector import parse_document, select_content
from .stripper import INLINE_EVENT_HANDLERS, remove_inline_handlers, remove_matching, strip_noise

__all__ = [
    # Protocols
    "MarkdownConverter",
    # Selection
    "parse_document",
    "select_content",
    # Stripping
    "INLINE_EVENT_HANDLERS",
    "remove_inline_handlers",
    "remove_matching",
    "strip_noise",
    # Conversion
    "BLOCKED_TAGS",
    "HtmlToMarkdown",
]
