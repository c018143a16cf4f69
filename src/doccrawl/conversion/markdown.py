"""HTML to Markdown conversion."""

from __future__ import annotations

import copy
import logging
import re
from collections.abc import Iterable
from typing import Any

from bs4 import BeautifulSoup, Tag
from markdownify import ATX, MarkdownConverter

from .stripper import remove_matching

logger = logging.getLogger(__name__)

# Elements that never produce output, whatever the run's ignore list says
BLOCKED_TAGS = ("script", "style", "iframe", "svg", "button")


class _DocsMarkdownConverter(MarkdownConverter):
    """markdownify converter with the fixed doccrawl style and blocked tags."""

    def __init__(self, **options: Any):
        options.setdefault("heading_style", ATX)
        options.setdefault("bullets", "-")
        options.setdefault("strong_em_symbol", "*")
        options.setdefault("code_language", "")
        options.setdefault("autolinks", False)
        super().__init__(**options)

    def _drop(self, el: Tag, text: str, parent_tags: Any = None) -> str:
        return ""

    convert_script = _drop
    convert_style = _drop
    convert_iframe = _drop
    convert_svg = _drop
    convert_button = _drop

    def convert_hr(self, el: Tag, text: str, parent_tags: Any = None) -> str:
        return "\n\n---\n\n"


class HtmlToMarkdown:
    """
    Converts cleaned HTML content to Markdown.

    Uses markdownify with a fixed style: ATX headings, fenced code blocks,
    "-" bullets, "---" rules, "*" emphasis, "**" strong and inline links.

    Elements matching the built-in block list (script, style, iframe, svg,
    button) or any of the configured ignore selectors produce no output,
    even if they were not stripped beforehand.

    Example:
        converter = HtmlToMarkdown(ignore_selectors=[".ad"])
        markdown = converter.convert(content_tag)
    """

    def __init__(self, ignore_selectors: Iterable[str] = ()):
        """
        Initialize the Markdown converter.

        Args:
            ignore_selectors: CSS selectors whose elements must not be rendered
        """
        rules: dict[str, None] = dict.fromkeys(BLOCKED_TAGS)
        for selector in ignore_selectors:
            rules.setdefault(selector, None)
        self._rules = tuple(rules)
        self._converter = _DocsMarkdownConverter()

    @property
    def rules(self) -> tuple[str, ...]:
        """Selectors that render to nothing: built-in block list then configured ones."""
        return self._rules

    def _clean_output(self, markdown: str) -> str:
        """Clean up the converted Markdown."""
        # Normalize line endings
        markdown = markdown.replace("\r\n", "\n").replace("\r", "\n")

        # Remove trailing whitespace on each line
        markdown = "\n".join(line.rstrip() for line in markdown.split("\n"))

        # Remove excessive blank lines
        markdown = re.sub(r"\n{3,}", "\n\n", markdown)

        # Ensure single newline at end
        return markdown.strip() + "\n"

    def _fragment(self, content: Tag | str) -> BeautifulSoup:
        """Copy the inner HTML of content into a standalone fragment."""
        if isinstance(content, str):
            fragment = BeautifulSoup(content, "html.parser")
            remove_matching(fragment, self._rules)
            return fragment

        root = copy.copy(content)
        remove_matching(root, self._rules)

        fragment = BeautifulSoup("", "html.parser")
        for child in list(root.contents):
            fragment.append(child.extract())
        return fragment

    def convert(self, content: Tag | str) -> str:
        """
        Convert HTML to Markdown.

        A Tag is rendered by its children only; its own tag produces no
        markup. A string is treated as an HTML fragment.

        Args:
            content: Cleaned content element or HTML string

        Returns:
            Markdown text ending in a single newline
        """
        fragment = self._fragment(content)
        markdown = self._converter.convert_soup(fragment)
        return self._clean_output(markdown)
