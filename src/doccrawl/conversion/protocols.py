"""Protocol definitions for content conversion."""

from typing import Protocol, Union

from bs4 import Tag


class MarkdownConverter(Protocol):
    """
    Protocol for converting cleaned HTML to Markdown.

    Implementations must be deterministic: the same input always gives
    byte-identical output.
    """

    def convert(self, content: Union[Tag, str]) -> str:
        """
        Convert HTML to Markdown.

        Args:
            content: Cleaned content element or HTML fragment

        Returns:
            Markdown string
        """
        ...
