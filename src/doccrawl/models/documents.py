"""Value types that flow through a crawl run."""

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse


@dataclass(frozen=True)
class CrawlTarget:
    """
    A URL together with its parsed components.

    Attributes:
        url: The URL as given
        scheme: Lowercased scheme (http, https)
        host: Lowercased hostname without port
        path: URL path ("/" when empty)
    """

    url: str
    scheme: str
    host: str
    path: str

    @classmethod
    def parse(cls, url: str) -> "CrawlTarget":
        """
        Parse a URL into a CrawlTarget.

        Raises:
            ValueError: If the URL is malformed or lacks a scheme or host
        """
        parsed = urlparse(url)
        host = parsed.hostname
        if not parsed.scheme or not host:
            raise ValueError(f"Not an absolute URL: {url!r}")
        return cls(
            url=url,
            scheme=parsed.scheme.lower(),
            host=host.lower(),
            path=parsed.path or "/",
        )


@dataclass(frozen=True)
class FilterRule:
    """
    Link acceptance rule.

    When path_pattern is set, a URL path must also match it to be accepted.
    """

    restrict_to_base_domain: bool = True
    path_pattern: Optional[re.Pattern] = None


@dataclass
class Document:
    """Raw HTML of one fetched page, read from the fetch workspace."""

    url: str
    html: str
    path: Path


@dataclass(frozen=True)
class MarkdownArtifact:
    """Finished markdown for one page, addressed relative to the output directory."""

    relative_path: Path
    text: str = field(repr=False)
