"""Protocol definitions for HTTP client abstraction."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class HttpResponse:
    """
    Immutable HTTP response returned by HttpClient.

    Attributes:
        status_code: HTTP status code (200, 404, etc.)
        content: Raw response content as bytes
        content_type: Content-Type header value
        headers: All response headers
        url: Final URL after any redirects
    """

    status_code: int
    content: bytes
    content_type: str
    headers: dict[str, str]
    url: str

    @property
    def is_html(self) -> bool:
        """Whether the Content-Type denotes an HTML page."""
        content_type = self.content_type.lower()
        return "text/html" in content_type or "application/xhtml" in content_type


class HttpClient(Protocol):
    """
    Protocol for HTTP clients.

    Lets tests substitute an in-memory client for the aiohttp one.
    """

    async def get(
        self,
        url: str,
        *,
        timeout: float | None = None,
        headers: dict[str, str] | None = None,
    ) -> HttpResponse:
        """
        Perform an HTTP GET request.

        Args:
            url: The URL to fetch
            timeout: Request timeout in seconds
            headers: Optional additional headers

        Returns:
            HttpResponse with status, content, and headers

        Raises:
            Exception on network errors (after retries exhausted)
        """
        ...
