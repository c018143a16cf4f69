"""Async HTTP client with retry logic."""

from __future__ import annotations

import asyncio
import logging
import random
import re
from types import TracebackType

import aiohttp
from charset_normalizer import from_bytes as detect_encoding

from ..models.config import DEFAULT_USER_AGENT
from .protocols import HttpResponse

logger = logging.getLogger(__name__)

_META_CHARSET_RE = re.compile(rb'charset=["\']?([A-Za-z0-9_\-]+)', re.IGNORECASE)


class AsyncHttpClient:
    """
    Async HTTP client with retry logic.

    Features:
    - Exponential backoff retry for transient failures
    - Content size limits to prevent memory exhaustion
    - Charset detection from headers, <meta> tags and charset-normalizer

    Example:
        client = AsyncHttpClient(max_retries=2)

        async with client:
            response = await client.get("https://example.com")
            print(decode_html(response.content, response.content_type))
    """

    # Status codes that warrant a retry
    RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})

    # Exceptions that warrant a retry
    RETRYABLE_EXCEPTIONS = (
        aiohttp.ClientError,
        asyncio.TimeoutError,
        ConnectionError,
    )

    def __init__(
        self,
        max_retries: int = 3,
        retry_base_delay: float = 1.0,
        max_content_size: int = 50 * 1024 * 1024,
        user_agent: str = DEFAULT_USER_AGENT,
        default_timeout: float = 30.0,
    ) -> None:
        """
        Initialize the HTTP client.

        Args:
            max_retries: Maximum retry attempts for failed requests
            retry_base_delay: Base delay for exponential backoff (seconds)
            max_content_size: Maximum response size in bytes
            user_agent: User-Agent string
            default_timeout: Default request timeout in seconds
        """
        self._max_retries = max_retries
        self._retry_base_delay = retry_base_delay
        self._max_content_size = max_content_size
        self._user_agent = user_agent
        self._default_timeout = default_timeout

        self._session: aiohttp.ClientSession | None = None

    async def __aenter__(self) -> AsyncHttpClient:
        """Enter async context and create session."""
        self._session = aiohttp.ClientSession(
            headers={"User-Agent": self._user_agent},
        )
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Exit async context and close session."""
        if self._session:
            await self._session.close()
            self._session = None

    def _calculate_retry_delay(self, attempt: int) -> float:
        """
        Calculate delay for exponential backoff with jitter.

        Args:
            attempt: Current attempt number (0-indexed)

        Returns:
            Delay in seconds
        """
        delay: float = self._retry_base_delay * (2**attempt)
        jitter: float = random.uniform(0, 1)
        return delay + jitter

    async def get(
        self,
        url: str,
        *,
        timeout: float | None = None,
        headers: dict[str, str] | None = None,
    ) -> HttpResponse:
        """
        Perform an HTTP GET request with retry logic.

        Args:
            url: The URL to fetch
            timeout: Request timeout in seconds (uses default if None)
            headers: Optional additional headers

        Returns:
            HttpResponse with status, content, and headers

        Raises:
            aiohttp.ClientError: On network errors after retries exhausted
            ValueError: On content size exceeded
        """
        if self._session is None:
            raise RuntimeError("Client not initialized. Use 'async with' context manager.")

        timeout_val = timeout or self._default_timeout
        last_error: Exception | None = None

        for attempt in range(self._max_retries + 1):
            try:
                async with self._session.get(
                    url,
                    timeout=aiohttp.ClientTimeout(total=timeout_val),
                    headers=headers,
                    allow_redirects=True,
                ) as response:
                    if response.status in self.RETRYABLE_STATUS_CODES:
                        if attempt < self._max_retries:
                            delay = self._calculate_retry_delay(attempt)
                            logger.warning(
                                f"Got {response.status} for {url}, retrying in {delay:.1f}s "
                                f"(attempt {attempt + 1}/{self._max_retries + 1})"
                            )
                            await asyncio.sleep(delay)
                            continue
                        # Last attempt - let it raise
                        response.raise_for_status()

                    content_length = response.headers.get("Content-Length")
                    if content_length and content_length.isdigit() and int(content_length) > self._max_content_size:
                        raise ValueError(f"Content too large: {content_length} bytes")

                    content = b""
                    async for chunk in response.content.iter_chunked(8192):
                        content += chunk
                        if len(content) > self._max_content_size:
                            raise ValueError(f"Content size limit exceeded: >{self._max_content_size} bytes")

                    return HttpResponse(
                        status_code=response.status,
                        content=content,
                        content_type=response.headers.get("Content-Type", ""),
                        headers=dict(response.headers),
                        url=str(response.url),
                    )

            except self.RETRYABLE_EXCEPTIONS as e:
                last_error = e
                if attempt < self._max_retries:
                    delay = self._calculate_retry_delay(attempt)
                    logger.warning(
                        f"Error fetching {url}: {e}, retrying in {delay:.1f}s "
                        f"(attempt {attempt + 1}/{self._max_retries + 1})"
                    )
                    await asyncio.sleep(delay)
                else:
                    logger.error(f"HTTP fetch error for {url} after {self._max_retries + 1} attempts: {e}")
                    raise

        if last_error:
            raise last_error
        raise RuntimeError(f"Unexpected error fetching {url}")


def decode_html(content: bytes, content_type: str = "") -> str:
    """
    Decode HTML bytes to text.

    Tries the Content-Type charset, then a <meta> charset, then
    charset-normalizer detection, and finally UTF-8 with replacement.
    """
    candidates: list[str] = []
    for part in content_type.split(";"):
        part = part.strip()
        if part.lower().startswith("charset="):
            candidates.append(part.split("=", 1)[1].strip().strip("\"'"))
            break

    match = _META_CHARSET_RE.search(content[:2048])
    if match:
        candidates.append(match.group(1).decode("ascii"))

    for encoding in candidates:
        try:
            return content.decode(encoding)
        except (UnicodeDecodeError, LookupError):
            logger.debug(f"Failed to decode with declared encoding: {encoding}")

    best_match = detect_encoding(content).best()
    if best_match is not None:
        logger.debug(f"Detected encoding: {best_match.encoding}")
        return str(best_match)

    return content.decode("utf-8", errors="replace")
