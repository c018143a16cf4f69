"""Request pacing for polite crawling."""

import asyncio
import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Optional

logger = logging.getLogger(__name__)


class RequestThrottle:
    """
    Enforces a minimum delay between consecutive requests.

    Requests are issued one at a time; the delay is measured from the
    start of the previous request using monotonic time.

    Example:
        throttle = RequestThrottle(delay=0.1)

        async with throttle.limit("https://example.com/page1"):
            await fetch_page(...)

        async with throttle.limit("https://example.com/page2"):
            # Starts at least 0.1s after page1 started
            await fetch_page(...)
    """

    def __init__(self, delay: float = 0.1):
        """
        Initialize the throttle.

        Args:
            delay: Minimum seconds between request starts
        """
        if delay < 0:
            raise ValueError(f"Delay must be non-negative, got {delay}")
        self.delay = delay
        self._last_request: Optional[float] = None
        self._lock = asyncio.Lock()

    @asynccontextmanager
    async def limit(self, url: str) -> AsyncIterator[None]:
        """
        Async context manager for throttled requests.

        Args:
            url: The URL being requested

        Yields:
            None - perform your request in the context
        """
        async with self._lock:
            if self._last_request is not None:
                wait_time = max(0.0, self.delay - (time.monotonic() - self._last_request))
                if wait_time > 0:
                    logger.debug(f"Waiting {wait_time:.3f}s before {url}")
                    await asyncio.sleep(wait_time)

            self._last_request = time.monotonic()
            yield
