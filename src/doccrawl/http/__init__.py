"""HTTP layer for doccrawl (client, request pacing)."""

from .client import AsyncHttpClient, decode_html
from .protocols import HttpClient, HttpResponse
from .rate_limiter import RequestThrottle

__all__ = [
    "AsyncHttpClient",
    "HttpClient",
    "HttpResponse",
    "RequestThrottle",
    "decode_html",
]
