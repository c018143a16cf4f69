"""Shared fixtures for doccrawl tests."""

import pytest
from doccrawl.http.protocols import HttpResponse


class FakeHttpClient:
    """In-memory HttpClient serving a fixed set of pages."""

    def __init__(self, pages, content_type="text/html; charset=utf-8"):
        self.pages = pages
        self.content_type = content_type
        self.requested = []
        self.redirects = {}
        self.errors = {}

    async def get(self, url, *, timeout=None, headers=None):
        self.requested.append(url)
        if url in self.errors:
            raise self.errors[url]

        final_url = self.redirects.get(url, url)
        page = self.pages.get(final_url)
        if page is None:
            return HttpResponse(
                status_code=404,
                content=b"not found",
                content_type="text/plain",
                headers={},
                url=final_url,
            )

        if isinstance(page, tuple):
            body, content_type = page
        else:
            body, content_type = page, self.content_type

        return HttpResponse(
            status_code=200,
            content=body.encode("utf-8"),
            content_type=content_type,
            headers={"Content-Type": content_type},
            url=final_url,
        )


DOCS_SITE = {
    "https://example.com/docs/": """
        <html><head><title>Docs</title></head><body>
        <nav><a href="/docs/guide">Guide</a></nav>
        <main>
          <h1>Documentation</h1>
          <p>Start with the <a href="/docs/guide">guide</a>.</p>
          <script>track()</script>
          <div class="ad">Buy now</div>
        </main>
        <a href="/blog/news">Blog</a>
        <a href="https://other.example.org/docs/x">Elsewhere</a>
        </body></html>
    """,
    "https://example.com/docs/guide": """
        <html><body>
        <main>
          <h2>Guide</h2>
          <ul><li>Install</li><li>Configure</li></ul>
          <pre><code>pip install thing</code></pre>
          <a href="/docs/api/ref.html">API</a>
        </main>
        </body></html>
    """,
    "https://example.com/docs/api/ref.html": """
        <html><body><div class="no-main">Reference without main</div></body></html>
    """,
    "https://example.com/blog/news": """
        <html><body><main><h1>News</h1></main></body></html>
    """,
}


@pytest.fixture
def make_client():
    """Factory for in-memory HTTP clients."""
    return FakeHttpClient


@pytest.fixture
def docs_pages():
    """Raw HTML of a small documentation site, keyed by URL."""
    return dict(DOCS_SITE)


@pytest.fixture
def docs_site(docs_pages):
    """Fake client serving a small documentation site."""
    return FakeHttpClient(docs_pages)
