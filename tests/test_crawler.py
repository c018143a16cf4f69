"""Tests for link extraction and the site crawler."""

import re
from pathlib import Path
from unittest.mock import patch

import pytest
from doccrawl.discovery import CrawlFilter, SiteCrawler, extract_links, url_to_site_path
from doccrawl.models.documents import FilterRule
from doccrawl.models.events import EventType


class TestExtractLinks:
    """Tests for extract_links."""

    def test_resolves_relative_links(self):
        """Test that relative hrefs become absolute."""
        html = '<a href="/docs/a">A</a><a href="b">B</a><a href="https://x.org/c">C</a>'
        links = extract_links(html, "https://example.com/docs/")
        assert links == [
            "https://example.com/docs/a",
            "https://example.com/docs/b",
            "https://x.org/c",
        ]

    def test_skips_non_navigational(self):
        """Test that javascript, mailto, tel, data and fragment links are ignored."""
        html = (
            '<a href="javascript:void(0)">js</a><a href="mailto:a@b.c">mail</a>'
            '<a href="tel:123">tel</a><a href="data:text/plain,x">data</a>'
            '<a href="#top">top</a><a href="">empty</a><a>no href</a>'
        )
        assert extract_links(html, "https://example.com/") == []

    def test_strips_fragment_keeps_query(self):
        """Test fragment removal."""
        links = extract_links('<a href="/p?x=1#frag">p</a>', "https://example.com/")
        assert links == ["https://example.com/p?x=1"]

    def test_honours_base_tag(self):
        """Test that <base href> changes link resolution."""
        html = '<head><base href="https://example.com/v2/"></head><a href="intro">i</a>'
        assert extract_links(html, "https://example.com/other/") == ["https://example.com/v2/intro"]

    def test_ignores_other_schemes(self):
        """Test that non-http schemes are dropped."""
        assert extract_links('<a href="ftp://example.com/f">f</a>', "https://example.com/") == []


class TestUrlToSitePath:
    """Tests for url_to_site_path."""

    @pytest.mark.parametrize(
        "url,expected",
        [
            ("https://example.com/", "example.com/index.html"),
            ("https://example.com", "example.com/index.html"),
            ("https://example.com/docs/", "example.com/docs/index.html"),
            ("https://example.com/docs/intro", "example.com/docs/intro/index.html"),
            ("https://example.com/docs/page.html", "example.com/docs/page.html"),
            ("https://example.com/old/page.htm", "example.com/old/page.htm"),
            ("https://Example.com:8080/a?x=1", "example.com_8080/a/index.html"),
        ],
    )
    def test_paths(self, url, expected):
        """Test mapping URLs to workspace paths."""
        assert url_to_site_path(url) == Path(expected)

    def test_traversal_segments_dropped(self):
        """Test that dot segments cannot escape the workspace."""
        path = url_to_site_path("https://example.com/a/../../etc/passwd")
        assert ".." not in path.parts

    @pytest.mark.parametrize(
        "url",
        [
            "https://example.com/docs/%2Ftmp%2Fescape",
            "https://example.com/docs/..%2F..%2F..%2Fescaped",
            "https://example.com/docs/%2e%2e/%2E%2E/escaped",
            "https://example.com/docs/..%5C..%5Cescaped",
        ],
    )
    def test_encoded_separators_stay_in_host_dir(self, url):
        """Test that percent-encoded separators and dot segments are neutralized."""
        path = url_to_site_path(url)
        assert not path.is_absolute()
        assert ".." not in path.parts
        assert path.parts[0] == "example.com"
        assert path.parts[-1] == "index.html"
        assert all("/" not in part and "\\" not in part for part in path.parts)


class TestSiteCrawler:
    """Tests for SiteCrawler."""

    def docs_filter(self, restrict=True):
        return CrawlFilter(
            "example.com",
            FilterRule(restrict_to_base_domain=restrict, path_pattern=re.compile(r"^/docs/.*")),
        )

    @pytest.mark.asyncio
    async def test_crawls_accepted_pages(self, tmp_path, docs_site):
        """Test that only accepted links are followed and saved."""
        crawler = SiteCrawler(docs_site)

        result = await crawler.fetch(
            "https://example.com/docs/",
            tmp_path,
            self.docs_filter(),
            max_depth=10,
            delay=0,
        )

        assert list(result.pages) == [
            "https://example.com/docs/",
            "https://example.com/docs/guide",
            "https://example.com/docs/api/ref.html",
        ]
        assert "https://example.com/blog/news" not in docs_site.requested
        assert "https://other.example.org/docs/x" not in docs_site.requested
        assert (tmp_path / "example.com" / "docs" / "index.html").exists()
        assert (tmp_path / "example.com" / "docs" / "guide" / "index.html").exists()
        assert (tmp_path / "example.com" / "docs" / "api" / "ref.html").exists()

    @pytest.mark.asyncio
    async def test_each_page_requested_once(self, tmp_path, docs_site):
        """Test de-duplication of links found on several pages."""
        await SiteCrawler(docs_site).fetch(
            "https://example.com/docs/", tmp_path, self.docs_filter(), max_depth=10, delay=0
        )
        assert docs_site.requested.count("https://example.com/docs/guide") == 1

    @pytest.mark.asyncio
    async def test_records_followed_links(self, tmp_path, docs_site):
        """Test that result.links only holds accepted links."""
        result = await SiteCrawler(docs_site).fetch(
            "https://example.com/docs/", tmp_path, self.docs_filter(), max_depth=10, delay=0
        )
        followed = result.links["https://example.com/docs/"]
        assert set(followed) == {"https://example.com/docs/guide"}

    @pytest.mark.asyncio
    async def test_max_depth(self, tmp_path, docs_site):
        """Test that links beyond max_depth are not followed."""
        result = await SiteCrawler(docs_site).fetch(
            "https://example.com/docs/", tmp_path, self.docs_filter(), max_depth=1, delay=0
        )
        assert list(result.pages) == [
            "https://example.com/docs/",
            "https://example.com/docs/guide",
        ]

    @pytest.mark.asyncio
    async def test_rejected_start_url(self, tmp_path, docs_site):
        """Test that the predicate is consulted for the start URL too."""
        result = await SiteCrawler(docs_site).fetch(
            "https://example.com/blog/news", tmp_path, self.docs_filter(), max_depth=10, delay=0
        )
        assert result.pages == {}
        assert docs_site.requested == []

    @pytest.mark.asyncio
    async def test_unrestricted_domain(self, tmp_path, docs_site):
        """Test following other hosts when the domain restriction is off."""
        docs_site.pages["https://other.example.org/docs/x"] = "<main>x</main>"
        result = await SiteCrawler(docs_site).fetch(
            "https://example.com/docs/", tmp_path, self.docs_filter(restrict=False), max_depth=10, delay=0
        )
        assert "https://other.example.org/docs/x" in result.pages
        assert (tmp_path / "other.example.org" / "docs" / "x" / "index.html").exists()

    @pytest.mark.asyncio
    async def test_skips_non_html_and_missing(self, tmp_path, make_client):
        """Test that 404s and non-HTML responses are not saved."""
        client = make_client(
            {
                "https://example.com/": '<a href="/data.json">j</a><a href="/gone">g</a>',
                "https://example.com/data.json": ("{}", "application/json"),
            }
        )
        result = await SiteCrawler(client).fetch(
            "https://example.com/", tmp_path, CrawlFilter("example.com", FilterRule()), max_depth=5, delay=0
        )
        assert list(result.pages) == ["https://example.com/"]
        assert "https://example.com/gone" in client.requested

    @pytest.mark.asyncio
    async def test_page_error_does_not_stop_crawl(self, tmp_path, make_client):
        """Test that a network error on a linked page is tolerated."""
        client = make_client(
            {
                "https://example.com/": '<a href="/bad">b</a><a href="/good">g</a>',
                "https://example.com/good": "<main>ok</main>",
            }
        )
        client.errors["https://example.com/bad"] = ConnectionError("reset")

        result = await SiteCrawler(client).fetch(
            "https://example.com/", tmp_path, CrawlFilter("example.com", FilterRule()), max_depth=5, delay=0
        )
        assert "https://example.com/good" in result.pages

    @pytest.mark.asyncio
    async def test_start_url_error_raises(self, tmp_path, make_client):
        """Test that failing to fetch the start URL propagates."""
        client = make_client({})
        client.errors["https://example.com/"] = ConnectionError("refused")

        with pytest.raises(ConnectionError):
            await SiteCrawler(client).fetch(
                "https://example.com/", tmp_path, CrawlFilter("example.com", FilterRule()), max_depth=5, delay=0
            )

    @pytest.mark.asyncio
    async def test_redirect_to_rejected_url(self, tmp_path, make_client):
        """Test that a redirect leaving the accepted set is not saved."""
        client = make_client(
            {
                "https://example.com/docs/": '<a href="/docs/moved">m</a>',
                "https://example.com/blog/landing": "<main>blog</main>",
            }
        )
        client.redirects["https://example.com/docs/moved"] = "https://example.com/blog/landing"

        result = await SiteCrawler(client).fetch(
            "https://example.com/docs/", tmp_path, self.docs_filter(), max_depth=5, delay=0
        )
        assert list(result.pages) == ["https://example.com/docs/"]

    @pytest.mark.asyncio
    async def test_emits_page_fetched(self, tmp_path, docs_site):
        """Test PAGE_FETCHED events with a running count."""
        events = []
        await SiteCrawler(docs_site, emit=events.append).fetch(
            "https://example.com/docs/", tmp_path, self.docs_filter(), max_depth=10, delay=0
        )
        assert [e.type for e in events] == [EventType.PAGE_FETCHED] * 3
        assert [e.current for e in events] == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_encoded_traversal_link_saved_inside_workspace(self, tmp_path, make_client):
        """Test that a link with encoded ../ segments is written under the workspace."""
        escape_url = "https://example.com/docs/..%2F..%2F..%2Fescaped"
        client = make_client(
            {
                "https://example.com/docs/": '<a href="/docs/..%2F..%2F..%2Fescaped">x</a>',
                escape_url: "<main>escaped</main>",
            }
        )
        workspace = tmp_path / "out" / ".crawl"

        result = await SiteCrawler(client).fetch(
            "https://example.com/docs/", workspace, self.docs_filter(), max_depth=5, delay=0
        )

        assert escape_url in result.pages
        resolved_workspace = workspace.resolve()
        for path in result.pages.values():
            assert resolved_workspace in path.resolve().parents
        for path in tmp_path.rglob("*"):
            if path.is_file():
                assert resolved_workspace in path.resolve().parents
        assert not (tmp_path / "escaped").exists()
        assert not (tmp_path / "out" / "escaped").exists()

    @pytest.mark.asyncio
    async def test_path_outside_workspace_not_written(self, tmp_path, docs_site):
        """Test that a page mapped outside the workspace is skipped."""
        workspace = tmp_path / "out" / ".crawl"

        with patch(
            "doccrawl.discovery.crawler.url_to_site_path",
            return_value=Path("..", "..", "outside", "index.html"),
        ):
            result = await SiteCrawler(docs_site).fetch(
                "https://example.com/docs/", workspace, self.docs_filter(), max_depth=5, delay=0
            )

        assert result.pages == {}
        assert not (tmp_path / "outside").exists()
