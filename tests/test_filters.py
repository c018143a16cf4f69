"""Tests for link filtering."""

import re

from doccrawl.discovery import CrawlFilter, SeenUrlTracker, accept_url, normalize_url
from doccrawl.models.documents import FilterRule


class TestAcceptUrl:
    """Tests for accept_url."""

    def test_same_domain_accepted(self):
        """Test that links on the base domain are accepted by default."""
        assert accept_url("https://example.com/docs/intro", "example.com", FilterRule()) is True

    def test_other_domain_rejected(self):
        """Test that other hosts are rejected while restricted."""
        assert accept_url("https://other.com/docs/intro", "example.com", FilterRule()) is False

    def test_subdomain_rejected(self):
        """Test that subdomains do not count as the base domain."""
        assert accept_url("https://docs.example.com/", "example.com", FilterRule()) is False

    def test_domain_comparison_ignores_case(self):
        """Test that hostnames are compared case-insensitively."""
        assert accept_url("https://EXAMPLE.com/page", "Example.COM", FilterRule()) is True

    def test_other_domain_accepted_when_unrestricted(self):
        """Test that disabling the restriction allows any host."""
        rule = FilterRule(restrict_to_base_domain=False)
        assert accept_url("https://other.com/page", "example.com", rule) is True

    def test_path_pattern_must_match(self):
        """Test that a path pattern narrows accepted URLs."""
        rule = FilterRule(path_pattern=re.compile(r"^/docs/.*"))
        assert accept_url("https://example.com/docs/intro", "example.com", rule) is True
        assert accept_url("https://example.com/blog/post", "example.com", rule) is False

    def test_path_pattern_applies_without_domain_restriction(self):
        """Test that the pattern still applies to other domains when unrestricted."""
        rule = FilterRule(restrict_to_base_domain=False, path_pattern=re.compile(r"^/docs/"))
        assert accept_url("https://other.com/docs/x", "example.com", rule) is True
        assert accept_url("https://other.com/about", "example.com", rule) is False

    def test_path_pattern_searches_anywhere(self):
        """Test that an unanchored pattern may match mid-path."""
        rule = FilterRule(path_pattern=re.compile(r"reference"))
        assert accept_url("https://example.com/v2/reference/index", "example.com", rule) is True

    def test_empty_path_treated_as_root(self):
        """Test that a bare host is matched as path '/'."""
        rule = FilterRule(path_pattern=re.compile(r"^/$"))
        assert accept_url("https://example.com", "example.com", rule) is True

    def test_relative_url_rejected(self):
        """Test that URLs without scheme or host are rejected."""
        assert accept_url("/docs/intro", "example.com", FilterRule()) is False
        assert accept_url("not a url", "example.com", FilterRule()) is False

    def test_malformed_url_does_not_raise(self):
        """Test that an unparseable URL is rejected instead of raising."""
        assert accept_url("http://[::1", "example.com", FilterRule()) is False

    def test_port_is_ignored_for_domain(self):
        """Test that the hostname comparison ignores ports."""
        assert accept_url("http://example.com:8080/docs", "example.com", FilterRule()) is True


class TestCrawlFilter:
    """Tests for CrawlFilter."""

    def test_callable(self):
        """Test that the filter can be used as a predicate."""
        link_filter = CrawlFilter("example.com", FilterRule(path_pattern=re.compile("^/docs/")))
        assert link_filter("https://example.com/docs/a") is True
        assert link_filter("https://example.com/blog/a") is False

    def test_should_include_matches_call(self):
        """Test that should_include and __call__ agree."""
        link_filter = CrawlFilter("Example.com", FilterRule())
        url = "https://example.com/page"
        assert link_filter.should_include(url) is link_filter(url) is True


class TestNormalizeUrl:
    """Tests for URL normalization."""

    def test_removes_fragment(self):
        """Test that fragments are removed."""
        assert normalize_url("https://example.com/page#section") == "https://example.com/page"

    def test_lowercase_scheme_and_host(self):
        """Test that scheme and host are lowercased but the path is not."""
        assert normalize_url("HTTPS://EXAMPLE.COM/Page") == "https://example.com/Page"

    def test_removes_trailing_slash(self):
        """Test that trailing slashes are dropped except for the root."""
        assert normalize_url("https://example.com/path/") == "https://example.com/path"
        assert normalize_url("https://example.com/") == "https://example.com/"


class TestSeenUrlTracker:
    """Tests for SeenUrlTracker."""

    def test_add_new_url(self):
        """Test adding a new URL."""
        tracker = SeenUrlTracker()
        assert tracker.add("https://example.com/page") is True
        assert len(tracker) == 1

    def test_add_equivalent_url(self):
        """Test that normalized duplicates are rejected."""
        tracker = SeenUrlTracker()
        tracker.add("https://example.com/page/")
        assert tracker.add("https://EXAMPLE.com/page#top") is False
        assert len(tracker) == 1
