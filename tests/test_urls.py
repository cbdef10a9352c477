import pytest

from pagecheck.urls import is_skippable, resolve_url

BASE = "https://example.com/docs/page.html"


class TestIsSkippable:
    @pytest.mark.parametrize(
        "raw",
        ["", "   ", "#", " # ", "javascript:void(0)", "JavaScript:alert(1)", "mailto:me@example.com", "tel:+4712345678", None],
    )
    def test_placeholders(self, raw):
        assert is_skippable(raw)

    @pytest.mark.parametrize("raw", ["/about", "#section", "https://example.com", "page.html?x=1"])
    def test_real_references(self, raw):
        assert not is_skippable(raw)


class TestResolveUrl:
    def test_root_relative(self):
        assert resolve_url("https://example.com/", "/about") == "https://example.com/about"

    def test_path_relative(self):
        assert resolve_url(BASE, "other.html") == "https://example.com/docs/other.html"

    def test_parent_relative(self):
        assert resolve_url(BASE, "../img/logo.png") == "https://example.com/img/logo.png"

    def test_scheme_relative(self):
        assert resolve_url(BASE, "//cdn.example.net/app.js") == "https://cdn.example.net/app.js"

    def test_query_and_fragment_kept(self):
        assert resolve_url(BASE, "?q=1#top") == "https://example.com/docs/page.html?q=1#top"

    def test_host_case_and_default_port_normalized(self):
        assert resolve_url(BASE, "HTTPS://Example.COM:443/a") == "https://example.com/a"
        assert resolve_url(BASE, "http://example.com:80") == "http://example.com/"

    def test_non_default_port_kept(self):
        assert resolve_url(BASE, "http://example.com:8080/x") == "http://example.com:8080/x"

    def test_non_http_scheme_passes_through(self):
        assert resolve_url(BASE, "ftp://files.example.com/a.zip") == "ftp://files.example.com/a.zip"

    def test_whitespace_trimmed(self):
        assert resolve_url(BASE, "  /about  ") == "https://example.com/about"

    @pytest.mark.parametrize("raw", ["http://[::1", "http://example.com:99999/", "http:///path-without-host", None])
    def test_malformed_returns_none(self, raw):
        assert resolve_url(BASE, raw) is None

    def test_empty_fragment_kept(self):
        assert resolve_url("https://example.com/", "#") == "https://example.com/#"
        assert resolve_url("https://example.com/", "/about#") == "https://example.com/about#"
        assert resolve_url("https://example.com/", "/about") == "https://example.com/about"

    def test_fragment_ending_in_hash_not_doubled(self):
        assert resolve_url("https://example.com/", "/a#b#") == "https://example.com/a#b#"
