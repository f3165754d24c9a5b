"""Unit tests for source URL domain extraction."""

import pytest

from feedrank.ranker.domain import extract_domain


class TestExtractDomain:
    """Tests for extract_domain."""

    def test_plain_host(self) -> None:
        """Host is returned as-is when already normalized."""
        assert extract_domain("https://laravel.com/docs") == "laravel.com"

    def test_strips_www_and_lowercases(self) -> None:
        """Leading www. is stripped and the host lowercased."""
        assert extract_domain("https://WWW.Laravel-News.com/a?b=c") == "laravel-news.com"

    def test_keeps_inner_www(self) -> None:
        """Only a leading www. label is stripped."""
        assert extract_domain("https://blog.www.example.com/") == "blog.www.example.com"

    def test_port_is_ignored(self) -> None:
        """Ports do not become part of the domain key."""
        assert extract_domain("http://localhost:8080/post") == "localhost"

    @pytest.mark.parametrize(
        "url",
        [None, "", "not a url", "laravel.com/no-scheme", "http://[::1", "mailto:x@y.z"],
    )
    def test_unparsable_is_unknown(self, url: str | None) -> None:
        """Missing or hostless URLs degrade to 'unknown'."""
        assert extract_domain(url) == "unknown"
