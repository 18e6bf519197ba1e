"""Tests for URL validation in app.services.fetcher."""

import asyncio

import pytest

from app.services.fetcher import fetch_url, validate_url


class TestValidateUrl:
    @pytest.mark.parametrize("url", ["ftp://example.com/", "file:///etc/passwd", "example.com"])
    def test_rejects_non_http_schemes(self, url):
        with pytest.raises(ValueError, match="not allowed"):
            validate_url(url)

    def test_rejects_missing_hostname(self):
        with pytest.raises(ValueError, match="hostname"):
            validate_url("http:///path")

    @pytest.mark.parametrize(
        "url",
        ["http://127.0.0.1/", "http://10.0.0.5/admin", "http://192.168.1.1/"],
    )
    def test_rejects_private_addresses(self, url):
        with pytest.raises(ValueError, match="private"):
            validate_url(url)

    def test_accepts_public_address(self):
        validate_url("https://93.184.216.34/")

    def test_rejects_unparseable_port(self):
        with pytest.raises(ValueError, match="Invalid URL"):
            validate_url("http://ex.com:abc/blog/bad")

    def test_rejects_unparseable_host(self):
        with pytest.raises(ValueError):
            validate_url("http://[oops/x")


class TestFetchUrl:
    def test_invalid_url_fails_before_any_request(self):
        with pytest.raises(ValueError):
            asyncio.run(fetch_url("javascript:alert(1)"))
