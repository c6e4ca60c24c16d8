"""
Tests for page fetching.
"""

import httpx
import pytest

from entity_intel.config import FetcherSettings
from entity_intel.core.exceptions import ContentFetchError, InputValidationError
from entity_intel.fetcher import PageFetcher, validate_url
from entity_intel.utils.metrics import Metrics


class TestValidateUrl:
    """Tests for URL validation."""

    def test_valid_urls(self):
        assert validate_url(" https://example.com/page ") == "https://example.com/page"
        assert validate_url("http://example.com") == "http://example.com"

    @pytest.mark.parametrize("url", [
        "",
        "example.com",
        "ftp://example.com/file",
        "https://",
        "javascript:alert(1)",
    ])
    def test_invalid_urls(self, url):
        with pytest.raises(InputValidationError):
            validate_url(url)


class TestPageFetcher:
    """Tests for PageFetcher.fetch."""

    def test_fetch_page(self, fake_web, sample_html):
        fake_web.pages["https://example.com/course"] = sample_html

        with PageFetcher(transport=fake_web.transport) as fetcher:
            html = fetcher.fetch("https://example.com/course")

        assert "Best SEO and PPC Course" in html
        assert Metrics.get().get_counter("pages_fetched") == 1

    def test_browser_headers_sent(self, fake_web):
        fake_web.pages["https://example.com/"] = "<html></html>"

        with PageFetcher(transport=fake_web.transport) as fetcher:
            fetcher.fetch("https://example.com/")

        headers = fake_web.requests[0].headers
        assert "Mozilla/5.0" in headers["user-agent"]
        assert headers["accept-language"] == "en-US,en;q=0.9"

    def test_non_200(self, fake_web):
        with PageFetcher(transport=fake_web.transport) as fetcher:
            with pytest.raises(ContentFetchError) as exc_info:
                fetcher.fetch("https://example.com/missing")

        assert exc_info.value.status_code == 404

    def test_oversized_page(self, fake_web):
        fake_web.pages["https://example.com/big"] = "x" * 20_000
        settings = FetcherSettings(max_content_bytes=10_000)

        with PageFetcher(settings, transport=fake_web.transport) as fetcher:
            with pytest.raises(ContentFetchError):
                fetcher.fetch("https://example.com/big")

    def test_invalid_url_makes_no_request(self, fake_web):
        with PageFetcher(transport=fake_web.transport) as fetcher:
            with pytest.raises(InputValidationError):
                fetcher.fetch("not a url")

        assert fake_web.requests == []

    def test_transport_error_retried_once(self):
        calls = []

        def handler(request):
            calls.append(request)
            if len(calls) == 1:
                raise httpx.ConnectError("certificate verify failed", request=request)
            return httpx.Response(200, text="<html>ok</html>")

        with PageFetcher(transport=httpx.MockTransport(handler)) as fetcher:
            html = fetcher.fetch("https://self-signed.example.com/")

        assert html == "<html>ok</html>"
        assert len(calls) == 2

    def test_retry_failure(self, fake_web):
        fake_web.failing_hosts.add("down.example.com")

        with PageFetcher(transport=fake_web.transport) as fetcher:
            with pytest.raises(ContentFetchError):
                fetcher.fetch("https://down.example.com/")

        assert len(fake_web.requests) == 2

    def test_retry_disabled(self, fake_web):
        fake_web.failing_hosts.add("down.example.com")
        settings = FetcherSettings(retry_without_tls_verification=False)

        with PageFetcher(settings, transport=fake_web.transport) as fetcher:
            with pytest.raises(ContentFetchError):
                fetcher.fetch("https://down.example.com/")

        assert len(fake_web.requests) == 1
