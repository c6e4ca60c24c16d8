"""
Page fetching.

Retrieves raw markup for URL-sourced analysis with browser-like
headers. A transport failure is retried once without TLS verification,
since many small sites serve broken certificate chains.
"""

from urllib.parse import urlparse

import httpx

from entity_intel.config.settings import FetcherSettings
from entity_intel.core.exceptions import ContentFetchError, InputValidationError
from entity_intel.utils.logging import get_logger
from entity_intel.utils.metrics import Metrics

logger = get_logger(__name__)

BROWSER_HEADERS = {
    "Accept": (
        "text/html,application/xhtml+xml,application/xml;q=0.9,"
        "image/avif,image/webp,image/apng,*/*;q=0.8"
    ),
    "Accept-Language": "en-US,en;q=0.9",
    "Accept-Encoding": "gzip, deflate",
}


def validate_url(url: str) -> str:
    """
    Check that a URL is an absolute http(s) URL.

    Returns:
        The stripped URL

    Raises:
        InputValidationError: For anything else
    """
    candidate = (url or "").strip()
    parsed = urlparse(candidate)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise InputValidationError("Please provide a valid http or https URL", value=candidate)
    return candidate


class PageFetcher:
    """
    Fetches page markup.

    Example:
        >>> with PageFetcher(settings.fetcher) as fetcher:
        ...     html = fetcher.fetch("https://example.com/")
    """

    def __init__(
        self,
        settings: FetcherSettings | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """
        Initialize fetcher.

        Args:
            settings: Fetcher settings
            transport: Optional httpx transport (tests inject a mock)
        """
        self.settings = settings or FetcherSettings()
        self._transport = transport
        self._client = self._build_client(verify=True)
        self._insecure_client: httpx.Client | None = None

    def _build_client(self, verify: bool) -> httpx.Client:
        return httpx.Client(
            transport=self._transport,
            verify=verify,
            timeout=self.settings.timeout_seconds,
            follow_redirects=True,
            max_redirects=self.settings.max_redirects,
            headers={"User-Agent": self.settings.user_agent, **BROWSER_HEADERS},
        )

    def fetch(self, url: str) -> str:
        """
        Fetch a page's markup.

        Args:
            url: Absolute http(s) URL

        Returns:
            Decoded response body

        Raises:
            InputValidationError: If the URL is malformed
            ContentFetchError: If the page is unreachable, answers with a
                non-200 status, or exceeds the size limit
        """
        url = validate_url(url)

        try:
            html = self._fetch_with(self._client, url)
        except httpx.TransportError as e:
            if not self.settings.retry_without_tls_verification:
                raise ContentFetchError(f"Could not retrieve content: {e}", url=url) from e
            logger.warning(
                f"Request failed for {url} ({e}), retrying without TLS verification")
            if self._insecure_client is None:
                self._insecure_client = self._build_client(verify=False)
            try:
                html = self._fetch_with(self._insecure_client, url)
            except httpx.HTTPError as retry_error:
                raise ContentFetchError(
                    f"Could not retrieve content: {retry_error}", url=url) from retry_error
        except httpx.HTTPError as e:
            raise ContentFetchError(f"Could not retrieve content: {e}", url=url) from e

        Metrics.get().increment("pages_fetched")
        return html

    def _fetch_with(self, client: httpx.Client, url: str) -> str:
        with client.stream("GET", url) as response:
            if response.status_code != 200:
                raise ContentFetchError(
                    f"Could not retrieve content: HTTP {response.status_code}",
                    url=url,
                    status_code=response.status_code,
                )

            limit = self.settings.max_content_bytes
            chunks: list[bytes] = []
            size = 0
            for chunk in response.iter_bytes():
                size += len(chunk)
                if size > limit:
                    raise ContentFetchError(
                        f"Could not retrieve content: page exceeds {limit} bytes",
                        url=url,
                        details={"max_content_bytes": limit},
                    )
                chunks.append(chunk)

            encoding = response.encoding or "utf-8"

        logger.debug(f"Fetched {size} bytes from {url}")
        return b"".join(chunks).decode(encoding, errors="replace")

    def close(self) -> None:
        """Close the underlying HTTP clients."""
        self._client.close()
        if self._insecure_client is not None:
            self._insecure_client.close()

    def __enter__(self) -> "PageFetcher":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
