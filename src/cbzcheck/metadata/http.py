# ABOUTME: HTTP client abstraction for scraping the bibliographic source.
# ABOUTME: Provides rate limiting, a bounded timeout, and injectable transport for testing.

import logging
import threading
import time
from typing import Protocol, runtime_checkable

import httpx

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0
DEFAULT_REQUEST_INTERVAL = 1.0


class MetadataFetchError(Exception):
    """Raised when an HTTP request to the bibliographic source fails."""


@runtime_checkable
class HttpClient(Protocol):
    """Protocol for HTTP GET operations returning an HTML document."""

    def get_html(self, url: str, params: dict[str, str] | None = None) -> str: ...


class CbzcheckHttpClient:
    """HTTP client with rate limiting for HTML page fetches.

    Wraps httpx.Client with a minimum interval between requests so the
    source does not ban us. Failures are raised, never retried.
    """

    def __init__(
        self,
        *,
        referer: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        min_request_interval: float = DEFAULT_REQUEST_INTERVAL,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        headers = {"User-Agent": "cbzcheck/0.1.0", "Accept": "text/html"}
        if referer:
            headers["Referer"] = referer
        self._client = httpx.Client(
            headers=headers, timeout=timeout, follow_redirects=True, transport=transport
        )
        self._min_interval = min_request_interval
        self._next_request_at = 0.0
        self._lock = threading.Lock()

    def get_html(self, url: str, params: dict[str, str] | None = None) -> str:
        """Send a GET request and return the response body as text.

        Args:
            url: The URL to request.
            params: Optional query parameters.

        Returns:
            The decoded response body.

        Raises:
            MetadataFetchError: On transport errors, timeouts, or non-200 status.
        """
        self._wait_turn()
        logger.debug("GET %s %s", url, params or "")

        try:
            response = self._client.get(url, params=params)
        except httpx.TimeoutException as exc:
            raise MetadataFetchError(f"Request timed out: {url}: {exc}") from exc
        except httpx.HTTPError as exc:
            raise MetadataFetchError(f"Request failed: {url}: {exc}") from exc

        if response.status_code != 200:
            raise MetadataFetchError(f"HTTP {response.status_code} from {url}")

        return response.text

    def close(self) -> None:
        self._client.close()

    def _wait_turn(self) -> None:
        """Block until min_request_interval has passed since the previous request."""
        if self._min_interval <= 0:
            return
        with self._lock:
            delay = self._next_request_at - time.monotonic()
            if delay > 0:
                time.sleep(delay)
            self._next_request_at = time.monotonic() + self._min_interval
