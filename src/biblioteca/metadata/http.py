# ABOUTME: HTTP client used by the suggestion lookups against remote book catalogs.
# ABOUTME: Provides rate limiting, retry with backoff, and an injectable transport for testing.

import logging
import time
from typing import Any, Protocol, runtime_checkable

import httpx

logger = logging.getLogger(__name__)

_RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}
USER_AGENT = "biblioteca/0.1.0"


class MetadataFetchError(Exception):
    """Raised when an HTTP request to a remote catalog fails."""


@runtime_checkable
class HttpClient(Protocol):
    """Protocol for JSON GET requests against remote catalog APIs."""

    def get(self, url: str, params: dict[str, str] | None = None) -> dict[str, Any]: ...


class BibliotecaHttpClient:
    """httpx-backed client with a minimum request interval and retries.

    Transient failures (429, 5xx) are retried with exponential backoff;
    anything else fails immediately with MetadataFetchError.
    """

    def __init__(
        self,
        *,
        min_request_interval: float = 0.1,
        max_retries: int = 3,
        retry_delay: float = 1.0,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._client = httpx.Client(
            headers={"User-Agent": USER_AGENT},
            timeout=timeout,
            transport=transport,
        )
        self._min_interval = min_request_interval
        self._max_retries = max_retries
        self._retry_delay = retry_delay
        self._last_request_time: float = 0.0

    def get(self, url: str, params: dict[str, str] | None = None) -> dict[str, Any]:
        """Send a GET request and return the decoded JSON body.

        Raises:
            MetadataFetchError: On transport errors, non-retryable statuses,
                undecodable bodies, or exhausted retries.
        """
        self._rate_limit()

        attempts = 1 + self._max_retries
        status = 0
        for attempt in range(attempts):
            try:
                response = self._client.get(url, params=params)
            except httpx.HTTPError as exc:
                raise MetadataFetchError(f"Request failed: {url}: {exc}") from exc
            status = response.status_code

            if status == 200:
                try:
                    return response.json()
                except ValueError as exc:
                    raise MetadataFetchError(f"Invalid JSON from {url}") from exc

            if status not in _RETRYABLE_STATUS_CODES:
                raise MetadataFetchError(f"HTTP {status} from {url}")

            if attempt < attempts - 1:
                delay = self._retry_delay * (2**attempt)
                logger.warning(
                    "HTTP %d from %s, retrying in %.1fs (attempt %d/%d)",
                    status,
                    url,
                    delay,
                    attempt + 1,
                    self._max_retries,
                )
                time.sleep(delay)

        raise MetadataFetchError(f"HTTP {status} from {url} after {attempts} attempts")

    def close(self) -> None:
        self._client.close()

    def _rate_limit(self) -> None:
        """Sleep if needed to keep the minimum interval between requests."""
        if self._min_interval <= 0:
            return
        elapsed = time.monotonic() - self._last_request_time
        if self._last_request_time > 0 and elapsed < self._min_interval:
            time.sleep(self._min_interval - elapsed)
        self._last_request_time = time.monotonic()
