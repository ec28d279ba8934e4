# ABOUTME: Async HTTP client shared by the catalog source adapters.
# ABOUTME: Enforces the caller's deadline, rate limits, and maps transport faults to SourceError.

import asyncio
import logging
import time
from typing import Any

import httpx

from shelfmate import __version__
from shelfmate.errors import SourceError

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})

# Raised by the parsers when a payload decodes but does not have the expected shape.
PAYLOAD_SHAPE_ERRORS = (AttributeError, IndexError, KeyError, TypeError, ValueError)


def malformed_payload(source: str, exc: Exception) -> SourceError:
    """Non-retryable SourceError for a payload the parser could not read."""
    return SourceError(
        source, f"malformed payload: {type(exc).__name__}: {exc}", retryable=False
    )


def status_error(source: str, response: httpx.Response) -> SourceError | None:
    """Map a non-2xx response to a SourceError, or None for success codes.

    429 and 5xx are transient; every other 4xx will not clear by retrying.
    """
    status = response.status_code
    if status < 400:
        return None
    if status in RETRYABLE_STATUS_CODES:
        return SourceError(source, f"HTTP {status} from {response.url}", retryable=True)
    return SourceError(source, f"HTTP {status} from {response.url}", retryable=False)


def parse_json(source: str, response: httpx.Response) -> dict[str, Any]:
    """Decode a JSON object body or raise a non-retryable SourceError."""
    try:
        data = response.json()
    except ValueError as exc:
        raise SourceError(source, f"malformed JSON from {response.url}", retryable=False) from exc
    if not isinstance(data, dict):
        raise SourceError(source, f"unexpected JSON shape from {response.url}", retryable=False)
    return data


class SourceHttpClient:
    """Deadline-aware async HTTP client for catalog lookups.

    Wraps httpx.AsyncClient. Each request is bounded by the absolute deadline
    it is given; no retries happen here, since the resolver owns the retry
    policy. Consecutive requests from the same source are spaced by
    ``min_request_interval``; different sources do not wait on each other.
    """

    def __init__(
        self,
        *,
        min_request_interval: float = 0.1,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        client_kwargs: dict[str, Any] = {
            "headers": {"User-Agent": f"shelfmate/{__version__}"},
            "follow_redirects": True,
        }
        if transport is not None:
            client_kwargs["transport"] = transport
        self._client = httpx.AsyncClient(**client_kwargs)
        self._min_interval = min_request_interval
        self._last_request_at: dict[str, float] = {}

    async def get(
        self,
        source: str,
        url: str,
        *,
        deadline: float,
        params: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Send a GET request that must complete before ``deadline``.

        Args:
            source: Name of the calling source, used in error messages.
            url: The URL to request.
            deadline: Absolute event-loop time by which the response is due.
            params: Optional query parameters.

        Returns:
            The response, whatever its status code.

        Raises:
            SourceError: Retryable, if the deadline passes or the transport
                fails before a response arrives.
        """
        loop = asyncio.get_running_loop()
        await self._rate_limit(source, deadline - loop.time())

        remaining = deadline - loop.time()
        if remaining <= 0:
            raise SourceError(source, "deadline exceeded before request", retryable=True)

        try:
            response = await asyncio.wait_for(
                self._client.get(url, params=params, timeout=remaining),
                timeout=remaining,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
            raise SourceError(source, f"timed out requesting {url}", retryable=True) from exc
        except httpx.HTTPError as exc:
            raise SourceError(source, f"request failed: {url}: {exc}", retryable=True) from exc

        logger.debug("%s GET %s -> %d", source, url, response.status_code)
        return response

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _rate_limit(self, source: str, budget: float) -> None:
        """Sleep if needed to keep the minimum interval between one source's requests."""
        if self._min_interval <= 0:
            return
        last = self._last_request_at.get(source)
        if last is not None:
            elapsed = time.monotonic() - last
            if elapsed < self._min_interval:
                await asyncio.sleep(max(0.0, min(self._min_interval - elapsed, budget)))
        self._last_request_at[source] = time.monotonic()
