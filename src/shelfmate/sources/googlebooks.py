# ABOUTME: Google Books catalog source using the v1 volumes search endpoint.
# ABOUTME: Tracks daily quota exhaustion so a spent key is not retried until the next day.

import logging
from collections.abc import Callable
from datetime import date, datetime, timezone

import httpx

from shelfmate.errors import SourceError
from shelfmate.sources.googlebooks_parser import (
    SOURCE_NAME,
    parse_error_reason,
    parse_volumes_response,
)
from shelfmate.sources.http import (
    PAYLOAD_SHAPE_ERRORS,
    SourceHttpClient,
    malformed_payload,
    parse_json,
    status_error,
)
from shelfmate.sources.types import SourceRecord

logger = logging.getLogger(__name__)

GOOGLE_BOOKS_URL = "https://www.googleapis.com/books/v1/volumes"

_DAILY_QUOTA_REASONS = frozenset({"dailyLimitExceeded", "quotaExceeded"})
_RATE_LIMIT_REASONS = frozenset({"userRateLimitExceeded", "rateLimitExceeded"})


def _utc_today() -> date:
    return datetime.now(timezone.utc).date()


class GoogleBooksSource:
    """CatalogSource backed by the Google Books API.

    Args:
        http_client: Shared deadline-aware HTTP client.
        api_key: Google API key. Without one every lookup fails with a
            non-retryable SourceError.
        base_url: Volumes endpoint, overridable for tests.
        today: Returns the current UTC date; drives the daily quota reset.
    """

    def __init__(
        self,
        http_client: SourceHttpClient,
        api_key: str | None,
        *,
        base_url: str = GOOGLE_BOOKS_URL,
        today: Callable[[], date] = _utc_today,
    ) -> None:
        self._http = http_client
        self._api_key = api_key
        self._base_url = base_url
        self._today = today
        self._quota_exhausted_on: date | None = None

    @property
    def name(self) -> str:
        return SOURCE_NAME

    @property
    def quota_exhausted(self) -> bool:
        if self._quota_exhausted_on is None:
            return False
        if self._quota_exhausted_on != self._today():
            self._quota_exhausted_on = None
            logger.info("Google Books daily quota window reset")
            return False
        return True

    async def lookup(self, isbn: str, deadline: float) -> SourceRecord | None:
        if not self._api_key:
            raise SourceError(self.name, "API key is not configured", retryable=False)
        if self.quota_exhausted:
            raise SourceError(self.name, "daily quota exhausted", retryable=False)

        params = {"q": f"isbn:{isbn}", "key": self._api_key, "maxResults": "1"}
        response = await self._http.get(self.name, self._base_url, params=params, deadline=deadline)

        if response.status_code >= 400:
            raise self._error_for(response)

        data = parse_json(self.name, response)
        try:
            record = parse_volumes_response(data, isbn)
        except PAYLOAD_SHAPE_ERRORS as exc:
            raise malformed_payload(self.name, exc) from exc
        if record is None:
            logger.debug("Google Books has no usable volume for %s", isbn)
        return record

    def _error_for(self, response: httpx.Response) -> SourceError:
        status = response.status_code
        try:
            reason, message = parse_error_reason(response.json())
        except PAYLOAD_SHAPE_ERRORS:
            reason, message = None, None
        detail = f"HTTP {status}" + (f" ({reason}: {message})" if reason else "")

        if status == 401:
            return SourceError(self.name, f"authentication failed, {detail}", retryable=False)
        if status == 403:
            if reason in _DAILY_QUOTA_REASONS:
                self._quota_exhausted_on = self._today()
                logger.warning("Google Books daily quota exhausted; skipping until tomorrow")
                return SourceError(self.name, f"daily quota exhausted, {detail}", retryable=False)
            if reason in _RATE_LIMIT_REASONS:
                return SourceError(self.name, f"rate limited, {detail}", retryable=True)
            return SourceError(self.name, f"forbidden, {detail}", retryable=False)
        if status == 400:
            return SourceError(self.name, f"bad request, {detail}", retryable=False)

        error = status_error(self.name, response)
        assert error is not None
        return error
