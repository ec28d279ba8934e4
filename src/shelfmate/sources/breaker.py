# ABOUTME: Per-source circuit breaker that stops calling a catalog after repeated failures.
# ABOUTME: Wraps any CatalogSource and short-circuits with a non-retryable SourceError while open.

import logging
import time
from collections.abc import Callable
from enum import Enum

from shelfmate.errors import SourceError
from shelfmate.sources.provider import CatalogSource
from shelfmate.sources.types import SourceRecord

logger = logging.getLogger(__name__)


class BreakerState(Enum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitBreaker:
    """Decorates a CatalogSource with failure counting.

    After ``threshold`` consecutive SourceErrors the breaker opens and every
    lookup fails fast for ``reset_seconds``. The first lookup after that
    window is let through (half-open); success closes the breaker, failure
    re-opens it. A "not found" answer counts as success.
    """

    def __init__(
        self,
        source: CatalogSource,
        *,
        threshold: int = 5,
        reset_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._source = source
        self._threshold = threshold
        self._reset_seconds = reset_seconds
        self._clock = clock
        self._failures = 0
        self._opened_at = 0.0
        self._state = BreakerState.CLOSED

    @property
    def name(self) -> str:
        return self._source.name

    @property
    def state(self) -> BreakerState:
        return self._state

    @property
    def failure_count(self) -> int:
        return self._failures

    async def lookup(self, isbn: str, deadline: float) -> SourceRecord | None:
        if self._state is BreakerState.OPEN:
            if self._clock() - self._opened_at < self._reset_seconds:
                raise SourceError(self.name, "circuit open, skipping source", retryable=False)
            self._state = BreakerState.HALF_OPEN
            logger.info("Circuit for %s half-open, trying one request", self.name)

        try:
            record = await self._source.lookup(isbn, deadline)
        except SourceError:
            self._record_failure()
            raise
        self._record_success()
        return record

    def reset(self) -> None:
        self._failures = 0
        self._state = BreakerState.CLOSED

    def _record_success(self) -> None:
        if self._state is not BreakerState.CLOSED:
            logger.info("Circuit for %s closed", self.name)
        self.reset()

    def _record_failure(self) -> None:
        self._failures += 1
        if self._state is BreakerState.HALF_OPEN or self._failures >= self._threshold:
            self._state = BreakerState.OPEN
            self._opened_at = self._clock()
            logger.warning(
                "Circuit for %s opened after %d consecutive failures",
                self.name,
                self._failures,
            )
