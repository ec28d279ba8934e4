# ABOUTME: Unit tests for the per-source circuit breaker.
# ABOUTME: Drives a scripted source with a fake clock through closed, open and half-open states.

import asyncio

import pytest

from shelfmate.errors import SourceError
from shelfmate.sources.breaker import BreakerState, CircuitBreaker
from shelfmate.sources.provider import CatalogSource
from tests.fixtures.stub_sources import StubSource, make_record


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def _lookup(breaker: CircuitBreaker):
    return asyncio.run(breaker.lookup("9780156001311", deadline=1e12))


def _failure() -> SourceError:
    return SourceError("ndl", "HTTP 503", retryable=True)


class TestCircuitBreaker:
    """Tests for CircuitBreaker state transitions."""

    def test_is_a_catalog_source(self) -> None:
        breaker = CircuitBreaker(StubSource("ndl"))
        assert isinstance(breaker, CatalogSource)
        assert breaker.name == "ndl"

    def test_passes_results_through(self) -> None:
        breaker = CircuitBreaker(StubSource("ndl", make_record()))
        assert _lookup(breaker).title == "The Name of the Rose"
        assert breaker.state is BreakerState.CLOSED

    def test_opens_after_threshold_failures(self) -> None:
        """Once open, the wrapped source is not called at all."""
        source = StubSource("ndl", _failure())
        breaker = CircuitBreaker(source, threshold=3, clock=FakeClock())

        for _ in range(3):
            with pytest.raises(SourceError, match="503"):
                _lookup(breaker)
        assert breaker.state is BreakerState.OPEN

        with pytest.raises(SourceError, match="circuit open") as exc_info:
            _lookup(breaker)
        assert exc_info.value.retryable is False
        assert source.calls == 3

    def test_not_found_resets_failure_count(self) -> None:
        """A "not found" answer is a healthy response."""
        source = StubSource("ndl", _failure(), _failure(), None, _failure())
        breaker = CircuitBreaker(source, threshold=3, clock=FakeClock())

        for _ in range(2):
            with pytest.raises(SourceError):
                _lookup(breaker)
        assert _lookup(breaker) is None
        assert breaker.failure_count == 0

        with pytest.raises(SourceError):
            _lookup(breaker)
        assert breaker.state is BreakerState.CLOSED

    def test_half_open_success_closes(self) -> None:
        clock = FakeClock()
        source = StubSource("ndl", _failure(), make_record())
        breaker = CircuitBreaker(source, threshold=1, reset_seconds=60, clock=clock)

        with pytest.raises(SourceError):
            _lookup(breaker)
        assert breaker.state is BreakerState.OPEN

        clock.now += 61
        assert _lookup(breaker) is not None
        assert breaker.state is BreakerState.CLOSED

    def test_half_open_failure_reopens(self) -> None:
        clock = FakeClock()
        source = StubSource("ndl", _failure())
        breaker = CircuitBreaker(source, threshold=2, reset_seconds=60, clock=clock)

        for _ in range(2):
            with pytest.raises(SourceError):
                _lookup(breaker)

        clock.now += 61
        with pytest.raises(SourceError, match="503"):
            _lookup(breaker)
        assert breaker.state is BreakerState.OPEN

        clock.now += 30
        with pytest.raises(SourceError, match="circuit open"):
            _lookup(breaker)
        assert source.calls == 3
