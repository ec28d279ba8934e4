# ABOUTME: Scripted in-memory catalog sources for resolver, manager and CLI tests.
# ABOUTME: Each lookup plays the next scripted outcome: a record, None, or a raised SourceError.

import asyncio
from dataclasses import replace

from shelfmate.sources.types import SourceRecord


def make_record(source: str = "ndl", isbn: str = "9780156001311", **fields) -> SourceRecord:
    """A SourceRecord with sensible defaults for tests."""
    values = {"title": "The Name of the Rose", "author": "Umberto Eco"}
    values.update(fields)
    return SourceRecord(isbn=isbn, source=source, **values)


class StubSource:
    """CatalogSource double that replays scripted outcomes.

    The last outcome repeats once the script runs out. ``delay`` makes each
    lookup sleep first, so cancellation and ordering can be observed.
    """

    def __init__(self, name: str, *outcomes: object, delay: float = 0.0) -> None:
        self._name = name
        self._outcomes = list(outcomes) or [None]
        self._delay = delay
        self.calls = 0
        self.deadlines: list[float] = []
        self.cancelled = False

    @property
    def name(self) -> str:
        return self._name

    async def lookup(self, isbn: str, deadline: float) -> SourceRecord | None:
        self.calls += 1
        self.deadlines.append(deadline)
        outcome = self._outcomes[min(self.calls, len(self._outcomes)) - 1]
        if self._delay:
            try:
                await asyncio.sleep(self._delay)
            except asyncio.CancelledError:
                self.cancelled = True
                raise
        if isinstance(outcome, Exception):
            raise outcome
        if isinstance(outcome, SourceRecord):
            return replace(outcome)
        return None
