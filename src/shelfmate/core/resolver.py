# ABOUTME: Book resolver: turns a raw ISBN into a persisted catalog book.
# ABOUTME: Queries every catalog source concurrently and keeps the best answer by priority.

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import replace

from shelfmate.db.catalog import BookCatalog
from shelfmate.db.mapping import Book
from shelfmate.errors import BookNotFoundError, BookSearchFailedError, SourceError
from shelfmate.isbn import normalize
from shelfmate.sources.provider import CatalogSource
from shelfmate.sources.types import SourceRecord

logger = logging.getLogger(__name__)


class BookResolver:
    """Resolve ISBNs against the catalog, falling back to external sources.

    Args:
        catalog: Store of already-resolved books.
        sources: Catalog sources, highest priority first.
        per_source_timeout: Upper bound in seconds for one source attempt.
        request_budget: Upper bound in seconds for the whole fan-out,
            retries included.
    """

    def __init__(
        self,
        catalog: BookCatalog,
        sources: Sequence[CatalogSource],
        *,
        per_source_timeout: float = 5.0,
        request_budget: float = 8.0,
    ) -> None:
        self._catalog = catalog
        self._sources = list(sources)
        self._per_source_timeout = per_source_timeout
        self._request_budget = request_budget

    async def resolve(self, isbn: str) -> Book:
        """Return the catalog book for ``isbn``, fetching it if necessary.

        A book already in the catalog is returned as stored, without any
        source being contacted. Otherwise all sources are queried at once and
        the record from the highest-priority source that has one wins, even
        if a lower-priority source answered sooner.

        Raises:
            InvalidIsbnError: If ``isbn`` is malformed.
            BookNotFoundError: If no source has the book.
            BookSearchFailedError: If every source failed.
        """
        canonical = normalize(isbn)

        existing = self._catalog.find_by_isbn(canonical)
        if existing is not None:
            logger.debug("ISBN %s already cataloged as book %d", canonical, existing.id)
            return existing

        record = await self._search(canonical)
        return self._catalog.create_if_absent(replace(record, isbn=canonical))

    async def _search(self, isbn: str) -> SourceRecord:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self._request_budget
        tasks = [
            asyncio.create_task(self._query(source, isbn, deadline), name=f"lookup-{source.name}")
            for source in self._sources
        ]

        errors: list[SourceError] = []
        misses: list[str] = []
        try:
            for source, task in zip(self._sources, tasks):
                try:
                    record = await task
                except SourceError as exc:
                    errors.append(exc)
                    continue
                if record is None:
                    misses.append(source.name)
                    continue
                logger.info("Resolved %s from %s", isbn, source.name)
                return record
        finally:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)

        for error in errors:
            logger.warning("Lookup of %s failed: %s", isbn, error)
        if misses or not errors:
            logger.info("No source has ISBN %s (not found in: %s)", isbn, ", ".join(misses))
            raise BookNotFoundError(isbn, errors)
        raise BookSearchFailedError(isbn, errors)

    async def _query(self, source: CatalogSource, isbn: str, deadline: float) -> SourceRecord | None:
        """Look up one source, retrying a retryable failure once within the budget."""
        loop = asyncio.get_running_loop()
        retried = False
        while True:
            attempt_deadline = min(deadline, loop.time() + self._per_source_timeout)
            try:
                return await asyncio.wait_for(
                    source.lookup(isbn, attempt_deadline),
                    timeout=max(0.0, attempt_deadline - loop.time()),
                )
            except asyncio.TimeoutError as exc:
                error = SourceError(source.name, "lookup timed out", retryable=True)
                error.__cause__ = exc
            except SourceError as exc:
                error = exc

            if not error.retryable or retried or loop.time() >= deadline:
                raise error
            retried = True
            logger.info("Retrying %s for %s after: %s", source.name, isbn, error.detail)
