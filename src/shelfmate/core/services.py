# ABOUTME: Wires settings, the store connection and the catalog sources into ready managers.
# ABOUTME: resolver_session owns the shared HTTP client and closes it when resolution is done.

import logging
import sqlite3
from collections.abc import AsyncIterator, Callable, Sequence
from contextlib import asynccontextmanager

import httpx

from shelfmate.config import Settings
from shelfmate.core.resolver import BookResolver
from shelfmate.db.catalog import BookCatalog
from shelfmate.sources import build_sources
from shelfmate.sources.http import SourceHttpClient
from shelfmate.sources.provider import CatalogSource

logger = logging.getLogger(__name__)

SourceFactory = Callable[[Settings, SourceHttpClient], Sequence[CatalogSource]]


@asynccontextmanager
async def resolver_session(
    settings: Settings,
    conn: sqlite3.Connection,
    *,
    source_factory: SourceFactory = build_sources,
    transport: httpx.AsyncBaseTransport | None = None,
) -> AsyncIterator[BookResolver]:
    """Yield a BookResolver backed by the configured sources.

    Circuit breakers and the Google Books quota flag live on the adapters
    built here, so they carry across every resolve within one session and
    are discarded when it closes. A long-lived caller keeps one session open;
    each CLI command opens its own and starts from closed breakers.

    Args:
        settings: Source list, timeouts and breaker parameters.
        conn: Store connection for the catalog.
        source_factory: Builds the adapters; swapped out in tests.
        transport: Optional httpx transport for the shared client.
    """
    http_client = SourceHttpClient(
        min_request_interval=settings.min_request_interval, transport=transport
    )
    try:
        sources = source_factory(settings, http_client)
        logger.debug("Catalog sources in priority order: %s", [s.name for s in sources])
        yield BookResolver(
            BookCatalog(conn),
            sources,
            per_source_timeout=settings.source_timeout,
            request_budget=settings.request_budget,
        )
    finally:
        await http_client.aclose()
