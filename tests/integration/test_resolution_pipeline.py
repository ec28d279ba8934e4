# ABOUTME: Integration tests for the full resolution pipeline over fake catalog web services.
# ABOUTME: resolver_session → breakers → real adapters → httpx MockTransport → catalog store.

import asyncio
import sqlite3

import httpx
import pytest

from shelfmate.config import Settings
from shelfmate.core.services import resolver_session
from shelfmate.db.catalog import BookCatalog
from shelfmate.errors import BookNotFoundError, BookSearchFailedError
from tests.fixtures.source_responses import (
    GOOGLE_EMPTY_RESPONSE,
    GOOGLE_VOLUMES_RESPONSE,
    KOKORO_ISBN,
    NDL_KOKORO,
    NDL_NO_RECORDS,
    OL_AUTHOR_RESPONSE,
    OL_EDITION_RESPONSE,
    OL_WORKS_RESPONSE,
    ROSE_ISBN,
    google_error,
)
from tests.fixtures.stub_sources import StubSource, make_record


class CatalogWeb:
    """Fake NDL, Google Books and Open Library hosts, answering by hostname."""

    def __init__(self, *, ndl=None, google=None, openlibrary=None) -> None:
        self._hosts = {
            "ndlsearch.ndl.go.jp": ndl or (lambda r: httpx.Response(200, text=NDL_NO_RECORDS)),
            "www.googleapis.com": google
            or (lambda r: httpx.Response(200, json=GOOGLE_EMPTY_RESPONSE)),
            "openlibrary.org": openlibrary or (lambda r: httpx.Response(404)),
        }
        self.hits: dict[str, int] = {host: 0 for host in self._hosts}

    def __call__(self, request: httpx.Request) -> httpx.Response:
        host = request.url.host
        self.hits[host] += 1
        return self._hosts[host](request)


def _open_library(request: httpx.Request) -> httpx.Response:
    routes = {
        f"/isbn/{ROSE_ISBN}.json": OL_EDITION_RESPONSE,
        "/authors/OL123A.json": OL_AUTHOR_RESPONSE,
        "/works/OL456W.json": OL_WORKS_RESPONSE,
    }
    body = routes.get(request.url.path)
    return httpx.Response(200, json=body) if body is not None else httpx.Response(404)


def _settings() -> Settings:
    return Settings(google_books_api_key="test-key", min_request_interval=0.0)


def _resolve(conn: sqlite3.Connection, web: CatalogWeb, isbn: str, settings: Settings | None = None):
    async def go():
        async with resolver_session(
            settings or _settings(), conn, transport=httpx.MockTransport(web)
        ) as resolver:
            return await resolver.resolve(isbn)

    return asyncio.run(go())


class TestResolutionPipeline:
    """End-to-end resolution against all three adapters."""

    def test_japanese_book_from_ndl(self, conn: sqlite3.Connection) -> None:
        web = CatalogWeb(ndl=lambda r: httpx.Response(200, text=NDL_KOKORO))

        book = _resolve(conn, web, "4-10-101001-3")

        assert book.isbn == KOKORO_ISBN
        assert book.title == "こころ"
        assert book.publisher == "新潮社"
        assert book.source == "ndl"
        assert BookCatalog(conn).find_by_isbn(KOKORO_ISBN) == book

    def test_falls_back_to_google_books(self, conn: sqlite3.Connection) -> None:
        web = CatalogWeb(google=lambda r: httpx.Response(200, json=GOOGLE_VOLUMES_RESPONSE))

        book = _resolve(conn, web, ROSE_ISBN)

        assert book.source == "googlebooks"
        assert book.author == "Umberto Eco, William Weaver"
        assert book.price == 1599

    def test_falls_back_to_open_library(self, conn: sqlite3.Connection) -> None:
        """NDL is down and Google is over quota; Open Library still answers."""
        web = CatalogWeb(
            ndl=lambda r: httpx.Response(503),
            google=lambda r: httpx.Response(
                403, json=google_error(403, "dailyLimitExceeded", "Daily Limit Exceeded")
            ),
            openlibrary=_open_library,
        )

        book = _resolve(conn, web, ROSE_ISBN)

        assert book.source == "openlibrary"
        assert book.author == "Umberto Eco"
        assert book.page_count == 502
        assert web.hits["ndlsearch.ndl.go.jp"] == 2
        assert web.hits["www.googleapis.com"] == 1

    def test_second_resolution_hits_catalog_only(self, conn: sqlite3.Connection) -> None:
        web = CatalogWeb(ndl=lambda r: httpx.Response(200, text=NDL_KOKORO))
        first = _resolve(conn, web, KOKORO_ISBN)
        calls = sum(web.hits.values())

        second = _resolve(conn, web, "4101010013")

        assert second.id == first.id
        assert sum(web.hits.values()) == calls

    def test_configured_order_is_respected(self, conn: sqlite3.Connection) -> None:
        web = CatalogWeb(
            google=lambda r: httpx.Response(200, json=GOOGLE_VOLUMES_RESPONSE),
            openlibrary=_open_library,
        )
        settings = Settings(
            google_books_api_key="test-key",
            sources=("openlibrary", "googlebooks"),
            min_request_interval=0.0,
        )

        book = _resolve(conn, web, ROSE_ISBN, settings)

        assert book.source == "openlibrary"
        assert web.hits["ndlsearch.ndl.go.jp"] == 0

    def test_everyone_lacks_the_book(self, conn: sqlite3.Connection) -> None:
        with pytest.raises(BookNotFoundError):
            _resolve(conn, CatalogWeb(), "9780306406157")
        assert BookCatalog(conn).find_by_isbn("9780306406157") is None

    def test_every_source_failing(self, conn: sqlite3.Connection) -> None:
        web = CatalogWeb(
            ndl=lambda r: httpx.Response(500),
            google=lambda r: httpx.Response(401, json=google_error(401, "authError")),
            openlibrary=lambda r: httpx.Response(503),
        )
        with pytest.raises(BookSearchFailedError) as exc_info:
            _resolve(conn, web, ROSE_ISBN)

        error = exc_info.value
        assert error.operational is True
        assert sorted(e.source for e in error.errors) == ["googlebooks", "ndl", "openlibrary"]

    def test_malformed_google_payload_falls_through(self, conn: sqlite3.Connection) -> None:
        """A Google volume of the wrong shape fails that source only."""
        web = CatalogWeb(
            google=lambda r: httpx.Response(200, json={"totalItems": 1, "items": [None]}),
            openlibrary=_open_library,
        )

        book = _resolve(conn, web, ROSE_ISBN)

        assert book.source == "openlibrary"
        assert web.hits["www.googleapis.com"] == 1

    def test_breaker_state_carries_across_resolutions_in_one_session(
        self, conn: sqlite3.Connection
    ) -> None:
        """Once NDL's breaker opens, later lookups in the same session skip it."""
        web = CatalogWeb(
            ndl=lambda r: httpx.Response(503),
            google=lambda r: httpx.Response(200, json=GOOGLE_VOLUMES_RESPONSE),
        )
        settings = Settings(
            google_books_api_key="test-key", breaker_threshold=2, min_request_interval=0.0
        )

        async def go():
            async with resolver_session(
                settings, conn, transport=httpx.MockTransport(web)
            ) as resolver:
                await resolver.resolve(ROSE_ISBN)
                await resolver.resolve(KOKORO_ISBN)

        asyncio.run(go())

        assert web.hits["ndlsearch.ndl.go.jp"] == 2
        assert web.hits["www.googleapis.com"] == 2


class TestWorkedExample:
    """A Japanese title whose first source hangs, resolved twice."""

    def test_timeout_falls_back_then_catalog_serves_the_repeat(
        self, conn: sqlite3.Connection
    ) -> None:
        isbn = "9784797382570"
        hanging = StubSource("ndl", make_record("ndl", isbn=isbn), delay=5.0)
        google = StubSource(
            "googlebooks",
            make_record("googlebooks", isbn=isbn, title="リーダブルコード", author="Dustin Boswell"),
        )
        settings = Settings(source_timeout=0.05, request_budget=0.5, min_request_interval=0.0)

        def resolve():
            async def go():
                async with resolver_session(
                    settings, conn, source_factory=lambda s, client: [hanging, google]
                ) as resolver:
                    return await resolver.resolve(isbn)

            return asyncio.run(go())

        first = resolve()

        assert first.title == "リーダブルコード"
        assert first.source == "googlebooks"
        assert hanging.cancelled
        calls = (hanging.calls, google.calls)

        second = resolve()

        assert second.id == first.id
        assert (hanging.calls, google.calls) == calls
        assert conn.execute("SELECT COUNT(*) FROM books WHERE isbn = ?", (isbn,)).fetchone()[0] == 1
