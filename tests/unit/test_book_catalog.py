# ABOUTME: Unit tests for BookCatalog, the shared books repository.
# ABOUTME: Covers lookups, create_if_absent convergence, field updates and search.

import sqlite3

import pytest

from shelfmate.db.catalog import BookCatalog
from shelfmate.errors import CatalogBookNotFoundError
from tests.fixtures.stub_sources import make_record

ISBN = "9780156001311"


class TestCreateIfAbsent:
    """Tests for create_if_absent()."""

    def test_inserts_new_book(self, conn: sqlite3.Connection) -> None:
        catalog = BookCatalog(conn)
        book = catalog.create_if_absent(make_record(publisher="Harcourt", page_count=502))

        assert book.id > 0
        assert book.isbn == ISBN
        assert book.publisher == "Harcourt"
        assert book.page_count == 502
        assert book.source == "ndl"
        assert book.description is None
        assert book.created_at

    def test_existing_isbn_returns_first_row(self, conn: sqlite3.Connection) -> None:
        """A second insert of the same ISBN yields the stored row unchanged."""
        catalog = BookCatalog(conn)
        first = catalog.create_if_absent(make_record(title="First"))
        second = catalog.create_if_absent(make_record(title="Second", source="googlebooks"))

        assert second.id == first.id
        assert second.title == "First"
        assert conn.execute("SELECT COUNT(*) FROM books").fetchone()[0] == 1

    def test_concurrent_connections_converge(self, conn: sqlite3.Connection, db_path) -> None:
        """Two connections writing the same ISBN end up sharing one row."""
        from shelfmate.db.connection import open_store

        other = open_store(db_path)
        try:
            a = BookCatalog(conn).create_if_absent(make_record(title="From A"))
            b = BookCatalog(other).create_if_absent(make_record(title="From B"))
        finally:
            other.close()
        assert a.id == b.id


class TestLookups:
    def test_find_by_isbn_and_id(self, conn: sqlite3.Connection) -> None:
        catalog = BookCatalog(conn)
        book = catalog.create_if_absent(make_record())
        assert catalog.find_by_isbn(ISBN) == book
        assert catalog.find_by_id(book.id) == book

    def test_missing_returns_none(self, conn: sqlite3.Connection) -> None:
        catalog = BookCatalog(conn)
        assert catalog.find_by_isbn("9784101010014") is None
        assert catalog.find_by_id(999) is None


class TestUpdateFields:
    def test_updates_given_fields(self, conn: sqlite3.Connection) -> None:
        catalog = BookCatalog(conn)
        book = catalog.create_if_absent(make_record())

        updated = catalog.update_fields(book.id, publisher="Vintage", page_count=600)

        assert updated.publisher == "Vintage"
        assert updated.page_count == 600
        assert updated.isbn == ISBN

    def test_isbn_not_updatable(self, conn: sqlite3.Connection) -> None:
        catalog = BookCatalog(conn)
        book = catalog.create_if_absent(make_record())
        with pytest.raises(ValueError, match="isbn"):
            catalog.update_fields(book.id, isbn="9784101010014")

    def test_missing_book(self, conn: sqlite3.Connection) -> None:
        with pytest.raises(CatalogBookNotFoundError):
            BookCatalog(conn).update_fields(42, title="X")


class TestSearch:
    def test_matches_title_author_publisher(self, conn: sqlite3.Connection) -> None:
        catalog = BookCatalog(conn)
        catalog.create_if_absent(make_record())
        catalog.create_if_absent(
            make_record(isbn="9784101010014", title="こころ", author="夏目漱石", publisher="新潮社")
        )

        by_title, total = catalog.search("rose")
        assert total == 1 and by_title[0].title == "The Name of the Rose"
        assert catalog.search("漱石")[1] == 1
        assert catalog.search("新潮")[1] == 1
        assert catalog.search("nothing here")[1] == 0

    def test_like_wildcards_are_literal(self, conn: sqlite3.Connection) -> None:
        catalog = BookCatalog(conn)
        catalog.create_if_absent(make_record())
        assert catalog.search("%")[1] == 0

    def test_paging(self, conn: sqlite3.Connection) -> None:
        catalog = BookCatalog(conn)
        for isbn, title in [
            ("9780156001311", "Book A"),
            ("9784101010014", "Book B"),
            ("9780306406157", "Book C"),
        ]:
            catalog.create_if_absent(make_record(isbn=isbn, title=title))

        books, total = catalog.search("book", limit=2, offset=2)
        assert total == 3
        assert [b.title for b in books] == ["Book C"]
