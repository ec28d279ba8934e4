# ABOUTME: Catalog repository: the shared books table keyed by canonical ISBN-13.
# ABOUTME: create_if_absent makes concurrent resolutions of one ISBN converge on one row.

import logging
import sqlite3

from shelfmate.db.connection import transaction
from shelfmate.db.mapping import BOOK_FIELDS, Book, record_to_row, row_to_book
from shelfmate.errors import CatalogBookNotFoundError, StoreError
from shelfmate.sources.types import SourceRecord

logger = logging.getLogger(__name__)


class BookCatalog:
    """Wraps a sqlite3 connection and provides typed access to the books table."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def find_by_isbn(self, isbn: str) -> Book | None:
        """Retrieve a book by its canonical ISBN-13."""
        cursor = self._conn.execute("SELECT * FROM books WHERE isbn = ?", (isbn,))
        row = cursor.fetchone()
        return row_to_book(row) if row else None

    def find_by_id(self, book_id: int) -> Book | None:
        cursor = self._conn.execute("SELECT * FROM books WHERE id = ?", (book_id,))
        row = cursor.fetchone()
        return row_to_book(row) if row else None

    def create_if_absent(self, record: SourceRecord) -> Book:
        """Insert a book unless one with the same ISBN already exists.

        The insert and the read-back run in one transaction. If another
        writer persisted the ISBN first, its row is returned unchanged and
        ``record`` is discarded.

        Args:
            record: Metadata whose ``isbn`` is already canonical.

        Returns:
            The persisted book for ``record.isbn``.
        """
        row = record_to_row(record)
        columns = ", ".join(row.keys())
        placeholders = ", ".join("?" for _ in row)

        with transaction(self._conn):
            cursor = self._conn.execute(
                f"INSERT INTO books ({columns}) VALUES ({placeholders}) "
                "ON CONFLICT(isbn) DO NOTHING",
                list(row.values()),
            )
            if cursor.rowcount == 0:
                logger.debug("Book %s already cataloged; keeping existing row", record.isbn)
            book = self.find_by_isbn(record.isbn)

        if book is None:
            raise StoreError("Book vanished immediately after insert", isbn=record.isbn)
        return book

    def update_fields(self, book_id: int, **fields: str | int | None) -> Book:
        """Update descriptive columns of a cataloged book.

        Raises:
            ValueError: If a field is not an updatable book column.
            CatalogBookNotFoundError: If the book_id does not exist.
        """
        unknown = set(fields) - set(BOOK_FIELDS)
        if unknown:
            raise ValueError(f"Not updatable book fields: {', '.join(sorted(unknown))}")

        with transaction(self._conn):
            if fields:
                set_clause = ", ".join(f"{k} = ?" for k in fields)
                set_clause += ", updated_at = strftime('%Y-%m-%dT%H:%M:%S', 'now')"
                self._conn.execute(
                    f"UPDATE books SET {set_clause} WHERE id = ?",
                    [*fields.values(), book_id],
                )
            book = self.find_by_id(book_id)

        if book is None:
            raise CatalogBookNotFoundError(book_id)
        return book

    def search(self, query: str, *, limit: int = 20, offset: int = 0) -> tuple[list[Book], int]:
        """Case-insensitive substring search over title, author and publisher.

        Returns:
            The requested slice of matches ordered by title, and the total
            number of matches.
        """
        pattern = f"%{_escape_like(query)}%"
        where = (
            "WHERE title LIKE ? ESCAPE '\\' OR author LIKE ? ESCAPE '\\' "
            "OR publisher LIKE ? ESCAPE '\\'"
        )
        params = (pattern, pattern, pattern)
        total = self._conn.execute(f"SELECT COUNT(*) FROM books {where}", params).fetchone()[0]
        cursor = self._conn.execute(
            f"SELECT * FROM books {where} ORDER BY title, id LIMIT ? OFFSET ?",
            (*params, limit, offset),
        )
        return [row_to_book(row) for row in cursor.fetchall()], total


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
