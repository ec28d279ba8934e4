# ABOUTME: Repository for library entries, the per-user membership of catalog books.
# ABOUTME: Translates the (user, book) UNIQUE constraint into DuplicateLibraryEntryError.

import sqlite3

from shelfmate.db.mapping import ENTRY_WITH_BOOK_COLUMNS, LibraryEntry, row_to_entry
from shelfmate.errors import DuplicateLibraryEntryError

_SELECT_ENTRY = (
    f"SELECT {ENTRY_WITH_BOOK_COLUMNS} FROM library_entries le "
    "JOIN books b ON b.id = le.book_id"
)

# Sort keys accepted by list_for_user, mapped to SQL expressions.
SORT_COLUMNS = {
    "added_at": "le.added_at",
    "read_at": "le.read_at",
    "title": "b.title COLLATE NOCASE",
}


class LibraryRepository:
    """Typed access to the library_entries table."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def get(self, entry_id: int) -> LibraryEntry | None:
        """Retrieve an entry, with its book attached."""
        row = self._conn.execute(f"{_SELECT_ENTRY} WHERE le.id = ?", (entry_id,)).fetchone()
        return row_to_entry(row) if row else None

    def find(self, user_id: int, book_id: int) -> LibraryEntry | None:
        row = self._conn.execute(
            f"{_SELECT_ENTRY} WHERE le.user_id = ? AND le.book_id = ?",
            (user_id, book_id),
        ).fetchone()
        return row_to_entry(row) if row else None

    def insert(self, user_id: int, book_id: int) -> LibraryEntry:
        """Add a book to a user's library as unread.

        Raises:
            DuplicateLibraryEntryError: If the user already has the book.
        """
        try:
            cursor = self._conn.execute(
                "INSERT INTO library_entries (user_id, book_id) VALUES (?, ?)",
                (user_id, book_id),
            )
        except sqlite3.IntegrityError as exc:
            if "UNIQUE constraint failed" in str(exc):
                raise DuplicateLibraryEntryError(user_id, book_id) from exc
            raise
        entry = self.get(cursor.lastrowid)  # type: ignore[arg-type]
        assert entry is not None
        return entry

    def set_read_status(self, entry_id: int, is_read: bool) -> None:
        """Write the read flag and its timestamp in one statement."""
        self._conn.execute(
            "UPDATE library_entries SET is_read = ?, "
            "read_at = CASE WHEN ? THEN strftime('%Y-%m-%dT%H:%M:%S', 'now') ELSE NULL END "
            "WHERE id = ?",
            (int(is_read), int(is_read), entry_id),
        )

    def delete(self, entry_id: int) -> list[int]:
        """Delete an entry and every shelf membership referencing it.

        Returns:
            Ids of the shelves the entry was removed from.
        """
        shelf_ids = [
            row[0]
            for row in self._conn.execute(
                "SELECT shelf_id FROM shelf_entries WHERE library_entry_id = ?", (entry_id,)
            )
        ]
        self._conn.execute("DELETE FROM shelf_entries WHERE library_entry_id = ?", (entry_id,))
        self._conn.execute("DELETE FROM library_entries WHERE id = ?", (entry_id,))
        return shelf_ids

    def list_for_user(
        self,
        user_id: int,
        *,
        is_read: bool | None = None,
        sort_by: str = "added_at",
        descending: bool = True,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[LibraryEntry], int]:
        """Return one slice of a user's library and the total entry count.

        Raises:
            ValueError: If ``sort_by`` is not one of SORT_COLUMNS.
        """
        if sort_by not in SORT_COLUMNS:
            raise ValueError(f"Unknown sort key: {sort_by}")

        where = "WHERE le.user_id = ?"
        params: list[object] = [user_id]
        if is_read is not None:
            where += " AND le.is_read = ?"
            params.append(int(is_read))

        total = self._conn.execute(
            f"SELECT COUNT(*) FROM library_entries le {where}", params
        ).fetchone()[0]

        direction = "DESC" if descending else "ASC"
        cursor = self._conn.execute(
            f"{_SELECT_ENTRY} {where} "
            f"ORDER BY {SORT_COLUMNS[sort_by]} {direction}, le.id {direction} LIMIT ? OFFSET ?",
            [*params, limit, offset],
        )
        return [row_to_entry(row) for row in cursor.fetchall()], total

    def count_for_user(self, user_id: int) -> tuple[int, int]:
        """Return ``(total, read)`` entry counts for a user."""
        row = self._conn.execute(
            "SELECT COUNT(*), COALESCE(SUM(is_read), 0) FROM library_entries WHERE user_id = ?",
            (user_id,),
        ).fetchone()
        return row[0], row[1]
