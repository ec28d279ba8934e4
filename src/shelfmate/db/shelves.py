# ABOUTME: Repository for shelves and their ordered membership of library entries.
# ABOUTME: Display orders are kept dense (0..n-1) by compact() after removals.

import sqlite3
from typing import Any

from shelfmate.db.mapping import (
    ENTRY_WITH_BOOK_COLUMNS,
    SHELF_ENTRY_COLUMNS,
    Shelf,
    ShelfEntry,
    row_to_shelf,
    row_to_shelf_entry,
)
from shelfmate.errors import AlreadyOnShelfError

_SELECT_SHELF = (
    "SELECT s.*, (SELECT COUNT(*) FROM shelf_entries se WHERE se.shelf_id = s.id) AS book_count "
    "FROM shelves s"
)

_SELECT_SHELF_ENTRY = (
    f"SELECT {SHELF_ENTRY_COLUMNS}, {ENTRY_WITH_BOOK_COLUMNS} FROM shelf_entries se "
    "JOIN library_entries le ON le.id = se.library_entry_id "
    "JOIN books b ON b.id = le.book_id"
)


class ShelfRepository:
    """Typed access to the shelves and shelf_entries tables."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    # --- Shelves ---

    def create(
        self, user_id: int, name: str, description: str | None, is_public: bool
    ) -> Shelf:
        cursor = self._conn.execute(
            "INSERT INTO shelves (user_id, name, description, is_public) VALUES (?, ?, ?, ?)",
            (user_id, name, description, int(is_public)),
        )
        shelf = self.get(cursor.lastrowid)  # type: ignore[arg-type]
        assert shelf is not None
        return shelf

    def get(self, shelf_id: int) -> Shelf | None:
        row = self._conn.execute(f"{_SELECT_SHELF} WHERE s.id = ?", (shelf_id,)).fetchone()
        return row_to_shelf(row) if row else None

    def update(self, shelf_id: int, **fields: Any) -> None:
        """Update shelf columns (name, description, is_public)."""
        if "is_public" in fields:
            fields["is_public"] = int(fields["is_public"])
        set_clause = ", ".join(f"{k} = ?" for k in fields)
        set_clause += ", updated_at = strftime('%Y-%m-%dT%H:%M:%S', 'now')"
        self._conn.execute(
            f"UPDATE shelves SET {set_clause} WHERE id = ?", [*fields.values(), shelf_id]
        )

    def delete(self, shelf_id: int) -> None:
        """Delete a shelf; its entries go with it via ON DELETE CASCADE."""
        self._conn.execute("DELETE FROM shelves WHERE id = ?", (shelf_id,))

    def list_for_user(self, user_id: int, *, public_only: bool = False) -> list[Shelf]:
        where = "WHERE s.user_id = ?"
        if public_only:
            where += " AND s.is_public = 1"
        cursor = self._conn.execute(
            f"{_SELECT_SHELF} {where} ORDER BY s.created_at DESC, s.id DESC", (user_id,)
        )
        return [row_to_shelf(row) for row in cursor.fetchall()]

    def list_public(self, *, limit: int = 20, offset: int = 0) -> tuple[list[Shelf], int]:
        total = self._conn.execute("SELECT COUNT(*) FROM shelves WHERE is_public = 1").fetchone()[0]
        cursor = self._conn.execute(
            f"{_SELECT_SHELF} WHERE s.is_public = 1 "
            "ORDER BY s.updated_at DESC, s.id DESC LIMIT ? OFFSET ?",
            (limit, offset),
        )
        return [row_to_shelf(row) for row in cursor.fetchall()], total

    def count_for_user(self, user_id: int) -> tuple[int, int]:
        """Return ``(total, public)`` shelf counts for a user."""
        row = self._conn.execute(
            "SELECT COUNT(*), COALESCE(SUM(is_public), 0) FROM shelves WHERE user_id = ?",
            (user_id,),
        ).fetchone()
        return row[0], row[1]

    # --- Membership ---

    def get_entry(self, shelf_id: int, library_entry_id: int) -> ShelfEntry | None:
        row = self._conn.execute(
            f"{_SELECT_SHELF_ENTRY} WHERE se.shelf_id = ? AND se.library_entry_id = ?",
            (shelf_id, library_entry_id),
        ).fetchone()
        return row_to_shelf_entry(row) if row else None

    def list_entries(self, shelf_id: int) -> list[ShelfEntry]:
        """Entries of a shelf in display order, ties broken by insertion."""
        cursor = self._conn.execute(
            f"{_SELECT_SHELF_ENTRY} WHERE se.shelf_id = ? ORDER BY se.display_order, se.id",
            (shelf_id,),
        )
        return [row_to_shelf_entry(row) for row in cursor.fetchall()]

    def member_ids(self, shelf_id: int) -> list[int]:
        """Library entry ids on a shelf, in display order."""
        cursor = self._conn.execute(
            "SELECT library_entry_id FROM shelf_entries WHERE shelf_id = ? "
            "ORDER BY display_order, id",
            (shelf_id,),
        )
        return [row[0] for row in cursor.fetchall()]

    def count_entries(self, shelf_id: int) -> int:
        return self._conn.execute(
            "SELECT COUNT(*) FROM shelf_entries WHERE shelf_id = ?", (shelf_id,)
        ).fetchone()[0]

    def add_entry(self, shelf_id: int, library_entry_id: int) -> ShelfEntry:
        """Append a library entry after the shelf's current last position.

        Raises:
            AlreadyOnShelfError: If the entry is already on the shelf.
        """
        try:
            self._conn.execute(
                "INSERT INTO shelf_entries (shelf_id, library_entry_id, display_order) "
                "SELECT ?, ?, COALESCE(MAX(display_order) + 1, 0) "
                "FROM shelf_entries WHERE shelf_id = ?",
                (shelf_id, library_entry_id, shelf_id),
            )
        except sqlite3.IntegrityError as exc:
            if "UNIQUE constraint failed" in str(exc):
                raise AlreadyOnShelfError(shelf_id, library_entry_id) from exc
            raise
        self.touch(shelf_id)
        entry = self.get_entry(shelf_id, library_entry_id)
        assert entry is not None
        return entry

    def remove_entry(self, shelf_id: int, library_entry_id: int) -> bool:
        cursor = self._conn.execute(
            "DELETE FROM shelf_entries WHERE shelf_id = ? AND library_entry_id = ?",
            (shelf_id, library_entry_id),
        )
        self.touch(shelf_id)
        return cursor.rowcount > 0

    def set_order(self, shelf_id: int, library_entry_ids: list[int]) -> None:
        """Write display orders 0..n-1 following ``library_entry_ids``."""
        self._conn.executemany(
            "UPDATE shelf_entries SET display_order = ? WHERE shelf_id = ? AND library_entry_id = ?",
            [(position, shelf_id, entry_id) for position, entry_id in enumerate(library_entry_ids)],
        )
        self.touch(shelf_id)

    def compact(self, shelf_id: int) -> None:
        """Renumber a shelf's display orders to 0..n-1, keeping their sequence."""
        self.set_order(shelf_id, self.member_ids(shelf_id))

    def touch(self, shelf_id: int) -> None:
        self._conn.execute(
            "UPDATE shelves SET updated_at = strftime('%Y-%m-%dT%H:%M:%S', 'now') WHERE id = ?",
            (shelf_id,),
        )
