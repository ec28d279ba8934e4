# ABOUTME: Unit tests for store creation, schema constraints and transactions.
# ABOUTME: Verifies tables, pragmas, versioning, CHECK/UNIQUE constraints and rollback.

import sqlite3
from pathlib import Path

import pytest

from shelfmate.db.connection import get_schema_version, open_store, transaction
from shelfmate.errors import StoreError


def _table_names(conn: sqlite3.Connection) -> set[str]:
    cursor = conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
    return {row[0] for row in cursor.fetchall()}


class TestOpenStore:
    """Tests for open_store()."""

    def test_creates_file_and_parents(self, tmp_path: Path) -> None:
        db_path = tmp_path / "nested" / "dir" / "library.db"
        conn = open_store(db_path)
        assert db_path.exists()
        conn.close()

    def test_creates_all_tables(self, conn: sqlite3.Connection) -> None:
        expected = {
            "users",
            "books",
            "library_entries",
            "shelves",
            "shelf_entries",
            "follows",
            "blocks",
            "schema_version",
        }
        assert expected <= _table_names(conn)

    def test_schema_version_is_one(self, conn: sqlite3.Connection) -> None:
        assert get_schema_version(conn) == 1

    def test_reopen_keeps_data(self, db_path: Path) -> None:
        """Opening an existing store does not re-apply the schema."""
        conn = open_store(db_path)
        conn.execute("INSERT INTO users (external_uid, username, email) VALUES ('u', 'n', 'e')")
        conn.close()

        conn = open_store(db_path)
        assert conn.execute("SELECT COUNT(*) FROM users").fetchone()[0] == 1
        assert get_schema_version(conn) == 1
        conn.close()

    def test_pragmas(self, conn: sqlite3.Connection) -> None:
        assert conn.execute("PRAGMA journal_mode").fetchone()[0] == "wal"
        assert conn.execute("PRAGMA foreign_keys").fetchone()[0] == 1

    def test_in_memory_store(self) -> None:
        conn = open_store(Path(":memory:"))
        assert "books" in _table_names(conn)
        conn.close()

    def test_unopenable_path_raises_store_error(self, tmp_path: Path) -> None:
        blocker = tmp_path / "file"
        blocker.write_text("not a directory")
        with pytest.raises(StoreError) as exc_info:
            open_store(blocker / "library.db")
        assert exc_info.value.operational is False


class TestConstraints:
    """The schema itself rejects states the managers must never produce."""

    def _seed(self, conn: sqlite3.Connection) -> None:
        conn.execute("INSERT INTO users (id, external_uid, username, email) VALUES (1, 'a', 'a', 'a')")
        conn.execute("INSERT INTO users (id, external_uid, username, email) VALUES (2, 'b', 'b', 'b')")
        conn.execute(
            "INSERT INTO books (id, isbn, title, author) VALUES (1, '9780156001311', 'T', 'A')"
        )

    def test_isbn_unique(self, conn: sqlite3.Connection) -> None:
        self._seed(conn)
        with pytest.raises(sqlite3.IntegrityError):
            conn.execute("INSERT INTO books (isbn, title, author) VALUES ('9780156001311', 'X', 'Y')")

    def test_library_entry_unique_per_user_and_book(self, conn: sqlite3.Connection) -> None:
        self._seed(conn)
        conn.execute("INSERT INTO library_entries (user_id, book_id) VALUES (1, 1)")
        with pytest.raises(sqlite3.IntegrityError):
            conn.execute("INSERT INTO library_entries (user_id, book_id) VALUES (1, 1)")

    def test_read_at_tracks_read_flag(self, conn: sqlite3.Connection) -> None:
        self._seed(conn)
        with pytest.raises(sqlite3.IntegrityError):
            conn.execute("INSERT INTO library_entries (user_id, book_id, is_read) VALUES (1, 1, 1)")
        with pytest.raises(sqlite3.IntegrityError):
            conn.execute(
                "INSERT INTO library_entries (user_id, book_id, is_read, read_at) "
                "VALUES (1, 1, 0, '2024-01-01T00:00:00')"
            )

    def test_self_edges_rejected(self, conn: sqlite3.Connection) -> None:
        self._seed(conn)
        with pytest.raises(sqlite3.IntegrityError):
            conn.execute("INSERT INTO follows (follower_id, following_id) VALUES (1, 1)")
        with pytest.raises(sqlite3.IntegrityError):
            conn.execute("INSERT INTO blocks (blocker_id, blocked_id) VALUES (2, 2)")

    def test_shelf_entries_cascade(self, conn: sqlite3.Connection) -> None:
        self._seed(conn)
        conn.execute("INSERT INTO library_entries (id, user_id, book_id) VALUES (1, 1, 1)")
        conn.execute("INSERT INTO shelves (id, user_id, name) VALUES (1, 1, 'Favs')")
        conn.execute(
            "INSERT INTO shelf_entries (shelf_id, library_entry_id, display_order) VALUES (1, 1, 0)"
        )
        conn.execute("DELETE FROM library_entries WHERE id = 1")
        assert conn.execute("SELECT COUNT(*) FROM shelf_entries").fetchone()[0] == 0


class TestTransaction:
    """Tests for the transaction() context manager."""

    def test_commits_on_success(self, conn: sqlite3.Connection) -> None:
        with transaction(conn):
            conn.execute("INSERT INTO users (external_uid, username, email) VALUES ('u', 'n', 'e')")
        assert not conn.in_transaction
        assert conn.execute("SELECT COUNT(*) FROM users").fetchone()[0] == 1

    def test_rolls_back_on_exception(self, conn: sqlite3.Connection) -> None:
        with pytest.raises(RuntimeError):
            with transaction(conn):
                conn.execute(
                    "INSERT INTO users (external_uid, username, email) VALUES ('u', 'n', 'e')"
                )
                raise RuntimeError("boom")
        assert conn.execute("SELECT COUNT(*) FROM users").fetchone()[0] == 0

    def test_sqlite_failure_becomes_store_error(self, conn: sqlite3.Connection) -> None:
        with pytest.raises(StoreError) as exc_info:
            with transaction(conn):
                conn.execute("INSERT INTO no_such_table VALUES (1)")
        assert isinstance(exc_info.value.__cause__, sqlite3.OperationalError)
        assert not conn.in_transaction

    def test_commit_failure_becomes_store_error(self, conn: sqlite3.Connection) -> None:
        """A constraint checked only at COMMIT still surfaces as StoreError and rolls back."""
        with pytest.raises(StoreError) as exc_info:
            with transaction(conn):
                conn.execute("PRAGMA defer_foreign_keys=ON")
                conn.execute(
                    "INSERT INTO users (external_uid, username, email) VALUES ('u', 'n', 'e')"
                )
                conn.execute("INSERT INTO library_entries (user_id, book_id) VALUES (1, 999)")
        assert isinstance(exc_info.value.__cause__, sqlite3.IntegrityError)
        assert not conn.in_transaction
        assert conn.execute("SELECT COUNT(*) FROM users").fetchone()[0] == 0

    def test_nested_use_joins_outer(self, conn: sqlite3.Connection) -> None:
        """An inner failure rolls back the whole outer transaction."""
        with pytest.raises(RuntimeError):
            with transaction(conn):
                conn.execute(
                    "INSERT INTO users (external_uid, username, email) VALUES ('u1', 'n', 'e')"
                )
                with transaction(conn):
                    conn.execute(
                        "INSERT INTO users (external_uid, username, email) VALUES ('u2', 'n', 'e')"
                    )
                raise RuntimeError("boom")
        assert conn.execute("SELECT COUNT(*) FROM users").fetchone()[0] == 0
