# ABOUTME: SQLite connection management and write transactions for the Shelfmate store.
# ABOUTME: Opens or creates the database, applies schema, and wraps writes in BEGIN IMMEDIATE.

import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from shelfmate.config import DEFAULT_DB_PATH
from shelfmate.db.schema import MIGRATIONS, SCHEMA_V1
from shelfmate.errors import StoreError

logger = logging.getLogger(__name__)

# Seconds a writer waits for another connection's write lock.
BUSY_TIMEOUT = 5.0


def _schema_exists(conn: sqlite3.Connection) -> bool:
    """Check if the schema has already been applied."""
    cursor = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='table' AND name='schema_version'"
    )
    return cursor.fetchone() is not None


def get_schema_version(conn: sqlite3.Connection) -> int:
    """Read the current schema version from the database."""
    cursor = conn.execute("SELECT version FROM schema_version ORDER BY version DESC LIMIT 1")
    row = cursor.fetchone()
    return row[0] if row else 0


def _apply_migrations(conn: sqlite3.Connection) -> None:
    current = get_schema_version(conn)
    for version, sql in MIGRATIONS:
        if version > current:
            logger.info("Applying store migration %d", version)
            conn.executescript(sql)


def open_store(path: Path | None = None) -> sqlite3.Connection:
    """Open or create the Shelfmate database.

    Creates the database file and parent directories if they don't exist and
    applies the schema on first creation. The connection runs in autocommit
    mode so that multi-statement writes are bracketed explicitly with
    :func:`transaction`.

    Args:
        path: Path to the database file, or ``Path(":memory:")`` for a
            throwaway store. Defaults to ~/.shelfmate/library.db.

    Returns:
        A configured sqlite3.Connection with ``sqlite3.Row`` rows.

    Raises:
        StoreError: If the file cannot be opened or initialized.
    """
    db_path = path or DEFAULT_DB_PATH
    in_memory = str(db_path) == ":memory:"
    try:
        if not in_memory:
            db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(str(db_path), timeout=BUSY_TIMEOUT, isolation_level=None)
        conn.row_factory = sqlite3.Row
        if not in_memory:
            conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA foreign_keys=ON")

        if not _schema_exists(conn):
            conn.executescript(SCHEMA_V1)
        _apply_migrations(conn)
    except (OSError, sqlite3.Error) as exc:
        logger.error("Could not open store at %s: %s", db_path, exc)
        raise StoreError("The library store could not be opened") from exc

    return conn


@contextmanager
def transaction(conn: sqlite3.Connection) -> Iterator[sqlite3.Connection]:
    """Run the block inside one write-locked transaction.

    ``BEGIN IMMEDIATE`` takes SQLite's write lock up front, so the reads a
    block performs to check an invariant cannot be invalidated by another
    writer before its own writes commit. Any exception rolls everything
    back. Nested use joins the outer transaction.

    Raises:
        StoreError: If SQLite fails for a reason the caller did not handle.
    """
    if conn.in_transaction:
        yield conn
        return

    try:
        conn.execute("BEGIN IMMEDIATE")
    except sqlite3.Error as exc:
        logger.error("Could not begin transaction: %s", exc)
        raise StoreError("The library store is unavailable") from exc

    try:
        yield conn
    except sqlite3.Error as exc:
        conn.rollback()
        logger.error("Store transaction failed: %s", exc)
        raise StoreError("The library store failed to save changes") from exc
    except BaseException:
        conn.rollback()
        raise

    try:
        conn.commit()
    except sqlite3.Error as exc:
        conn.rollback()
        logger.error("Store commit failed: %s", exc)
        raise StoreError("The library store failed to save changes") from exc
