# ABOUTME: Shared pytest fixtures for Shelfmate tests.
# ABOUTME: Provides a fresh on-disk store, seeded users, and a clean settings environment.

import sqlite3
from collections.abc import Iterator
from pathlib import Path

import pytest

from shelfmate.core.social import SocialGraphManager
from shelfmate.db.connection import open_store
from shelfmate.db.mapping import User

_SETTINGS_ENV = (
    "SHELFMATE_DB_PATH",
    "GOOGLE_BOOKS_API_KEY",
    "SHELFMATE_SOURCES",
    "SHELFMATE_SOURCE_TIMEOUT",
    "SHELFMATE_REQUEST_BUDGET",
    "SHELFMATE_BREAKER_THRESHOLD",
    "SHELFMATE_BREAKER_RESET",
    "SHELFMATE_MIN_REQUEST_INTERVAL",
    "SHELFMATE_USER",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Isolate tests from the developer's environment and any .env file."""
    for name in _SETTINGS_ENV:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "shelfmate.db"


@pytest.fixture
def conn(db_path: Path) -> Iterator[sqlite3.Connection]:
    """An initialized store, closed after the test."""
    connection = open_store(db_path)
    yield connection
    connection.close()


@pytest.fixture
def alice(conn: sqlite3.Connection) -> User:
    return SocialGraphManager(conn).find_or_create_user("uid-alice", "alice@example.com")


@pytest.fixture
def bob(conn: sqlite3.Connection) -> User:
    return SocialGraphManager(conn).find_or_create_user("uid-bob", "bob@example.com")
