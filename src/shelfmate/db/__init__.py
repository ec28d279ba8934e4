# ABOUTME: SQLite-backed store for the shared catalog, libraries, shelves and social graph.
# ABOUTME: Re-exports the connection helpers and repositories.

from shelfmate.db.catalog import BookCatalog
from shelfmate.db.connection import open_store, transaction
from shelfmate.db.library import LibraryRepository
from shelfmate.db.shelves import ShelfRepository
from shelfmate.db.users import UserRepository

__all__ = [
    "BookCatalog",
    "LibraryRepository",
    "ShelfRepository",
    "UserRepository",
    "open_store",
    "transaction",
]
