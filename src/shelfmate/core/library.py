# ABOUTME: Library manager: adds, reads and removes books in a user's personal library.
# ABOUTME: Removing a book also takes it off every shelf, inside the same transaction.

import logging
import sqlite3
from typing import Any

from shelfmate.core.resolver import BookResolver
from shelfmate.db.catalog import BookCatalog
from shelfmate.db.connection import transaction
from shelfmate.db.library import SORT_COLUMNS, LibraryRepository
from shelfmate.db.mapping import BOOK_FIELDS, Book, LibraryEntry, Page
from shelfmate.db.shelves import ShelfRepository
from shelfmate.db.users import UserRepository
from shelfmate.errors import (
    CatalogBookNotFoundError,
    ConfigurationError,
    DuplicateLibraryEntryError,
    LibraryEntryNotFoundError,
    NoStatusChangeError,
    NotInLibraryError,
    NotOwnerError,
    UserNotFoundError,
    ValidationError,
)
from shelfmate.isbn import normalize

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100


def validate_paging(page: int, limit: int) -> int:
    """Check page/limit and return the row offset they select.

    Raises:
        ValidationError: If page is below 1 or limit is outside 1..100.
    """
    if page < 1:
        raise ValidationError(f"page must be at least 1, got {page}")
    if not 1 <= limit <= MAX_PAGE_SIZE:
        raise ValidationError(f"limit must be between 1 and {MAX_PAGE_SIZE}, got {limit}")
    return (page - 1) * limit


class LibraryManager:
    """Per-user library operations.

    Args:
        conn: Open store connection.
        resolver: Used by add_to_library to turn ISBNs into catalog books.
            Only that operation needs it.
    """

    def __init__(self, conn: sqlite3.Connection, resolver: BookResolver | None = None) -> None:
        self._conn = conn
        self._resolver = resolver
        self._catalog = BookCatalog(conn)
        self._entries = LibraryRepository(conn)
        self._shelves = ShelfRepository(conn)
        self._users = UserRepository(conn)

    async def add_to_library(self, isbn: str, user_id: int) -> LibraryEntry:
        """Resolve ``isbn`` and add the book to the user's library, unread.

        Raises:
            InvalidIsbnError: If ``isbn`` is malformed.
            UserNotFoundError: If the user does not exist.
            BookNotFoundError, BookSearchFailedError: From resolution.
            DuplicateLibraryEntryError: If the user already has the book.
        """
        if self._resolver is None:
            raise ConfigurationError("LibraryManager was created without a book resolver")
        canonical = normalize(isbn)
        if not self._users.exists(user_id):
            raise UserNotFoundError(user_id)

        book = await self._resolver.resolve(canonical)

        with transaction(self._conn):
            if self._entries.find(user_id, book.id) is not None:
                raise DuplicateLibraryEntryError(user_id, book.id)
            entry = self._entries.insert(user_id, book.id)

        logger.info("User %d added book %d (%s) to their library", user_id, book.id, book.isbn)
        return entry

    def get_entry(self, entry_id: int, user_id: int) -> LibraryEntry:
        entry = self._entries.get(entry_id)
        if entry is None:
            raise LibraryEntryNotFoundError(entry_id)
        if entry.user_id != user_id:
            raise NotOwnerError("Library entry", entry_id)
        return entry

    def update_read_status(self, entry_id: int, is_read: bool, user_id: int) -> LibraryEntry:
        """Mark an entry read or unread.

        The read flag and read timestamp are written together: setting
        ``is_read`` stamps ``read_at``, clearing it clears ``read_at``.

        Raises:
            LibraryEntryNotFoundError: If the entry does not exist.
            NotOwnerError: If the entry belongs to another user.
            NoStatusChangeError: If the entry already has that status.
        """
        with transaction(self._conn):
            entry = self.get_entry(entry_id, user_id)
            if entry.is_read == is_read:
                raise NoStatusChangeError(entry_id, is_read)
            self._entries.set_read_status(entry_id, is_read)
            updated = self._entries.get(entry_id)

        assert updated is not None
        return updated

    def remove_from_library(self, isbn: str, user_id: int) -> None:
        """Remove a book from the user's library and from all of their shelves.

        Raises:
            InvalidIsbnError: If ``isbn`` is malformed.
            NotInLibraryError: If the user does not have the book.
        """
        canonical = normalize(isbn)
        with transaction(self._conn):
            book = self._catalog.find_by_isbn(canonical)
            entry = self._entries.find(user_id, book.id) if book is not None else None
            if entry is None:
                raise NotInLibraryError(canonical)
            for shelf_id in self._entries.delete(entry.id):
                self._shelves.compact(shelf_id)

        logger.info("User %d removed %s from their library", user_id, canonical)

    def list_library(
        self,
        user_id: int,
        *,
        is_read: bool | None = None,
        sort_by: str = "added_at",
        descending: bool = True,
        page: int = 1,
        limit: int = 20,
    ) -> Page[LibraryEntry]:
        offset = validate_paging(page, limit)
        if sort_by not in SORT_COLUMNS:
            raise ValidationError(
                f"sort_by must be one of {', '.join(SORT_COLUMNS)}, got {sort_by!r}"
            )
        entries, total = self._entries.list_for_user(
            user_id,
            is_read=is_read,
            sort_by=sort_by,
            descending=descending,
            limit=limit,
            offset=offset,
        )
        return Page(items=entries, total=total, page=page, limit=limit)

    def search_books(self, query: str, *, page: int = 1, limit: int = 20) -> Page[Book]:
        """Search the shared catalog by title, author or publisher."""
        offset = validate_paging(page, limit)
        if not query.strip():
            raise ValidationError("search query must not be blank")
        books, total = self._catalog.search(query.strip(), limit=limit, offset=offset)
        return Page(items=books, total=total, page=page, limit=limit)

    def correct_book(self, book_id: int, **fields: Any) -> Book:
        """Correct descriptive metadata of a catalog book.

        The ISBN identifies the book and cannot be changed; title and author
        cannot be blanked.

        Raises:
            ValidationError: For the ISBN, unknown fields, or blank title/author.
            CatalogBookNotFoundError: If the book does not exist.
        """
        if "isbn" in fields:
            raise ValidationError("A book's ISBN cannot be changed")
        unknown = sorted(set(fields) - set(BOOK_FIELDS))
        if unknown:
            raise ValidationError(f"Unknown book fields: {', '.join(unknown)}")
        for required in ("title", "author"):
            if required in fields:
                value = fields[required]
                if not isinstance(value, str) or not value.strip():
                    raise ValidationError(f"{required} must not be blank")
                fields[required] = value.strip()

        if self._catalog.find_by_id(book_id) is None:
            raise CatalogBookNotFoundError(book_id)
        book = self._catalog.update_fields(book_id, **fields)
        logger.info("Corrected book %d: %s", book_id, ", ".join(sorted(fields)))
        return book
