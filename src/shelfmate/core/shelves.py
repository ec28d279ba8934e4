# ABOUTME: Shelf manager: owner-controlled, optionally public collections of library entries.
# ABOUTME: Keeps each shelf's display order dense and ownership checks inside write transactions.

import logging
import sqlite3

from shelfmate.core.library import validate_paging
from shelfmate.db.connection import transaction
from shelfmate.db.library import LibraryRepository
from shelfmate.db.mapping import Page, Shelf, ShelfEntry
from shelfmate.db.shelves import ShelfRepository
from shelfmate.db.users import UserRepository
from shelfmate.errors import (
    AlreadyOnShelfError,
    InvalidReorderError,
    LibraryEntryNotFoundError,
    NotOnShelfError,
    NotOwnerError,
    PrivateShelfError,
    ShelfFullError,
    ShelfNotFoundError,
    UserNotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)

MAX_BOOKS_PER_SHELF = 1000
MAX_NAME_LENGTH = 100
MAX_DESCRIPTION_LENGTH = 500


def _clean_name(name: str) -> str:
    cleaned = name.strip()
    if not cleaned:
        raise ValidationError("Shelf name must not be blank")
    if len(cleaned) > MAX_NAME_LENGTH:
        raise ValidationError(f"Shelf name must be at most {MAX_NAME_LENGTH} characters")
    return cleaned


def _clean_description(description: str | None) -> str | None:
    if description is None:
        return None
    cleaned = description.strip()
    if len(cleaned) > MAX_DESCRIPTION_LENGTH:
        raise ValidationError(
            f"Shelf description must be at most {MAX_DESCRIPTION_LENGTH} characters"
        )
    return cleaned or None


class ShelfManager:
    """Shelf lifecycle, membership and ordering."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn
        self._shelves = ShelfRepository(conn)
        self._entries = LibraryRepository(conn)
        self._users = UserRepository(conn)

    # --- Lifecycle ---

    def create(
        self,
        owner_user_id: int,
        name: str,
        description: str | None = None,
        is_public: bool = False,
    ) -> Shelf:
        name = _clean_name(name)
        description = _clean_description(description)
        with transaction(self._conn):
            if not self._users.exists(owner_user_id):
                raise UserNotFoundError(owner_user_id)
            shelf = self._shelves.create(owner_user_id, name, description, is_public)
        logger.info("User %d created shelf %d (%s)", owner_user_id, shelf.id, name)
        return shelf

    def get(self, shelf_id: int, viewer_id: int | None = None) -> Shelf:
        """Return a shelf the viewer may see.

        Raises:
            ShelfNotFoundError: If the shelf does not exist.
            PrivateShelfError: If the shelf is private and the viewer is not its owner.
        """
        shelf = self._shelves.get(shelf_id)
        if shelf is None:
            raise ShelfNotFoundError(shelf_id)
        if not shelf.is_public and shelf.user_id != viewer_id:
            raise PrivateShelfError(shelf_id)
        return shelf

    def rename(self, shelf_id: int, name: str, owner_user_id: int) -> Shelf:
        name = _clean_name(name)
        with transaction(self._conn):
            self._owned(shelf_id, owner_user_id)
            self._shelves.update(shelf_id, name=name)
        return self._reload(shelf_id)

    def set_description(self, shelf_id: int, description: str | None, owner_user_id: int) -> Shelf:
        description = _clean_description(description)
        with transaction(self._conn):
            self._owned(shelf_id, owner_user_id)
            self._shelves.update(shelf_id, description=description)
        return self._reload(shelf_id)

    def set_visibility(self, shelf_id: int, is_public: bool, owner_user_id: int) -> Shelf:
        """Make a shelf public or private. Library entries are not touched."""
        with transaction(self._conn):
            self._owned(shelf_id, owner_user_id)
            self._shelves.update(shelf_id, is_public=is_public)
        logger.info("Shelf %d is now %s", shelf_id, "public" if is_public else "private")
        return self._reload(shelf_id)

    def delete(self, shelf_id: int, owner_user_id: int) -> None:
        """Delete a shelf and its memberships. The library entries remain."""
        with transaction(self._conn):
            self._owned(shelf_id, owner_user_id)
            self._shelves.delete(shelf_id)
        logger.info("Deleted shelf %d", shelf_id)

    # --- Membership ---

    def add_book(self, shelf_id: int, library_entry_id: int, owner_user_id: int) -> ShelfEntry:
        """Append one of the owner's library entries to the end of a shelf.

        Raises:
            ShelfNotFoundError: If the shelf does not exist.
            LibraryEntryNotFoundError: If the library entry does not exist.
            NotOwnerError: If the shelf or the library entry belongs to
                someone other than ``owner_user_id``.
            AlreadyOnShelfError: If the entry is already on the shelf.
            ShelfFullError: If the shelf holds MAX_BOOKS_PER_SHELF entries.
        """
        with transaction(self._conn):
            self._owned(shelf_id, owner_user_id)
            entry = self._entries.get(library_entry_id)
            if entry is None:
                raise LibraryEntryNotFoundError(library_entry_id)
            if entry.user_id != owner_user_id:
                raise NotOwnerError("Library entry", library_entry_id)
            if self._shelves.get_entry(shelf_id, library_entry_id) is not None:
                raise AlreadyOnShelfError(shelf_id, library_entry_id)
            if self._shelves.count_entries(shelf_id) >= MAX_BOOKS_PER_SHELF:
                raise ShelfFullError(MAX_BOOKS_PER_SHELF)
            shelf_entry = self._shelves.add_entry(shelf_id, library_entry_id)

        logger.debug(
            "Entry %d added to shelf %d at position %d",
            library_entry_id,
            shelf_id,
            shelf_entry.display_order,
        )
        return shelf_entry

    def remove_book(self, shelf_id: int, library_entry_id: int, owner_user_id: int) -> None:
        """Take an entry off a shelf and close the gap it leaves in the order.

        Raises:
            NotOnShelfError: If the entry is not on the shelf.
        """
        with transaction(self._conn):
            self._owned(shelf_id, owner_user_id)
            if not self._shelves.remove_entry(shelf_id, library_entry_id):
                raise NotOnShelfError(shelf_id, library_entry_id)
            self._shelves.compact(shelf_id)

    def reorder(self, shelf_id: int, ordered_entry_ids: list[int], owner_user_id: int) -> None:
        """Set the shelf's display order to ``ordered_entry_ids``.

        The list must name every entry on the shelf exactly once. On any
        failure the previous order is left as it was.

        Raises:
            InvalidReorderError: If the ids are not exactly the shelf's members.
        """
        with transaction(self._conn):
            self._owned(shelf_id, owner_user_id)
            if len(set(ordered_entry_ids)) != len(ordered_entry_ids):
                raise InvalidReorderError(shelf_id, "duplicate entry ids")
            current = set(self._shelves.member_ids(shelf_id))
            requested = set(ordered_entry_ids)
            if requested != current:
                missing = sorted(current - requested)
                extra = sorted(requested - current)
                parts = []
                if missing:
                    parts.append(f"missing {missing}")
                if extra:
                    parts.append(f"not on shelf {extra}")
                raise InvalidReorderError(shelf_id, ", ".join(parts))
            self._shelves.set_order(shelf_id, list(ordered_entry_ids))

    # --- Queries ---

    def list_entries(self, shelf_id: int, viewer_id: int | None = None) -> list[ShelfEntry]:
        """Entries of a visible shelf, with their books, in display order."""
        self.get(shelf_id, viewer_id)
        return self._shelves.list_entries(shelf_id)

    def list_user_shelves(self, user_id: int, viewer_id: int | None = None) -> list[Shelf]:
        """A user's shelves; anyone but the owner sees only the public ones."""
        if not self._users.exists(user_id):
            raise UserNotFoundError(user_id)
        return self._shelves.list_for_user(user_id, public_only=user_id != viewer_id)

    def list_public_shelves(self, *, page: int = 1, limit: int = 20) -> Page[Shelf]:
        offset = validate_paging(page, limit)
        shelves, total = self._shelves.list_public(limit=limit, offset=offset)
        return Page(items=shelves, total=total, page=page, limit=limit)

    def _owned(self, shelf_id: int, owner_user_id: int) -> Shelf:
        shelf = self._shelves.get(shelf_id)
        if shelf is None:
            raise ShelfNotFoundError(shelf_id)
        if shelf.user_id != owner_user_id:
            raise NotOwnerError("Shelf", shelf_id)
        return shelf

    def _reload(self, shelf_id: int) -> Shelf:
        shelf = self._shelves.get(shelf_id)
        if shelf is None:
            raise ShelfNotFoundError(shelf_id)
        return shelf
