# ABOUTME: Exception hierarchy shared by the resolver, the managers, and the store.
# ABOUTME: Operational errors are expected and user-actionable; the rest are internal faults.

from typing import Any


class ShelfmateError(Exception):
    """Base class for every error raised by Shelfmate.

    ``operational`` marks expected, user-actionable failures. Non-operational
    errors (store faults, bad configuration) should surface to callers as a
    generic failure without their internal detail.
    """

    operational = True

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message)
        self.details = details


class ConfigurationError(ShelfmateError):
    """Raised when settings cannot be loaded or are invalid."""

    operational = False


class StoreError(ShelfmateError):
    """Raised when the persisted-record store fails unexpectedly."""

    operational = False


class ValidationError(ShelfmateError):
    """Raised for malformed caller input other than ISBNs."""


class InvalidIsbnError(ValidationError):
    """Raised when a string is not a well-formed, checksum-valid ISBN."""

    def __init__(self, raw: str, reason: str) -> None:
        super().__init__(f"Invalid ISBN {raw!r}: {reason}", isbn=raw, reason=reason)
        self.raw = raw
        self.reason = reason


# --- External catalog outcomes ---


class SourceError(ShelfmateError):
    """A catalog source could not answer a lookup.

    ``retryable`` is True for transient faults (timeouts, 5xx, rate limits)
    and False for failures that will not clear within this request (bad
    credentials, exhausted quota, malformed payloads).
    """

    def __init__(self, source: str, detail: str, *, retryable: bool) -> None:
        super().__init__(f"{source}: {detail}", source=source, retryable=retryable)
        self.source = source
        self.detail = detail
        self.retryable = retryable


class BookNotFoundError(ShelfmateError):
    """No catalog has a record for the ISBN."""

    def __init__(self, isbn: str, errors: list[SourceError] | None = None) -> None:
        super().__init__(f"No book found for ISBN {isbn}", isbn=isbn)
        self.isbn = isbn
        self.errors = errors or []


class BookSearchFailedError(ShelfmateError):
    """Every catalog failed, so whether the book exists is unknown."""

    def __init__(self, isbn: str, errors: list[SourceError]) -> None:
        summary = "; ".join(str(e) for e in errors)
        super().__init__(f"Book search failed for ISBN {isbn}: {summary}", isbn=isbn)
        self.isbn = isbn
        self.errors = errors


# --- Missing entities ---


class EntityNotFoundError(ShelfmateError):
    """A referenced row does not exist."""

    entity = "Entity"

    def __init__(self, identifier: object) -> None:
        super().__init__(f"{self.entity} {identifier} not found", identifier=identifier)
        self.identifier = identifier


class UserNotFoundError(EntityNotFoundError):
    entity = "User"


class ShelfNotFoundError(EntityNotFoundError):
    entity = "Shelf"


class LibraryEntryNotFoundError(EntityNotFoundError):
    entity = "Library entry"


class CatalogBookNotFoundError(EntityNotFoundError):
    entity = "Book"


# --- Access control ---


class NotOwnerError(ShelfmateError):
    """The caller does not own the resource it tried to change."""

    def __init__(self, resource: str, identifier: object) -> None:
        super().__init__(
            f"{resource} {identifier} belongs to another user",
            resource=resource,
            identifier=identifier,
        )


class PrivateShelfError(ShelfmateError):
    """The shelf is private and the viewer is not its owner."""

    def __init__(self, shelf_id: int) -> None:
        super().__init__(f"Shelf {shelf_id} is private", shelf_id=shelf_id)


# --- Conflicts (relation already exists) ---


class ConflictError(ShelfmateError):
    """Attempted to create a relation that already exists."""


class DuplicateLibraryEntryError(ConflictError):
    def __init__(self, user_id: int, book_id: int) -> None:
        super().__init__(
            f"Book {book_id} is already in the library of user {user_id}",
            user_id=user_id,
            book_id=book_id,
        )


class AlreadyOnShelfError(ConflictError):
    def __init__(self, shelf_id: int, entry_id: int) -> None:
        super().__init__(
            f"Library entry {entry_id} is already on shelf {shelf_id}",
            shelf_id=shelf_id,
            entry_id=entry_id,
        )


class AlreadyFollowingError(ConflictError):
    def __init__(self, follower_id: int, target_id: int) -> None:
        super().__init__(f"User {follower_id} already follows user {target_id}")


class AlreadyBlockedError(ConflictError):
    def __init__(self, blocker_id: int, target_id: int) -> None:
        super().__init__(f"User {blocker_id} has already blocked user {target_id}")


# --- Business rule violations ---


class RuleViolationError(ShelfmateError):
    """The operation is well-formed but not allowed in the current state."""


class NoStatusChangeError(RuleViolationError):
    def __init__(self, entry_id: int, is_read: bool) -> None:
        status = "read" if is_read else "unread"
        super().__init__(f"Library entry {entry_id} is already marked as {status}")


class NotInLibraryError(RuleViolationError):
    def __init__(self, isbn: str) -> None:
        super().__init__(f"Book with ISBN {isbn} is not in your library", isbn=isbn)


class InvalidReorderError(RuleViolationError):
    def __init__(self, shelf_id: int, reason: str) -> None:
        super().__init__(f"Invalid reorder for shelf {shelf_id}: {reason}")


class NotOnShelfError(RuleViolationError):
    def __init__(self, shelf_id: int, entry_id: int) -> None:
        super().__init__(f"Library entry {entry_id} is not on shelf {shelf_id}")


class ShelfFullError(RuleViolationError):
    def __init__(self, limit: int) -> None:
        super().__init__(f"Shelf is full. Maximum {limit} books allowed", limit=limit)


class SelfFollowError(RuleViolationError):
    def __init__(self) -> None:
        super().__init__("You cannot follow yourself")


class SelfBlockError(RuleViolationError):
    def __init__(self) -> None:
        super().__init__("You cannot block yourself")


class BlockedByTargetError(RuleViolationError):
    def __init__(self, target_id: int) -> None:
        super().__init__(f"User {target_id} has blocked you")


class NotFollowingError(RuleViolationError):
    def __init__(self, follower_id: int, target_id: int) -> None:
        super().__init__(f"User {follower_id} does not follow user {target_id}")


class NotBlockedError(RuleViolationError):
    def __init__(self, blocker_id: int, target_id: int) -> None:
        super().__init__(f"User {blocker_id} has not blocked user {target_id}")
