# ABOUTME: Entity dataclasses for stored rows and converters between them and SQLite rows.
# ABOUTME: Joined queries alias colliding columns; the converters here know those aliases.

from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from shelfmate.sources.types import SourceRecord

T = TypeVar("T")

# Columns a catalog correction may change. The ISBN is deliberately absent.
BOOK_FIELDS = (
    "title",
    "author",
    "publisher",
    "published_date",
    "description",
    "page_count",
    "thumbnail_url",
    "price",
    "series",
)


@dataclass
class Book:
    """A catalog book, shared by every user's library."""

    id: int
    isbn: str
    title: str
    author: str
    publisher: str | None = None
    published_date: str | None = None
    description: str | None = None
    page_count: int | None = None
    thumbnail_url: str | None = None
    price: int | None = None
    series: str | None = None
    source: str | None = None
    created_at: str = ""
    updated_at: str = ""


@dataclass
class User:
    id: int
    external_uid: str
    username: str
    email: str
    created_at: str = ""
    updated_at: str = ""


@dataclass
class LibraryEntry:
    """One book in one user's library."""

    id: int
    user_id: int
    book_id: int
    is_read: bool
    added_at: str
    read_at: str | None = None
    book: Book | None = None


@dataclass
class Shelf:
    id: int
    user_id: int
    name: str
    description: str | None
    is_public: bool
    created_at: str = ""
    updated_at: str = ""
    book_count: int = 0


@dataclass
class ShelfEntry:
    """A library entry placed on a shelf at a given display position."""

    id: int
    shelf_id: int
    library_entry_id: int
    display_order: int
    added_at: str
    entry: LibraryEntry | None = None


@dataclass
class UserStats:
    total_books: int = 0
    read_books: int = 0
    unread_books: int = 0
    shelves: int = 0
    public_shelves: int = 0
    followers: int = 0
    following: int = 0


@dataclass
class Page(Generic[T]):
    """One page of a listing plus the total number of matching items."""

    items: list[T] = field(default_factory=list)
    total: int = 0
    page: int = 1
    limit: int = 20

    @property
    def has_next(self) -> bool:
        return self.page * self.limit < self.total


def record_to_row(record: SourceRecord) -> dict[str, Any]:
    """Convert a SourceRecord to a dict suitable for INSERT into books."""
    return {
        "isbn": record.isbn,
        "title": record.title,
        "author": record.author,
        "publisher": record.publisher,
        "published_date": record.published_date,
        "description": record.description,
        "page_count": record.page_count,
        "thumbnail_url": record.thumbnail_url,
        "price": record.price,
        "series": record.series,
        "source": record.source,
    }


def row_to_book(row: Any) -> Book:
    return Book(
        id=row["id"],
        isbn=row["isbn"],
        title=row["title"],
        author=row["author"],
        publisher=row["publisher"],
        published_date=row["published_date"],
        description=row["description"],
        page_count=row["page_count"],
        thumbnail_url=row["thumbnail_url"],
        price=row["price"],
        series=row["series"],
        source=row["source"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def row_to_user(row: Any) -> User:
    return User(
        id=row["id"],
        external_uid=row["external_uid"],
        username=row["username"],
        email=row["email"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def row_to_entry(row: Any) -> LibraryEntry:
    """Convert a library entry joined with its book.

    Expects the entry columns aliased with an ``entry_`` prefix and the book
    columns under their own names (see ``ENTRY_WITH_BOOK_COLUMNS``).
    """
    return LibraryEntry(
        id=row["entry_id"],
        user_id=row["entry_user_id"],
        book_id=row["entry_book_id"],
        is_read=bool(row["entry_is_read"]),
        added_at=row["entry_added_at"],
        read_at=row["entry_read_at"],
        book=row_to_book(row),
    )


def row_to_shelf(row: Any) -> Shelf:
    keys = row.keys()
    return Shelf(
        id=row["id"],
        user_id=row["user_id"],
        name=row["name"],
        description=row["description"],
        is_public=bool(row["is_public"]),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
        book_count=row["book_count"] if "book_count" in keys else 0,
    )


def row_to_shelf_entry(row: Any) -> ShelfEntry:
    """Convert a shelf entry row; attaches the library entry when the row carries one."""
    entry = row_to_entry(row) if "entry_id" in row.keys() else None
    return ShelfEntry(
        id=row["shelf_entry_id"],
        shelf_id=row["shelf_entry_shelf_id"],
        library_entry_id=row["shelf_entry_library_entry_id"],
        display_order=row["shelf_entry_display_order"],
        added_at=row["shelf_entry_added_at"],
        entry=entry,
    )


ENTRY_WITH_BOOK_COLUMNS = (
    "le.id AS entry_id, le.user_id AS entry_user_id, le.book_id AS entry_book_id, "
    "le.is_read AS entry_is_read, le.added_at AS entry_added_at, "
    "le.read_at AS entry_read_at, b.*"
)

SHELF_ENTRY_COLUMNS = (
    "se.id AS shelf_entry_id, se.shelf_id AS shelf_entry_shelf_id, "
    "se.library_entry_id AS shelf_entry_library_entry_id, "
    "se.display_order AS shelf_entry_display_order, se.added_at AS shelf_entry_added_at"
)
