# ABOUTME: Rich renderables shared by the CLI commands.
# ABOUTME: Book detail, library entry and shelf tables.

from rich.table import Table

from shelfmate.db.mapping import Book, LibraryEntry, Shelf, ShelfEntry
from shelfmate.isbn import registration_group, to_isbn10


def book_table(book: Book) -> Table:
    """Two-column field/value table describing one book."""
    table = Table(show_header=False, box=None, pad_edge=False)
    table.add_column("Field", style="bold", width=14)
    table.add_column("Value")

    table.add_row("ID", str(book.id))
    table.add_row("Title", book.title)
    table.add_row("Author", book.author)
    isbn10 = to_isbn10(book.isbn)
    table.add_row("ISBN", f"{book.isbn} ({isbn10})" if isbn10 else book.isbn)
    group = registration_group(book.isbn)
    if group:
        table.add_row("Group", group)
    if book.publisher:
        table.add_row("Publisher", book.publisher)
    if book.published_date:
        table.add_row("Published", book.published_date)
    if book.series:
        table.add_row("Series", book.series)
    if book.page_count:
        table.add_row("Pages", str(book.page_count))
    if book.price is not None:
        table.add_row("Price", str(book.price))
    if book.description:
        table.add_row("Description", book.description)
    if book.thumbnail_url:
        table.add_row("Cover", book.thumbnail_url)
    if book.source:
        table.add_row("Source", book.source)
    return table


def entries_table(entries: list[LibraryEntry]) -> Table:
    table = Table()
    table.add_column("Entry", style="dim", width=6)
    table.add_column("Title", style="bold")
    table.add_column("Author")
    table.add_column("ISBN")
    table.add_column("Read", width=5)

    for entry in entries:
        book = entry.book
        table.add_row(
            str(entry.id),
            book.title if book else "?",
            book.author if book else "",
            book.isbn if book else "",
            "[green]yes[/green]" if entry.is_read else "no",
        )
    return table


def shelves_table(shelves: list[Shelf]) -> Table:
    table = Table()
    table.add_column("ID", style="dim", width=4)
    table.add_column("Name", style="bold")
    table.add_column("Books", justify="right")
    table.add_column("Visibility")

    for shelf in shelves:
        table.add_row(
            str(shelf.id),
            shelf.name,
            str(shelf.book_count),
            "public" if shelf.is_public else "[dim]private[/dim]",
        )
    return table


def shelf_entries_table(shelf_entries: list[ShelfEntry]) -> Table:
    table = Table()
    table.add_column("#", style="dim", width=4)
    table.add_column("Entry", style="dim", width=6)
    table.add_column("Title", style="bold")
    table.add_column("Author")

    for shelf_entry in shelf_entries:
        book = shelf_entry.entry.book if shelf_entry.entry else None
        table.add_row(
            str(shelf_entry.display_order),
            str(shelf_entry.library_entry_id),
            book.title if book else "?",
            book.author if book else "",
        )
    return table
