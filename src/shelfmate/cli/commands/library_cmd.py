# ABOUTME: The `shelfmate library` command group for a user's personal library.
# ABOUTME: Provides add, ls, read, unread, and rm subcommands.

import asyncio
from pathlib import Path

import click
from rich.console import Console

from shelfmate.cli import session
from shelfmate.cli.options import db_option, user_option
from shelfmate.cli.render import entries_table
from shelfmate.core.library import LibraryManager
from shelfmate.core.services import resolver_session

console = Console()


@click.group("library")
def library() -> None:
    """Manage the books in your library."""


@library.command("add")
@click.argument("isbn")
@user_option
@db_option
def library_add(isbn: str, user_id: int, db_path: Path | None) -> None:
    """Look up ISBN and add the book to your library."""
    with session.command_session(db_path) as (settings, conn):

        async def add():
            async with resolver_session(
                settings, conn, source_factory=session.source_factory
            ) as resolver:
                return await LibraryManager(conn, resolver).add_to_library(isbn, user_id)

        entry = asyncio.run(add())
        title = entry.book.title if entry.book else isbn
        console.print(f"Added [bold]{title}[/bold] as entry [cyan]{entry.id}[/cyan].")


@library.command("ls")
@click.option("--read/--unread", "is_read", default=None, help="Only read or unread books.")
@click.option(
    "--sort",
    "sort_by",
    type=click.Choice(["added_at", "read_at", "title"]),
    default="added_at",
    show_default=True,
)
@click.option("--page", type=int, default=1, show_default=True)
@click.option("--limit", type=int, default=20, show_default=True)
@user_option
@db_option
def library_ls(
    is_read: bool | None,
    sort_by: str,
    page: int,
    limit: int,
    user_id: int,
    db_path: Path | None,
) -> None:
    """List the books in your library."""
    with session.command_session(db_path) as (_, conn):
        result = LibraryManager(conn).list_library(
            user_id,
            is_read=is_read,
            sort_by=sort_by,
            descending=sort_by != "title",
            page=page,
            limit=limit,
        )
        if not result.items:
            console.print("[yellow]No books in your library.[/yellow]")
            return
        console.print(entries_table(result.items))
        console.print(f"\n[dim]{result.total} book(s), page {result.page}[/dim]")


def _set_read(entry_id: int, is_read: bool, user_id: int, db_path: Path | None) -> None:
    with session.command_session(db_path) as (_, conn):
        entry = LibraryManager(conn).update_read_status(entry_id, is_read, user_id)
        state = "read" if entry.is_read else "unread"
        title = entry.book.title if entry.book else str(entry.id)
        console.print(f"Marked [bold]{title}[/bold] as {state}.")


@library.command("read")
@click.argument("entry_id", type=int)
@user_option
@db_option
def library_read(entry_id: int, user_id: int, db_path: Path | None) -> None:
    """Mark a library entry as read."""
    _set_read(entry_id, True, user_id, db_path)


@library.command("unread")
@click.argument("entry_id", type=int)
@user_option
@db_option
def library_unread(entry_id: int, user_id: int, db_path: Path | None) -> None:
    """Mark a library entry as unread."""
    _set_read(entry_id, False, user_id, db_path)


@library.command("rm")
@click.argument("isbn")
@user_option
@db_option
def library_rm(isbn: str, user_id: int, db_path: Path | None) -> None:
    """Remove a book from your library and from all of your shelves."""
    with session.command_session(db_path) as (_, conn):
        LibraryManager(conn).remove_from_library(isbn, user_id)
        console.print(f"Removed {isbn} from your library.")
