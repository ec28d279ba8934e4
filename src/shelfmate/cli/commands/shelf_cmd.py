# ABOUTME: The `shelfmate shelf` command group for creating and arranging shelves.
# ABOUTME: Provides create, ls, show, add, rm, reorder, rename, visibility, and delete.

from pathlib import Path

import click
from rich.console import Console

from shelfmate.cli.options import db_option, user_option
from shelfmate.cli.render import shelf_entries_table, shelves_table
from shelfmate.cli.session import command_session
from shelfmate.core.shelves import ShelfManager

console = Console()


@click.group("shelf")
def shelf() -> None:
    """Manage your shelves."""


@shelf.command("create")
@click.argument("name")
@click.option("--description", default=None, help="Optional description.")
@click.option("--public", "is_public", is_flag=True, help="Make the shelf visible to others.")
@user_option
@db_option
def shelf_create(
    name: str, description: str | None, is_public: bool, user_id: int, db_path: Path | None
) -> None:
    """Create a new shelf."""
    with command_session(db_path) as (_, conn):
        created = ShelfManager(conn).create(user_id, name, description, is_public)
        console.print(f"Created shelf [bold]{created.name}[/bold] with id [cyan]{created.id}[/cyan].")


@shelf.command("ls")
@click.option("--owner", "owner_id", type=int, default=None, help="List another user's shelves.")
@user_option
@db_option
def shelf_ls(owner_id: int | None, user_id: int, db_path: Path | None) -> None:
    """List your shelves, or the public shelves of --owner."""
    with command_session(db_path) as (_, conn):
        shelves = ShelfManager(conn).list_user_shelves(owner_id or user_id, viewer_id=user_id)
        if not shelves:
            console.print("[yellow]No shelves.[/yellow]")
            return
        console.print(shelves_table(shelves))


@shelf.command("show")
@click.argument("shelf_id", type=int)
@user_option
@db_option
def shelf_show(shelf_id: int, user_id: int, db_path: Path | None) -> None:
    """Show a shelf and its books in order."""
    with command_session(db_path) as (_, conn):
        manager = ShelfManager(conn)
        found = manager.get(shelf_id, viewer_id=user_id)
        entries = manager.list_entries(shelf_id, viewer_id=user_id)

        console.print(f"[bold]{found.name}[/bold] ({'public' if found.is_public else 'private'})")
        if found.description:
            console.print(found.description)
        if not entries:
            console.print("[yellow]This shelf is empty.[/yellow]")
            return
        console.print(shelf_entries_table(entries))


@shelf.command("add")
@click.argument("shelf_id", type=int)
@click.argument("entry_id", type=int)
@user_option
@db_option
def shelf_add(shelf_id: int, entry_id: int, user_id: int, db_path: Path | None) -> None:
    """Put library entry ENTRY_ID on a shelf."""
    with command_session(db_path) as (_, conn):
        placed = ShelfManager(conn).add_book(shelf_id, entry_id, user_id)
        console.print(
            f"Added entry {entry_id} to shelf {shelf_id} at position {placed.display_order}."
        )


@shelf.command("rm")
@click.argument("shelf_id", type=int)
@click.argument("entry_id", type=int)
@user_option
@db_option
def shelf_rm(shelf_id: int, entry_id: int, user_id: int, db_path: Path | None) -> None:
    """Take library entry ENTRY_ID off a shelf."""
    with command_session(db_path) as (_, conn):
        ShelfManager(conn).remove_book(shelf_id, entry_id, user_id)
        console.print(f"Removed entry {entry_id} from shelf {shelf_id}.")


@shelf.command("reorder")
@click.argument("shelf_id", type=int)
@click.argument("entry_ids", type=int, nargs=-1, required=True)
@user_option
@db_option
def shelf_reorder(
    shelf_id: int, entry_ids: tuple[int, ...], user_id: int, db_path: Path | None
) -> None:
    """Set the order of a shelf; list every entry id on it exactly once."""
    with command_session(db_path) as (_, conn):
        ShelfManager(conn).reorder(shelf_id, list(entry_ids), user_id)
        console.print(f"Reordered shelf {shelf_id}.")


@shelf.command("rename")
@click.argument("shelf_id", type=int)
@click.argument("name")
@user_option
@db_option
def shelf_rename(shelf_id: int, name: str, user_id: int, db_path: Path | None) -> None:
    """Rename a shelf."""
    with command_session(db_path) as (_, conn):
        renamed = ShelfManager(conn).rename(shelf_id, name, user_id)
        console.print(f"Shelf {shelf_id} is now [bold]{renamed.name}[/bold].")


@shelf.command("visibility")
@click.argument("shelf_id", type=int)
@click.option("--public/--private", "is_public", required=True)
@user_option
@db_option
def shelf_visibility(shelf_id: int, is_public: bool, user_id: int, db_path: Path | None) -> None:
    """Make a shelf public or private."""
    with command_session(db_path) as (_, conn):
        ShelfManager(conn).set_visibility(shelf_id, is_public, user_id)
        console.print(f"Shelf {shelf_id} is now {'public' if is_public else 'private'}.")


@shelf.command("delete")
@click.argument("shelf_id", type=int)
@user_option
@db_option
def shelf_delete(shelf_id: int, user_id: int, db_path: Path | None) -> None:
    """Delete a shelf. The books stay in your library."""
    with command_session(db_path) as (_, conn):
        ShelfManager(conn).delete(shelf_id, user_id)
        console.print(f"Deleted shelf {shelf_id}.")
