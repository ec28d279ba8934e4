# ABOUTME: The `shelfmate user` command group for local accounts.
# ABOUTME: Registers users by identity-provider uid and shows their library statistics.

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from shelfmate.cli.options import db_option
from shelfmate.cli.session import command_session
from shelfmate.core.social import SocialGraphManager

console = Console()


@click.group("user")
def user() -> None:
    """Manage user accounts."""


@user.command("add")
@click.argument("external_uid")
@click.argument("email")
@click.option("--name", "username", default=None, help="Display name (default: from email).")
@db_option
def user_add(external_uid: str, email: str, username: str | None, db_path: Path | None) -> None:
    """Register a user, or show the existing one for EXTERNAL_UID."""
    with command_session(db_path) as (_, conn):
        account = SocialGraphManager(conn).find_or_create_user(external_uid, email, username)
        console.print(f"User [bold]{account.username}[/bold] has id [cyan]{account.id}[/cyan].")


@user.command("show")
@click.argument("user_id", type=int)
@db_option
def user_show(user_id: int, db_path: Path | None) -> None:
    """Show a user and their library statistics."""
    with command_session(db_path) as (_, conn):
        social = SocialGraphManager(conn)
        account = social.get_user(user_id)
        stats = social.user_stats(user_id)

        table = Table(show_header=False, box=None, pad_edge=False)
        table.add_column("Field", style="bold", width=14)
        table.add_column("Value")
        table.add_row("ID", str(account.id))
        table.add_row("Name", account.username)
        table.add_row("Email", account.email)
        table.add_row("Books", f"{stats.total_books} ({stats.read_books} read)")
        table.add_row("Shelves", f"{stats.shelves} ({stats.public_shelves} public)")
        table.add_row("Followers", str(stats.followers))
        table.add_row("Following", str(stats.following))
        console.print(table)
