# ABOUTME: The follow, unfollow, block and unblock commands.
# ABOUTME: Thin wrappers over the social graph manager for the acting --user.

from pathlib import Path

import click
from rich.console import Console

from shelfmate.cli.options import db_option, user_option
from shelfmate.cli.session import command_session
from shelfmate.core.social import SocialGraphManager

console = Console()


@click.command("follow")
@click.argument("target_id", type=int)
@user_option
@db_option
def follow(target_id: int, user_id: int, db_path: Path | None) -> None:
    """Follow another user."""
    with command_session(db_path) as (_, conn):
        SocialGraphManager(conn).follow(user_id, target_id)
        console.print(f"You now follow user {target_id}.")


@click.command("unfollow")
@click.argument("target_id", type=int)
@user_option
@db_option
def unfollow(target_id: int, user_id: int, db_path: Path | None) -> None:
    """Stop following a user."""
    with command_session(db_path) as (_, conn):
        SocialGraphManager(conn).unfollow(user_id, target_id)
        console.print(f"You no longer follow user {target_id}.")


@click.command("block")
@click.argument("target_id", type=int)
@user_option
@db_option
def block(target_id: int, user_id: int, db_path: Path | None) -> None:
    """Block a user; any follows between you are removed."""
    with command_session(db_path) as (_, conn):
        SocialGraphManager(conn).block(user_id, target_id)
        console.print(f"Blocked user {target_id}.")


@click.command("unblock")
@click.argument("target_id", type=int)
@user_option
@db_option
def unblock(target_id: int, user_id: int, db_path: Path | None) -> None:
    """Unblock a user."""
    with command_session(db_path) as (_, conn):
        SocialGraphManager(conn).unblock(user_id, target_id)
        console.print(f"Unblocked user {target_id}.")
