# ABOUTME: Shared Click options for Shelfmate CLI commands.
# ABOUTME: Provides reusable decorators for --db and --user.

from pathlib import Path

import click

from shelfmate.config import DEFAULT_DB_PATH

db_option = click.option(
    "--db",
    "db_path",
    type=click.Path(path_type=Path),
    default=None,
    help=f"Path to library database (default: $SHELFMATE_DB_PATH or {DEFAULT_DB_PATH})",
)

user_option = click.option(
    "--user",
    "user_id",
    type=int,
    required=True,
    envvar="SHELFMATE_USER",
    help="Id of the acting user (or $SHELFMATE_USER).",
)
