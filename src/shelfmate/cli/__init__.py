# ABOUTME: CLI package for Shelfmate, built on Click.
# ABOUTME: Defines the root command group, logging setup, and registers subcommands.

import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from shelfmate.cli.commands import library_cmd, lookup_cmd, shelf_cmd, social_cmd, user_cmd


def configure_logging(verbose: bool) -> None:
    """Send log records to stderr through Rich; DEBUG with -v, WARNING otherwise."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )
    # httpx logs every request at INFO; keep that for -v only.
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)


@click.group()
@click.version_option(package_name="shelfmate")
@click.option("-v", "--verbose", is_flag=True, help="Show debug logging.")
def cli(verbose: bool) -> None:
    """Shelfmate - your book library, shelves and reading network."""
    configure_logging(verbose)


cli.add_command(lookup_cmd.lookup)
cli.add_command(user_cmd.user)
cli.add_command(library_cmd.library)
cli.add_command(shelf_cmd.shelf)
cli.add_command(social_cmd.follow)
cli.add_command(social_cmd.unfollow)
cli.add_command(social_cmd.block)
cli.add_command(social_cmd.unblock)
