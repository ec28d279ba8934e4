# ABOUTME: The `shelfmate lookup` command for resolving an ISBN to book metadata.
# ABOUTME: Uses the catalog when the book is known, otherwise queries the catalog sources.

import asyncio
from pathlib import Path

import click
from rich.console import Console

from shelfmate.cli import session
from shelfmate.cli.options import db_option
from shelfmate.cli.render import book_table
from shelfmate.core.services import resolver_session

console = Console()


@click.command("lookup")
@click.argument("isbn")
@db_option
def lookup(isbn: str, db_path: Path | None) -> None:
    """Resolve an ISBN-10 or ISBN-13 and show the book."""
    with session.command_session(db_path) as (settings, conn):

        async def resolve():
            async with resolver_session(
                settings, conn, source_factory=session.source_factory
            ) as resolver:
                return await resolver.resolve(isbn)

        book = asyncio.run(resolve())
        console.print(book_table(book))
