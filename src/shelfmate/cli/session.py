# ABOUTME: Per-command plumbing for the CLI: settings, store connection and error reporting.
# ABOUTME: Operational errors exit with status 1, internal failures with status 2.

import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from rich.console import Console
from rich.markup import escape

from shelfmate.config import Settings, load_settings
from shelfmate.db.connection import open_store
from shelfmate.errors import ShelfmateError
from shelfmate.sources import build_sources

logger = logging.getLogger(__name__)

err_console = Console(stderr=True)

# Builds the catalog sources for commands that resolve ISBNs.
source_factory = build_sources


@contextmanager
def command_session(db_path: Path | None) -> Iterator[tuple[Settings, sqlite3.Connection]]:
    """Load settings, open the store, and turn Shelfmate errors into exit codes."""
    conn: sqlite3.Connection | None = None
    try:
        settings = load_settings()
        conn = open_store(db_path or settings.db_path)
        yield settings, conn
    except ShelfmateError as exc:
        if exc.operational:
            err_console.print(f"[red]{escape(str(exc))}[/red]")
            raise SystemExit(1) from exc
        logger.debug("Internal failure", exc_info=exc)
        err_console.print(f"[red]Something went wrong: {escape(str(exc))}[/red]")
        raise SystemExit(2) from exc
    finally:
        if conn is not None:
            conn.close()
