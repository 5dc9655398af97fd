# ABOUTME: The `biblioteca consume` command for cataloging specific files.
# ABOUTME: Trusts an exact location match first; run `scan` to pick up renames.

import sqlite3
from pathlib import Path

import click
from rich.console import Console

from biblioteca.cli.options import db_option
from biblioteca.cli.report import print_result
from biblioteca.core.filesource import BookFile, book_file_for
from biblioteca.core.reconciler import Reconciler
from biblioteca.db.catalog import LibraryCatalog, PersistenceError
from biblioteca.db.connection import DEFAULT_DB_PATH, open_library

console = Console()


def _describe(root: Path, files: tuple[Path, ...]) -> list[BookFile]:
    book_files = []
    for path in files:
        try:
            book_files.append(book_file_for(root, path))
        except ValueError as exc:
            raise click.BadParameter(f"{path} is not inside {root}", param_hint="FILES") from exc
    return book_files


@click.command("consume")
@click.argument(
    "root",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
)
@click.argument(
    "files",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@db_option
def consume(root: Path, files: tuple[Path, ...], db_path: Path | None) -> None:
    """Catalog FILES, located relative to the library ROOT."""
    book_files = _describe(root, files)

    conn = open_library(db_path or DEFAULT_DB_PATH)
    try:
        result = Reconciler(LibraryCatalog(conn)).consume(book_files)
    except (sqlite3.Error, PersistenceError) as exc:
        console.print(f"[red]Import aborted:[/red] {exc}")
        raise SystemExit(1) from exc
    finally:
        conn.close()

    print_result(console, result, show_deleted=False)

    if not result.success:
        raise SystemExit(1)
