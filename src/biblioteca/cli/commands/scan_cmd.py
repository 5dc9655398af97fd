# ABOUTME: The `biblioteca scan` command: full reconciliation of a library folder.
# ABOUTME: Adds new books, follows moved files by checksum, and removes vanished ones.

import sqlite3
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn

from biblioteca.cli.options import db_option
from biblioteca.cli.report import printable, print_result
from biblioteca.core.filesource import BookFile
from biblioteca.core.reconciler import Reconciler
from biblioteca.db.catalog import LibraryCatalog, PersistenceError
from biblioteca.db.connection import DEFAULT_DB_PATH, open_library

console = Console()


@click.command("scan")
@click.argument(
    "directory",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
)
@db_option
def scan(directory: Path, db_path: Path | None) -> None:
    """Sync the catalog with every book file under DIRECTORY."""
    conn = open_library(db_path or DEFAULT_DB_PATH)
    try:
        catalog = LibraryCatalog(conn)
        with Progress(
            SpinnerColumn(),
            TextColumn("{task.description}"),
            TextColumn("[dim]{task.completed} file(s)[/dim]"),
            console=console,
            transient=True,
        ) as progress:
            task = progress.add_task("Scanning", total=None)

            def on_file(book_file: BookFile) -> None:
                name = printable(book_file.filename)
                progress.update(task, advance=1, description=f"Scanning {escape(name)}")

            result = Reconciler(catalog, on_file=on_file).run(directory)
    except (sqlite3.Error, PersistenceError) as exc:
        console.print(f"[red]Scan aborted:[/red] {exc}")
        raise SystemExit(1) from exc
    finally:
        conn.close()

    print_result(console, result)

    if not result.success:
        raise SystemExit(1)
