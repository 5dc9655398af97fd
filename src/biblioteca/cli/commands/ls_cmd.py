# ABOUTME: The `biblioteca ls` command for listing cataloged books.
# ABOUTME: Displays a Rich table of books, optionally filtered by series or tag.

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from biblioteca.cli.options import db_option
from biblioteca.db.catalog import LibraryCatalog
from biblioteca.db.connection import DEFAULT_DB_PATH, open_library
from biblioteca.db.mapping import BookRecord

console = Console()


def _series_display(record: BookRecord) -> str:
    if not record.serie:
        return ""
    if record.serie_index is not None:
        return f"{record.serie} #{record.serie_index:g}"
    return record.serie


@click.command("ls")
@db_option
@click.option("--series", "series_filter", default=None, help="Filter by series name.")
@click.option("--tag", "tag_filter", default=None, help="Filter by tag name.")
def ls(db_path: Path | None, series_filter: str | None, tag_filter: str | None) -> None:
    """List all books in the library catalog."""
    conn = open_library(db_path or DEFAULT_DB_PATH)
    try:
        catalog = LibraryCatalog(conn)
        if tag_filter:
            try:
                records = catalog.get_books_by_tag(tag_filter)
            except ValueError as exc:
                console.print(f"[red]Tag '{tag_filter}' not found.[/red]")
                raise SystemExit(1) from exc
        elif series_filter:
            records = catalog.list_by_series(series_filter)
        else:
            records = catalog.find_all()
    finally:
        conn.close()

    if not records:
        console.print("[yellow]No books in the library.[/yellow]")
        return

    table = Table()
    table.add_column("ID", style="dim", width=4)
    table.add_column("Title", style="bold")
    table.add_column("Author")
    table.add_column("Series")
    table.add_column("Lang", width=5)
    table.add_column("Location", style="dim")

    for record in records:
        table.add_row(
            str(record.id),
            record.title,
            record.author,
            _series_display(record),
            record.language or "?",
            "/".join(part for part in record.location if part),
        )

    console.print(table)
    console.print(f"\n[dim]{len(records)} book(s)[/dim]")
