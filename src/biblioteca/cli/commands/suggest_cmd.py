# ABOUTME: The `biblioteca suggest` command for remote metadata suggestions.
# ABOUTME: Queries Open Library (and Google Books when a key is set) for one cataloged book.

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from biblioteca.cli.options import db_option
from biblioteca.db.catalog import LibraryCatalog
from biblioteca.db.connection import DEFAULT_DB_PATH, open_library
from biblioteca.metadata.http import BibliotecaHttpClient
from biblioteca.metadata.suggestions import SuggestionService

console = Console()

_FIELDS = ("title", "authors", "publisher", "tags", "summary", "image")
_SUMMARY_PREVIEW = 120


@click.command("suggest")
@click.argument("book_id", type=int)
@db_option
@click.option(
    "--google-api-key",
    envvar="GOOGLE_API_KEY",
    default=None,
    help="Google Books API key (default: $GOOGLE_API_KEY).",
)
def suggest(book_id: int, db_path: Path | None, google_api_key: str | None) -> None:
    """Show suggested metadata for the book with BOOK_ID."""
    conn = open_library(db_path or DEFAULT_DB_PATH)
    try:
        record = LibraryCatalog(conn).get_by_id(book_id)
    finally:
        conn.close()

    if record is None:
        console.print(f"[red]Book {book_id} not found.[/red]")
        raise SystemExit(1)

    http_client = BibliotecaHttpClient()
    try:
        service = SuggestionService(http_client, google_api_key=google_api_key)
        suggestions = service.suggest(record)
    finally:
        http_client.close()

    if suggestions.is_empty:
        console.print(f"[yellow]No suggestions for {record.title}.[/yellow]")
        return

    table = Table(title=f"Suggestions for {record.title}")
    table.add_column("Field", style="bold")
    table.add_column("Suggested values")

    for name in _FIELDS:
        values = getattr(suggestions, name)
        if not values:
            continue
        if name == "summary":
            values = [
                v if len(v) <= _SUMMARY_PREVIEW else v[:_SUMMARY_PREVIEW] + "..." for v in values
            ]
        table.add_row(name, "\n".join(values))

    console.print(table)
