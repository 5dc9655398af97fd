# ABOUTME: Rich rendering of reconciliation results shared by scan and consume.
# ABOUTME: Prints a one-line summary followed by each per-file error.

import os
from pathlib import Path

from rich.console import Console
from rich.markup import escape

from biblioteca.core.reconciler import ReconcileResult


def printable(text: Path | str) -> str:
    """Text safe to print; undecodable filename bytes become U+FFFD."""
    return os.fsencode(text).decode("utf-8", "replace")


def print_result(console: Console, result: ReconcileResult, *, show_deleted: bool = True) -> None:
    """Print counts for a pass, then the path and message of every failure."""
    parts = [
        f"[green]{result.created} added[/green]",
        f"[cyan]{result.relocated} moved[/cyan]",
        f"[dim]{result.unchanged} unchanged[/dim]",
    ]
    if result.duplicates:
        parts.append(f"[dim]{result.duplicates} duplicate(s)[/dim]")
    if show_deleted:
        parts.append(f"[yellow]{result.deleted} removed[/yellow]")
    if result.errors:
        parts.append(f"[red]{result.errors} error(s)[/red]")

    console.print(", ".join(parts))

    if result.error_details:
        console.print(f"\n[yellow]{result.errors} file(s) could not be processed:[/yellow]")
        for path, msg in result.error_details:
            shown_path, shown_msg = escape(printable(path)), escape(printable(msg))
            console.print(f"  [dim]{shown_path}:[/dim] {shown_msg}", highlight=False)
