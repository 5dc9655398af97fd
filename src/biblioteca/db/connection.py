# ABOUTME: SQLite database connection management for the Biblioteca catalog.
# ABOUTME: Opens or creates the database, applies schema, and resolves the default location.

import os
import sqlite3
from pathlib import Path

from biblioteca.db.schema import SCHEMA_V1

DEFAULT_DB_PATH = Path(
    os.environ.get("BIBLIOTECA_DB", Path.home() / ".biblioteca" / "library.db")
)


def _schema_exists(conn: sqlite3.Connection) -> bool:
    """Check if the schema has already been applied."""
    cursor = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='table' AND name='schema_version'"
    )
    return cursor.fetchone() is not None


def _apply_schema(conn: sqlite3.Connection) -> None:
    """Execute the DDL to create all tables and indexes."""
    conn.executescript(SCHEMA_V1)


def open_library(path: Path | None = None) -> sqlite3.Connection:
    """Open or create the Biblioteca catalog database.

    Creates the database file and parent directories if they don't exist.
    Applies the schema on first creation. Sets WAL journal mode, enables
    foreign keys (tag links cascade on book delete) and uses sqlite3.Row
    for dict-like column access.

    Args:
        path: Path to the database file. Defaults to DEFAULT_DB_PATH.

    Returns:
        A configured sqlite3.Connection.
    """
    db_path = path or DEFAULT_DB_PATH
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(str(db_path))
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA foreign_keys=ON")

    if not _schema_exists(conn):
        _apply_schema(conn)

    return conn
