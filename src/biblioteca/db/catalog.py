# ABOUTME: Catalog store for Biblioteca: typed CRUD over the books and tag tables.
# ABOUTME: Writes are staged by save/delete and made durable by an explicit commit.

import sqlite3
from collections import defaultdict

from biblioteca.db.mapping import BookRecord, record_to_row, row_to_record


class PersistenceError(Exception):
    """Raised when the catalog database cannot store or look up a record."""


class DuplicateBookError(PersistenceError):
    """Raised when attempting to insert a book whose checksum already exists."""


class LibraryCatalog:
    """Wraps a sqlite3 connection and provides typed CRUD for book records.

    save() and delete() run inside the connection's open transaction;
    nothing is durable until commit() is called. On a failed write the caller
    should rollback() to discard the partial change.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    # --- Lookups ---

    def get_by_id(self, book_id: int) -> BookRecord | None:
        """Retrieve a book by its row ID."""
        cursor = self._conn.execute("SELECT * FROM books WHERE id = ?", (book_id,))
        row = cursor.fetchone()
        return self._to_record(row) if row else None

    def find_by_checksum(self, checksum: str) -> BookRecord | None:
        """Retrieve a book by the checksum of its content."""
        cursor = self._conn.execute("SELECT * FROM books WHERE checksum = ?", (checksum,))
        row = cursor.fetchone()
        return self._to_record(row) if row else None

    def find_by_location(self, book_path: str, book_filename: str) -> BookRecord | None:
        """Retrieve a book by its exact folder and filename.

        Raises:
            PersistenceError: If the location can't be stored as UTF-8, e.g.
                a filename with undecodable bytes.
        """
        try:
            cursor = self._conn.execute(
                "SELECT * FROM books WHERE book_path = ? AND book_filename = ?",
                (book_path, book_filename),
            )
        except UnicodeEncodeError as exc:
            raise PersistenceError(
                f"Cannot look up {book_path!r}/{book_filename!r}: {exc}"
            ) from exc
        row = cursor.fetchone()
        return self._to_record(row) if row else None

    def find_all(self) -> list[BookRecord]:
        """Return all books in the catalog, ordered by title."""
        tags = self._tags_by_book()
        cursor = self._conn.execute("SELECT * FROM books ORDER BY title")
        return [row_to_record(row, tags.get(row["id"])) for row in cursor.fetchall()]

    def list_by_series(self, serie: str) -> list[BookRecord]:
        """Return books in a given series, ordered by serie_index."""
        cursor = self._conn.execute(
            "SELECT * FROM books WHERE serie = ? ORDER BY serie_index",
            (serie,),
        )
        return [self._to_record(row) for row in cursor.fetchall()]

    # --- Writes ---

    def save(self, record: BookRecord) -> None:
        """Insert a new record or update an existing one, including its tags.

        A record without an id is inserted and receives its row id.

        Raises:
            DuplicateBookError: If inserting a checksum that already exists.
            PersistenceError: On any other database failure.
        """
        row = record_to_row(record)
        try:
            if record.id is None:
                record.id = self._insert(row)
            else:
                self._update(record.id, row)
            self._write_tags(record.id, record.tags)
        except sqlite3.IntegrityError as exc:
            if "UNIQUE constraint failed: books.checksum" in str(exc):
                raise DuplicateBookError(
                    f"Book with checksum {record.checksum} already exists"
                ) from exc
            raise PersistenceError(f"Failed to save {record.title!r}: {exc}") from exc
        except (sqlite3.Error, UnicodeEncodeError) as exc:
            raise PersistenceError(f"Failed to save {record.title!r}: {exc}") from exc

    def delete(self, record: BookRecord) -> None:
        """Delete a book from the catalog. Tag links are removed by cascade.

        Raises:
            ValueError: If the record was never saved or no longer exists.
            PersistenceError: On database failure.
        """
        if record.id is None:
            raise ValueError(f"Book {record.title!r} has no id")
        try:
            cursor = self._conn.execute("DELETE FROM books WHERE id = ?", (record.id,))
        except sqlite3.Error as exc:
            raise PersistenceError(f"Failed to delete {record.title!r}: {exc}") from exc

        if cursor.rowcount == 0:
            raise ValueError(f"Book with id {record.id} not found")

    def commit(self) -> None:
        """Make all staged writes durable."""
        try:
            self._conn.commit()
        except sqlite3.Error as exc:
            raise PersistenceError(f"Commit failed: {exc}") from exc

    def rollback(self) -> None:
        """Discard all writes staged since the last commit."""
        self._conn.rollback()

    # --- Tag queries ---

    def get_tags_for_book(self, book_id: int) -> set[str]:
        """Get all tags for a book."""
        cursor = self._conn.execute(
            "SELECT t.name FROM tags t "
            "JOIN book_tags bt ON t.id = bt.tag_id "
            "WHERE bt.book_id = ?",
            (book_id,),
        )
        return {row[0] for row in cursor.fetchall()}

    def list_tags(self) -> list[tuple[str, int]]:
        """List all tags with their book counts, alphabetically sorted."""
        cursor = self._conn.execute(
            "SELECT t.name, COUNT(bt.book_id) as book_count "
            "FROM tags t "
            "JOIN book_tags bt ON t.id = bt.tag_id "
            "GROUP BY t.id "
            "ORDER BY t.name"
        )
        return [(row[0], row[1]) for row in cursor.fetchall()]

    def get_books_by_tag(self, tag_name: str) -> list[BookRecord]:
        """Get all books with a given tag.

        Raises:
            ValueError: If the tag doesn't exist.
        """
        cursor = self._conn.execute("SELECT id FROM tags WHERE name = ?", (tag_name,))
        if cursor.fetchone() is None:
            raise ValueError(f"Tag '{tag_name}' not found")

        cursor = self._conn.execute(
            "SELECT b.* FROM books b "
            "JOIN book_tags bt ON b.id = bt.book_id "
            "JOIN tags t ON bt.tag_id = t.id "
            "WHERE t.name = ? "
            "ORDER BY b.title",
            (tag_name,),
        )
        return [self._to_record(row) for row in cursor.fetchall()]

    # --- Internals ---

    def _to_record(self, row: sqlite3.Row) -> BookRecord:
        return row_to_record(row, self.get_tags_for_book(row["id"]))

    def _tags_by_book(self) -> dict[int, set[str]]:
        tags: dict[int, set[str]] = defaultdict(set)
        cursor = self._conn.execute(
            "SELECT bt.book_id, t.name FROM book_tags bt JOIN tags t ON t.id = bt.tag_id"
        )
        for book_id, name in cursor.fetchall():
            tags[book_id].add(name)
        return tags

    def _insert(self, row: dict) -> int:
        columns = ", ".join(row.keys())
        placeholders = ", ".join("?" for _ in row)
        cursor = self._conn.execute(
            f"INSERT INTO books ({columns}) VALUES ({placeholders})",
            list(row.values()),
        )
        return cursor.lastrowid  # type: ignore[return-value]

    def _update(self, book_id: int, row: dict) -> None:
        set_clause = ", ".join(f"{k} = ?" for k in row)
        set_clause += ", date_modified = strftime('%Y-%m-%dT%H:%M:%S', 'now')"
        cursor = self._conn.execute(
            f"UPDATE books SET {set_clause} WHERE id = ?",
            [*row.values(), book_id],
        )
        if cursor.rowcount == 0:
            raise PersistenceError(f"Book with id {book_id} not found")

    def _write_tags(self, book_id: int, tags: set[str]) -> None:
        self._conn.execute("DELETE FROM book_tags WHERE book_id = ?", (book_id,))
        for tag_name in sorted(tags):
            self._conn.execute("INSERT OR IGNORE INTO tags (name) VALUES (?)", (tag_name,))
            self._conn.execute(
                "INSERT OR IGNORE INTO book_tags (book_id, tag_id) "
                "SELECT ?, id FROM tags WHERE name = ?",
                (book_id, tag_name),
            )
