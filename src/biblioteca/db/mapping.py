# ABOUTME: BookRecord, the catalog entity, and its conversion to and from SQLite rows.
# ABOUTME: Handles JSON serialization of the ordered author list.

import json
from dataclasses import dataclass, field
from typing import Any


@dataclass
class BookRecord:
    """A cataloged book, identified by the checksum of its file content.

    The location fields (book_path, book_filename) are the only fields the
    reconciler changes on an existing record. book_path is the folder
    containing the file, relative to the library root.
    """

    checksum: str
    title: str
    authors: list[str] = field(default_factory=list)
    summary: str | None = None
    publisher: str | None = None
    language: str | None = None
    tags: set[str] = field(default_factory=set)
    serie: str | None = None
    serie_index: float | None = None
    extension: str = ""
    book_path: str = ""
    book_filename: str = ""
    id: int | None = None
    date_added: str | None = None
    date_modified: str | None = None

    @property
    def author(self) -> str:
        """Convenience property: joined author string for display."""
        return ", ".join(self.authors)

    @property
    def main_author(self) -> str | None:
        return self.authors[0] if self.authors else None

    @property
    def location(self) -> tuple[str, str]:
        return (self.book_path, self.book_filename)


def record_to_row(record: BookRecord) -> dict[str, Any]:
    """Convert a BookRecord to a dict suitable for INSERT or UPDATE.

    Tags live in their own tables and are not part of the row.
    """
    return {
        "checksum": record.checksum,
        "title": record.title,
        "authors": json.dumps(record.authors),
        "summary": record.summary,
        "publisher": record.publisher,
        "language": record.language,
        "serie": record.serie,
        "serie_index": record.serie_index if record.serie is not None else None,
        "extension": record.extension,
        "book_path": record.book_path,
        "book_filename": record.book_filename,
    }


def row_to_record(row: Any, tags: set[str] | None = None) -> BookRecord:
    """Convert a full database row to a BookRecord."""
    return BookRecord(
        id=row["id"],
        checksum=row["checksum"],
        title=row["title"],
        authors=json.loads(row["authors"]) if row["authors"] else [],
        summary=row["summary"],
        publisher=row["publisher"],
        language=row["language"],
        tags=tags or set(),
        serie=row["serie"],
        serie_index=row["serie_index"],
        extension=row["extension"],
        book_path=row["book_path"],
        book_filename=row["book_filename"],
        date_added=row["date_added"],
        date_modified=row["date_modified"],
    )
