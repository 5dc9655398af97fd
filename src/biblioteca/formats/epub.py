# ABOUTME: EPUB metadata extraction using ebooklib.
# ABOUTME: Defensive wrapper that turns malformed files into a single EpubReadError.

import logging
from pathlib import Path

from ebooklib import epub

from biblioteca.metadata.types import ExtractedMetadata

logger = logging.getLogger(__name__)


class EpubReadError(Exception):
    """Raised when an EPUB file cannot be read or parsed."""


def _get_metadata_value(book: epub.EpubBook, namespace: str, name: str) -> str | None:
    """Extract a single metadata value from an EpubBook, or None if missing."""
    values = book.get_metadata(namespace, name)
    if not values:
        return None
    # Metadata entries are tuples of (value, attributes)
    value = values[0][0]
    return str(value).strip() if value else None


def _get_authors(book: epub.EpubBook) -> list[str]:
    """Extract all author names from an EpubBook, in document order."""
    creators = book.get_metadata("DC", "creator")
    if not creators:
        return []
    return [str(entry[0]).strip() for entry in creators if entry[0]]


def _get_subjects(book: epub.EpubBook) -> list[str]:
    subjects = book.get_metadata("DC", "subject")
    return [str(entry[0]).strip() for entry in subjects if entry[0] and str(entry[0]).strip()]


def _get_named_meta(book: epub.EpubBook, name: str) -> str | None:
    """Find the content of a <meta name="..."> element in any namespace.

    Calibre writes series info as <meta name="calibre:series" content="...">,
    and ebooklib files it under whatever namespace the prefix resolves to.
    """
    for entries in book.metadata.values():
        for values in entries.values():
            for _value, attrs in values:
                if attrs and attrs.get("name") == name:
                    content = attrs.get("content")
                    return str(content).strip() if content else None
    return None


def _parse_series_index(raw: str | None) -> float | None:
    if raw is None:
        return None
    try:
        return float(raw)
    except ValueError:
        logger.debug("Ignoring non-numeric series index %r", raw)
        return None


def _extract_cover_image(book: epub.EpubBook) -> bytes | None:
    """Extract cover image data from an EPUB, if present."""
    # Check for cover image in metadata
    cover_id = None
    meta_entries = book.get_metadata("OPF", "cover")
    if meta_entries:
        cover_id = meta_entries[0][1].get("content")

    if cover_id:
        cover_item = book.get_item_with_id(cover_id)
        if cover_item:
            return cover_item.get_content()

    # Fallback: look for items with "cover" in the id or filename
    for item in book.get_items():
        item_id = item.get_id() or ""
        item_name = item.get_name() or ""
        if "cover" in item_id.lower() or "cover" in item_name.lower():
            content_type = item.get_type()
            # ebooklib image type constant
            if content_type == 3:  # ITEM_IMAGE
                return item.get_content()

    return None


def read_epub_metadata(path: Path) -> ExtractedMetadata:
    """Extract metadata from an EPUB file.

    Title is left as None when the package document has none; choosing a
    fallback is the caller's decision.

    Args:
        path: Path to the EPUB file.

    Returns:
        ExtractedMetadata populated with the fields found in the file.

    Raises:
        EpubReadError: If the file cannot be read or parsed.
    """
    if not path.exists():
        raise EpubReadError(f"File not found: {path}")

    try:
        book = epub.read_epub(str(path), options={"ignore_ncx": True})
    except Exception as exc:
        raise EpubReadError(f"Failed to read EPUB: {path}: {exc}") from exc

    try:
        authors = _get_authors(book)
        serie = _get_named_meta(book, "calibre:series")
        return ExtractedMetadata(
            title=_get_metadata_value(book, "DC", "title"),
            authors=authors,
            main_author=authors[0] if authors else None,
            description=_get_metadata_value(book, "DC", "description"),
            publisher=_get_metadata_value(book, "DC", "publisher"),
            language=_get_metadata_value(book, "DC", "language"),
            tags=_get_subjects(book),
            serie=serie,
            serie_index=_parse_series_index(_get_named_meta(book, "calibre:series_index")),
            cover_image=_extract_cover_image(book),
        )
    except (KeyError, AttributeError, ValueError) as exc:
        raise EpubReadError(f"Malformed EPUB metadata: {path}: {exc}") from exc
