# ABOUTME: Builds normalized catalog records from extracted ebook metadata.
# ABOUTME: Applies author, language, series, and tag rules plus the shared location update.

import logging

from biblioteca.core.filesource import BookFile
from biblioteca.db.mapping import BookRecord
from biblioteca.metadata.types import ExtractedMetadata, ExtractionFailed, ExtractionResult

logger = logging.getLogger(__name__)

UNKNOWN_AUTHOR = "unknown"
_LANGUAGE_CODE_LENGTH = 2


def default_metadata(book_file: BookFile) -> ExtractedMetadata:
    """Metadata used when a file can't be read as an ebook."""
    return ExtractedMetadata(
        title=book_file.stem,
        authors=[UNKNOWN_AUTHOR],
        main_author=UNKNOWN_AUTHOR,
    )


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


def build_authors(main_author: str | None, authors: list[str]) -> list[str]:
    """Main author first, then the remaining names; never empty.

    Blank names are skipped and repeated names collapse to their first
    occurrence, so a main author also listed among the creators appears once.
    """
    result: list[str] = []
    for name in [main_author, *authors]:
        cleaned = _clean(name)
        if cleaned and cleaned not in result:
            result.append(cleaned)
    return result or [UNKNOWN_AUTHOR]


def normalize_language(language: str | None) -> str | None:
    """Keep a language only when it looks like a two-letter code."""
    if language is not None and len(language) == _LANGUAGE_CODE_LENGTH:
        return language
    return None


def build_tags(tags: list[str]) -> set[str]:
    return {tag.strip() for tag in tags if tag and tag.strip()}


def update_location(record: BookRecord, book_file: BookFile) -> bool:
    """Point a record at the file's current folder and filename.

    Returns:
        True if either location field changed.
    """
    changed = False
    if record.book_path != book_file.path:
        record.book_path = book_file.path
        changed = True
    if record.book_filename != book_file.filename:
        record.book_filename = book_file.filename
        changed = True
    return changed


def build_record(book_file: BookFile, extracted: ExtractionResult, checksum: str) -> BookRecord:
    """Map extracted metadata onto a new, unsaved BookRecord.

    An ExtractionFailed result is tolerated: the record is built from
    filename defaults instead. The checksum is always the one computed
    from the file content, never a value reported by the extractor.
    """
    if isinstance(extracted, ExtractionFailed):
        logger.debug("Using default metadata for %s: %s", book_file, extracted.reason)
        metadata = default_metadata(book_file)
    else:
        metadata = extracted

    record = BookRecord(
        checksum=checksum,
        title=_clean(metadata.title) or book_file.stem,
        authors=build_authors(metadata.main_author, metadata.authors),
        summary=metadata.description,
        publisher=metadata.publisher,
        language=normalize_language(metadata.language),
        tags=build_tags(metadata.tags),
        extension=book_file.extension,
    )

    # A series index on its own means nothing.
    if metadata.serie is not None:
        record.serie = metadata.serie
        record.serie_index = metadata.serie_index

    update_location(record, book_file)
    return record
