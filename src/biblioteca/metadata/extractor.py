# ABOUTME: Metadata extractor entry point: reads a book file into ExtractedMetadata.
# ABOUTME: Never raises for unreadable ebooks; returns ExtractionFailed instead.

import logging

from biblioteca.core.filesource import BookFile
from biblioteca.formats.epub import EpubReadError, read_epub_metadata
from biblioteca.metadata.types import ExtractedMetadata, ExtractionFailed, ExtractionResult

logger = logging.getLogger(__name__)


def extract_metadata(book_file: BookFile) -> ExtractionResult:
    """Read structured metadata from a book file.

    Only EPUB files are parsed. Any other format, and any EPUB that fails
    to parse, yields ExtractionFailed so the caller can fall back to
    defaults derived from the filename.
    """
    if book_file.extension != "epub":
        return ExtractionFailed(f"no metadata reader for .{book_file.extension} files")

    try:
        metadata: ExtractedMetadata = read_epub_metadata(book_file.real_path)
    except EpubReadError as exc:
        logger.debug("Metadata extraction failed for %s: %s", book_file, exc)
        return ExtractionFailed(str(exc))
    return metadata
