# ABOUTME: Metadata extraction result types: extracted metadata or a tolerated failure.
# ABOUTME: The record builder consumes either variant; extraction failures never propagate.

from dataclasses import dataclass, field


@dataclass
class ExtractedMetadata:
    """Structured metadata read from an ebook file.

    Every field except title is optional, and title itself may be None when
    the file carries no usable title. main_author is the first credited
    creator; authors holds all of them, including the main author.
    """

    title: str | None = None
    authors: list[str] = field(default_factory=list)
    main_author: str | None = None
    description: str | None = None
    publisher: str | None = None
    language: str | None = None
    tags: list[str] = field(default_factory=list)
    serie: str | None = None
    serie_index: float | None = None
    cover_image: bytes | None = None

    @property
    def has_cover(self) -> bool:
        """Whether cover image data is present."""
        return self.cover_image is not None and len(self.cover_image) > 0


@dataclass(frozen=True)
class ExtractionFailed:
    """The extractor could not read the file as an ebook."""

    reason: str


ExtractionResult = ExtractedMetadata | ExtractionFailed
