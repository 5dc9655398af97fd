# ABOUTME: Metadata package: extraction result types and remote suggestion lookups.
# ABOUTME: Exports the types shared between the extractor and the record builder.

from biblioteca.metadata.types import ExtractedMetadata, ExtractionFailed, ExtractionResult

__all__ = [
    "ExtractedMetadata",
    "ExtractionFailed",
    "ExtractionResult",
]
