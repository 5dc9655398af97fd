# ABOUTME: Reconciliation engine that syncs the catalog with the files under a library root.
# ABOUTME: Matches files by content checksum, creates or relocates records, and deletes strays.

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from pathlib import Path

from biblioteca.core.builder import build_record, update_location
from biblioteca.core.filesource import BookFile, iter_book_files
from biblioteca.db.catalog import LibraryCatalog, PersistenceError
from biblioteca.db.hashing import FileUnreadableError, compute_file_hash
from biblioteca.db.mapping import BookRecord
from biblioteca.metadata.extractor import extract_metadata
from biblioteca.metadata.types import ExtractionResult

logger = logging.getLogger(__name__)

CREATED = "created"
RELOCATED = "relocated"
UNCHANGED = "unchanged"
DUPLICATE = "duplicate"

HashFn = Callable[[Path], str]
ExtractFn = Callable[[BookFile], ExtractionResult]
# Called with each file just before it is processed.
FileCallback = Callable[[BookFile], None]


@dataclass
class ReconcileResult:
    """Summary of a reconciliation or ingest pass."""

    created: int = 0
    relocated: int = 0
    unchanged: int = 0
    duplicates: int = 0
    deleted: int = 0
    errors: int = 0
    error_details: list[tuple[Path, str]] = field(default_factory=list)

    @property
    def changes(self) -> int:
        """Number of catalog writes the pass performed."""
        return self.created + self.relocated + self.deleted

    @property
    def success(self) -> bool:
        return self.errors == 0

    def record_outcome(self, outcome: str) -> None:
        if outcome == CREATED:
            self.created += 1
        elif outcome == RELOCATED:
            self.relocated += 1
        elif outcome == DUPLICATE:
            self.duplicates += 1
        else:
            self.unchanged += 1

    def record_error(self, path: Path, message: str) -> None:
        self.errors += 1
        self.error_details.append((path, message))


class PendingIndex:
    """Catalog records not yet matched to a file during the current pass.

    Keyed by checksum. Whatever is left once every file has been seen no
    longer exists on disk. Also remembers which checksums were matched to a
    catalog record during the pass, so a later copy of the same content is
    a duplicate only once an earlier copy was actually cataloged.
    """

    def __init__(self, records: Iterable[BookRecord]) -> None:
        self._records: dict[str, BookRecord] = {r.checksum: r for r in records}
        self._matched: set[str] = set()

    def mark_seen(self, checksum: str) -> None:
        """Drop a checksum from the pending set so its record is kept."""
        self._records.pop(checksum, None)

    def mark_matched(self, checksum: str) -> None:
        """Record that a file with this checksum was cataloged in this pass."""
        self._matched.add(checksum)

    def is_matched(self, checksum: str) -> bool:
        return checksum in self._matched

    def remaining(self) -> list[BookRecord]:
        return list(self._records.values())

    def __contains__(self, checksum: object) -> bool:
        return checksum in self._records

    def __len__(self) -> int:
        return len(self._records)


class Reconciler:
    """Keeps a LibraryCatalog in sync with the book files on disk.

    Two entry points with different match precedence:

    - run() / reconcile(): full pass. Content checksum is the only identity
      signal, so renames and moves become location updates, duplicate files
      collapse onto one record located at the first copy that was cataloged,
      and records whose content is gone are deleted.
    - consume(): ingest an explicit list of files. An exact (folder, filename)
      match is accepted without re-checksumming, so a rename is only noticed
      by the next full pass. Nothing is deleted.

    Each create or relocation is committed as soon as it happens; a failure
    on one file is logged, recorded in the result, and the pass moves on.
    """

    def __init__(
        self,
        catalog: LibraryCatalog,
        *,
        hash_fn: HashFn = compute_file_hash,
        extract_fn: ExtractFn = extract_metadata,
        on_file: FileCallback | None = None,
    ) -> None:
        self._catalog = catalog
        self._hash_fn = hash_fn
        self._extract_fn = extract_fn
        self._on_file = on_file

    def run(self, root: Path) -> ReconcileResult:
        """Reconcile the catalog against every book file under root.

        Raises:
            NotADirectoryError: If root is not a directory. Nothing is changed.
        """
        if not root.is_dir():
            raise NotADirectoryError(f"Library root is not a directory: {root}")
        return self.reconcile(iter_book_files(root))

    def reconcile(self, files: Iterable[BookFile]) -> ReconcileResult:
        """Run a full reconciliation pass over a finite sequence of files."""
        pending = PendingIndex(self._catalog.find_all())
        logger.info("Reconciling against %d cataloged book(s)", len(pending))
        result = ReconcileResult()

        for book_file in files:
            if self._on_file is not None:
                self._on_file(book_file)
            try:
                checksum = self._hash_fn(book_file.real_path)
                # Seen before persisting: a failed write must not get the
                # existing record deleted at the end of the pass.
                pending.mark_seen(checksum)
                if pending.is_matched(checksum):
                    outcome = DUPLICATE
                else:
                    # A copy whose write failed earlier gets another chance here.
                    outcome = self._match_by_checksum(book_file, checksum)
                    pending.mark_matched(checksum)
            except (FileUnreadableError, PersistenceError) as exc:
                logger.warning("Skipping %s: %s", book_file.real_path, exc)
                result.record_error(book_file.real_path, str(exc))
                continue
            logger.debug("%s: %s", book_file, outcome)
            result.record_outcome(outcome)

        self._catalog.commit()
        self._delete_unseen(pending, result)

        logger.info(
            "Reconciliation done: %d created, %d relocated, %d unchanged, "
            "%d duplicate(s), %d deleted, %d error(s)",
            result.created,
            result.relocated,
            result.unchanged,
            result.duplicates,
            result.deleted,
            result.errors,
        )
        return result

    def consume(self, files: Iterable[BookFile]) -> ReconcileResult:
        """Ingest specific files, trusting an exact location match first."""
        result = ReconcileResult()

        for book_file in files:
            if self._on_file is not None:
                self._on_file(book_file)
            try:
                record = self._catalog.find_by_location(book_file.path, book_file.filename)
                if record is not None:
                    outcome = UNCHANGED
                else:
                    checksum = self._hash_fn(book_file.real_path)
                    outcome = self._match_by_checksum(book_file, checksum)
            except (FileUnreadableError, PersistenceError) as exc:
                logger.warning("Skipping %s: %s", book_file.real_path, exc)
                result.record_error(book_file.real_path, str(exc))
                continue
            logger.debug("%s: %s", book_file, outcome)
            result.record_outcome(outcome)

        self._catalog.commit()
        return result

    def _match_by_checksum(self, book_file: BookFile, checksum: str) -> str:
        """Create or relocate the record for checksum and persist the change."""
        record = self._catalog.find_by_checksum(checksum)
        if record is None:
            record = build_record(book_file, self._extract_fn(book_file), checksum)
            outcome = CREATED
        elif update_location(record, book_file):
            outcome = RELOCATED
        else:
            return UNCHANGED

        self._persist(record)
        return outcome

    def _persist(self, record: BookRecord) -> None:
        try:
            self._catalog.save(record)
            self._catalog.commit()
        except PersistenceError:
            self._catalog.rollback()
            raise

    def _delete_unseen(self, pending: PendingIndex, result: ReconcileResult) -> None:
        """Delete records whose content was not found, then commit once."""
        for record in pending.remaining():
            try:
                self._catalog.delete(record)
            except (PersistenceError, ValueError) as exc:
                logger.warning("Could not delete %r: %s", record.title, exc)
                result.record_error(Path(record.book_path, record.book_filename), str(exc))
                continue
            logger.debug("Deleted %r (%s)", record.title, record.checksum)
            result.deleted += 1

        self._catalog.commit()
