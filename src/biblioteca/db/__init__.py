# ABOUTME: Public API for the Biblioteca catalog database layer.
# ABOUTME: Exports connection management, catalog operations, checksums, and data types.

from biblioteca.db.catalog import DuplicateBookError, LibraryCatalog, PersistenceError
from biblioteca.db.connection import DEFAULT_DB_PATH, open_library
from biblioteca.db.hashing import FileUnreadableError, compute_file_hash
from biblioteca.db.mapping import BookRecord

__all__ = [
    "DEFAULT_DB_PATH",
    "BookRecord",
    "DuplicateBookError",
    "FileUnreadableError",
    "LibraryCatalog",
    "PersistenceError",
    "compute_file_hash",
    "open_library",
]
