# ABOUTME: SHA-256 content checksums used as the stable identity of a book file.
# ABOUTME: Reads files in chunks and reports unreadable files with a dedicated error.

import hashlib
from pathlib import Path

_CHUNK_SIZE = 65536  # 64 KB


class FileUnreadableError(Exception):
    """Raised when a book file cannot be read to compute its checksum."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot read {path}: {reason}")


def compute_file_hash(path: Path) -> str:
    """Compute the SHA-256 hash of a file.

    Reads the file in 64KB chunks to avoid loading large files entirely
    into memory.

    Args:
        path: Path to the file to hash.

    Returns:
        Lowercase hex digest string (64 characters).

    Raises:
        FileUnreadableError: If the file is missing or cannot be read.
    """
    hasher = hashlib.sha256()
    try:
        with open(path, "rb") as f:
            while True:
                chunk = f.read(_CHUNK_SIZE)
                if not chunk:
                    break
                hasher.update(chunk)
    except OSError as exc:
        raise FileUnreadableError(path, exc.strerror or str(exc)) from exc
    return hasher.hexdigest()
