# ABOUTME: Unit tests for SHA-256 content checksums used as book identity.
# ABOUTME: Validates determinism, uniqueness, hex format, and unreadable-file errors.

import re
from pathlib import Path

import pytest

from biblioteca.db.hashing import FileUnreadableError, compute_file_hash


@pytest.fixture()
def sample_file(tmp_path: Path) -> Path:
    """Create a sample file with known content."""
    f = tmp_path / "sample.epub"
    f.write_bytes(b"fake epub content for hashing")
    return f


class TestComputeFileHash:
    """Tests for compute_file_hash."""

    def test_returns_hex_string(self, sample_file: Path) -> None:
        """Result is a 64-character hex string (SHA-256)."""
        result = compute_file_hash(sample_file)
        assert re.fullmatch(r"[0-9a-f]{64}", result)

    def test_is_deterministic(self, sample_file: Path) -> None:
        assert compute_file_hash(sample_file) == compute_file_hash(sample_file)

    def test_identity_ignores_name_and_location(self, sample_file: Path, tmp_path: Path) -> None:
        """A copy under another name and folder has the same checksum."""
        moved = tmp_path / "elsewhere" / "renamed.epub"
        moved.parent.mkdir()
        moved.write_bytes(sample_file.read_bytes())
        assert compute_file_hash(moved) == compute_file_hash(sample_file)

    def test_different_content_different_hash(self, sample_file: Path, tmp_path: Path) -> None:
        other = tmp_path / "other.epub"
        other.write_bytes(b"completely different content")
        assert compute_file_hash(other) != compute_file_hash(sample_file)

    def test_large_file_spanning_chunks(self, tmp_path: Path) -> None:
        """Files bigger than one read chunk hash like a single read would."""
        import hashlib

        data = b"x" * 200_000
        big = tmp_path / "big.pdf"
        big.write_bytes(data)
        assert compute_file_hash(big) == hashlib.sha256(data).hexdigest()

    def test_nonexistent_file_raises_unreadable(self, tmp_path: Path) -> None:
        missing = tmp_path / "nonexistent.epub"
        with pytest.raises(FileUnreadableError) as exc_info:
            compute_file_hash(missing)
        assert exc_info.value.path == missing
        assert "nonexistent.epub" in str(exc_info.value)

    def test_directory_raises_unreadable(self, tmp_path: Path) -> None:
        with pytest.raises(FileUnreadableError):
            compute_file_hash(tmp_path)
