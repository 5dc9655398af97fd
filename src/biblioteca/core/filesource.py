# ABOUTME: Lazy enumeration of book files under a library root directory.
# ABOUTME: Yields BookFile descriptors with the folder path relative to the root.

from __future__ import annotations

import os
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

EBOOK_EXTENSIONS: frozenset[str] = frozenset(
    {".epub", ".mobi", ".azw3", ".azw", ".pdf", ".txt", ".cbz", ".cbr"}
)


@dataclass(frozen=True)
class BookFile:
    """A book file on disk, located relative to the library root."""

    path: str
    filename: str
    extension: str
    real_path: Path

    @property
    def stem(self) -> str:
        """Filename without its extension."""
        return Path(self.filename).stem

    def __str__(self) -> str:
        return f"{self.path}/{self.filename}" if self.path else self.filename


def _relative_folder(root: Path, folder: Path) -> str:
    relative = folder.relative_to(root).as_posix()
    return "" if relative == "." else relative


def book_file_for(root: Path, file_path: Path) -> BookFile:
    """Describe a single file relative to the library root.

    Raises:
        ValueError: If file_path is not inside root.
    """
    root = root.resolve()
    real_path = file_path.resolve()
    return BookFile(
        path=_relative_folder(root, real_path.parent),
        filename=real_path.name,
        extension=real_path.suffix.lower().lstrip("."),
        real_path=real_path,
    )


def iter_book_files(
    root: Path, extensions: frozenset[str] = EBOOK_EXTENSIONS
) -> Iterator[BookFile]:
    """Walk root lazily and yield every ebook file beneath it.

    Directories and files are visited in sorted order so two walks of an
    unchanged tree yield the same sequence. Hidden entries (dot-prefixed)
    are skipped.

    Raises:
        NotADirectoryError: If root does not exist or is not a directory.
            Raised on the first call to next(), before anything is yielded.
    """
    if not root.is_dir():
        raise NotADirectoryError(f"Library root is not a directory: {root}")
    root = root.resolve()

    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if not d.startswith("."))
        folder = Path(dirpath)
        relative = _relative_folder(root, folder)
        for name in sorted(filenames):
            if name.startswith("."):
                continue
            suffix = Path(name).suffix.lower()
            if suffix not in extensions:
                continue
            yield BookFile(
                path=relative,
                filename=name,
                extension=suffix.lstrip("."),
                real_path=folder / name,
            )
