# ABOUTME: Shared pytest fixtures for Biblioteca tests.
# ABOUTME: Provides EPUB builders, a temporary catalog, and a small library tree.

import os
from collections.abc import Callable, Iterator, Sequence
from pathlib import Path

import pytest
from ebooklib import epub

from biblioteca.db.catalog import LibraryCatalog
from biblioteca.db.connection import open_library

EpubFactory = Callable[..., Path]


def write_epub(
    path: Path,
    title: str,
    authors: Sequence[str] = (),
    *,
    language: str | None = "en",
    publisher: str | None = None,
    description: str | None = None,
    subjects: Sequence[str] = (),
    series: str | None = None,
    series_index: str | None = None,
) -> Path:
    """Write a minimal, structurally valid EPUB with the given metadata."""
    book = epub.EpubBook()
    book.set_identifier(f"id-{title}")
    book.set_title(title)
    if language is not None:
        book.set_language(language)
    for author in authors:
        book.add_author(author)
    if publisher is not None:
        book.add_metadata("DC", "publisher", publisher)
    if description is not None:
        book.add_metadata("DC", "description", description)
    for subject in subjects:
        book.add_metadata("DC", "subject", subject)
    if series is not None:
        book.add_metadata("OPF", "series", None, {"name": "calibre:series", "content": series})
    if series_index is not None:
        book.add_metadata(
            "OPF", "series_index", None, {"name": "calibre:series_index", "content": series_index}
        )

    # Add a minimal chapter so the EPUB is structurally valid
    chapter = epub.EpubHtml(title="Chapter 1", file_name="chap01.xhtml", lang="en")
    chapter.content = (
        b"<html><body><h1>Chapter 1</h1><p>Content for " + title.encode() + b".</p></body></html>"
    )
    book.add_item(chapter)

    book.toc = [epub.Link("chap01.xhtml", "Chapter 1", "chap01")]
    book.add_item(epub.EpubNcx())
    book.add_item(epub.EpubNav())
    book.spine = ["nav", chapter]

    path.parent.mkdir(parents=True, exist_ok=True)
    epub.write_epub(str(path), book)
    return path


@pytest.fixture
def make_epub() -> EpubFactory:
    """Factory for EPUB files: make_epub(path, title, authors, **metadata)."""
    return write_epub


@pytest.fixture
def sample_epub(tmp_path: Path) -> Path:
    """A valid EPUB with a full set of metadata."""
    return write_epub(
        tmp_path / "name_of_the_rose.epub",
        "The Name of the Rose",
        ["Umberto Eco"],
        publisher="Harcourt",
        description="A mystery set in a medieval monastery.",
        subjects=["Fiction", "Mystery"],
        series="Adso of Melk",
        series_index="1",
    )


@pytest.fixture
def minimal_epub(tmp_path: Path) -> Path:
    """An EPUB with only a title and a language."""
    return write_epub(tmp_path / "minimal.epub", "Untitled Book")


@pytest.fixture
def corrupt_epub(tmp_path: Path) -> Path:
    """A file with an .epub extension that is not a valid EPUB."""
    filepath = tmp_path / "corrupt.epub"
    filepath.write_text("this is not a valid epub file")
    return filepath


@pytest.fixture
def catalog(tmp_path: Path) -> Iterator[LibraryCatalog]:
    """A LibraryCatalog backed by a temporary database."""
    conn = open_library(tmp_path / "db" / "library.db")
    yield LibraryCatalog(conn)
    conn.close()


@pytest.fixture
def library(tmp_path: Path) -> Path:
    """A small library tree.

    Layout:
        library/
            Umberto Eco/
                The Name of the Rose.epub
            Frank Herbert/
                Dune.epub
            Unsorted/
                notes.pdf
                cover.jpg        (not a book, ignored)
    """
    root = tmp_path / "library"
    write_epub(
        root / "Umberto Eco" / "The Name of the Rose.epub",
        "The Name of the Rose",
        ["Umberto Eco"],
    )
    write_epub(
        root / "Frank Herbert" / "Dune.epub",
        "Dune",
        ["Frank Herbert"],
        series="Dune",
        series_index="1",
    )
    unsorted = root / "Unsorted"
    unsorted.mkdir()
    (unsorted / "notes.pdf").write_bytes(b"%PDF-1.4 fake pdf")
    (unsorted / "cover.jpg").write_bytes(b"fake jpg")
    return root


@pytest.fixture
def undecodable_pdf(library: Path) -> Path:
    """A PDF in the library whose filename bytes are not valid UTF-8."""
    path = library / "Unsorted" / os.fsdecode(b"b\xff.pdf")
    try:
        path.write_bytes(b"%PDF-1.4 another fake pdf")
    except OSError:
        pytest.skip("filesystem rejects non-UTF-8 filenames")
    return path
