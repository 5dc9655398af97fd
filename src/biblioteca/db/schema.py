# ABOUTME: SQL DDL statements for the Biblioteca catalog database schema.
# ABOUTME: Defines the books table, its identity and location indexes, and tag tables.

SCHEMA_V1 = """
-- Core book catalog table
CREATE TABLE books (
    id            INTEGER PRIMARY KEY AUTOINCREMENT,
    checksum      TEXT NOT NULL,
    title         TEXT NOT NULL,
    authors       TEXT NOT NULL,
    summary       TEXT,
    publisher     TEXT,
    language      TEXT,
    serie         TEXT,
    serie_index   REAL,
    extension     TEXT NOT NULL,
    book_path     TEXT NOT NULL DEFAULT '',
    book_filename TEXT NOT NULL DEFAULT '',
    date_added    TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%S', 'now')),
    date_modified TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%S', 'now'))
);

CREATE UNIQUE INDEX idx_books_checksum ON books(checksum);
CREATE INDEX idx_books_location ON books(book_path, book_filename);
CREATE INDEX idx_books_serie ON books(serie) WHERE serie IS NOT NULL;

CREATE TABLE tags (
    id   INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL UNIQUE
);

CREATE TABLE book_tags (
    book_id INTEGER NOT NULL REFERENCES books(id) ON DELETE CASCADE,
    tag_id  INTEGER NOT NULL REFERENCES tags(id) ON DELETE CASCADE,
    PRIMARY KEY (book_id, tag_id)
);

-- Schema versioning for future migrations
CREATE TABLE schema_version (
    version    INTEGER NOT NULL,
    applied_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%S', 'now'))
);

INSERT INTO schema_version (version) VALUES (1);
"""
