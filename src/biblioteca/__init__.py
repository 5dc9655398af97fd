# ABOUTME: Biblioteca keeps a SQLite catalog of ebooks in sync with a library folder.
# ABOUTME: Subpackages: db (catalog store), core (reconciliation), formats, metadata, cli.

__version__ = "0.1.0"
