# ABOUTME: Metadata suggestions for a cataloged book from Open Library and Google Books.
# ABOUTME: Collects de-duplicated candidate values per field and caches them in memory.

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from biblioteca.db.mapping import BookRecord
from biblioteca.metadata.http import HttpClient, MetadataFetchError

logger = logging.getLogger(__name__)

OPEN_LIBRARY_SEARCH_URL = "https://openlibrary.org/search.json"
GOOGLE_BOOKS_VOLUMES_URL = "https://www.googleapis.com/books/v1/volumes"
CACHE_TTL_SECONDS = 3600.0

_OL_FIELDS = "title,author_name,key,cover_i,subject"
# Largest first; the first one present wins.
_IMAGE_LINK_KEYS = ("extraLarge", "large", "medium", "thumbnail", "smallThumbnail")


@dataclass
class Suggestions:
    """Candidate values per field, unique and in the order they were found."""

    image: list[str] = field(default_factory=list)
    title: list[str] = field(default_factory=list)
    authors: list[str] = field(default_factory=list)
    publisher: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    summary: list[str] = field(default_factory=list)

    def add(self, field_name: str, value: Any) -> None:
        """Append a value to a field unless it is empty or already present."""
        if not value:
            return
        values: list[str] = getattr(self, field_name)
        value = str(value)
        if value not in values:
            values.append(value)

    @property
    def is_empty(self) -> bool:
        return not any(
            (self.image, self.title, self.authors, self.publisher, self.tags, self.summary)
        )


def _format_index(index: float | None) -> str | None:
    return f"{index:g}" if index is not None else None


class SuggestionService:
    """Looks up suggested metadata for a book in remote catalogs.

    Google Books lookups need an API key and return nothing without one.
    Lookup failures are logged and produce empty suggestions.
    """

    def __init__(
        self,
        http_client: HttpClient,
        *,
        google_api_key: str | None = None,
        cache_ttl: float = CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._http = http_client
        self._google_api_key = google_api_key
        self._cache_ttl = cache_ttl
        self._clock = clock
        self._cache: dict[str, tuple[float, Suggestions]] = {}

    def open_library_suggestions(self, record: BookRecord) -> Suggestions:
        """Suggest tags from the subjects Open Library lists for this book."""
        query = f"title:{record.title} author:{record.main_author or ''}".strip()
        return self._cached(f"openlib-{query}", lambda: self._fetch_open_library(query))

    def google_suggestions(self, record: BookRecord) -> Suggestions:
        """Suggest every field from Google Books volumes matching this book."""
        if not self._google_api_key:
            return Suggestions()

        heading = " ".join(
            part
            for part in (record.serie, _format_index(record.serie_index), record.title)
            if part
        )
        title_query = f'intitle:"{heading}"'
        query = f"{title_query} inauthor:{' '.join(record.authors)}"
        return self._cached(f"google-{query}", lambda: self._fetch_google(query, title_query))

    def suggest(self, record: BookRecord) -> Suggestions:
        """Merge suggestions from every source, Google Books first."""
        merged = Suggestions()
        for partial in (self.google_suggestions(record), self.open_library_suggestions(record)):
            for name in ("image", "title", "authors", "publisher", "tags", "summary"):
                for value in getattr(partial, name):
                    merged.add(name, value)
        return merged

    def _cached(self, key: str, fetch: Callable[[], Suggestions]) -> Suggestions:
        now = self._clock()
        hit = self._cache.get(key)
        if hit is not None and hit[0] > now:
            return hit[1]
        try:
            suggestions = fetch()
        except MetadataFetchError as exc:
            # Failures are not cached; the next call tries again.
            logger.warning("Suggestion lookup %r failed: %s", key, exc)
            return Suggestions()
        self._cache[key] = (now + self._cache_ttl, suggestions)
        return suggestions

    def _fetch_open_library(self, query: str) -> Suggestions:
        suggestions = Suggestions()
        data = self._http.get(OPEN_LIBRARY_SEARCH_URL, params={"q": query, "fields": _OL_FIELDS})
        for doc in data.get("docs") or []:
            for subject in doc.get("subject") or []:
                suggestions.add("tags", subject)
        return suggestions

    def _fetch_google(self, query: str, fallback_query: str) -> Suggestions:
        suggestions = Suggestions()
        data = self._volumes(query)
        if not data.get("totalItems"):
            data = self._volumes(fallback_query)

        for item in data.get("items") or []:
            info = item.get("volumeInfo") or {}
            links = info.get("imageLinks") or {}
            image = next((links[k] for k in _IMAGE_LINK_KEYS if links.get(k)), None)
            suggestions.add("image", image)
            suggestions.add("publisher", info.get("publisher"))
            suggestions.add("title", info.get("title"))
            suggestions.add("summary", info.get("description"))
            for author in info.get("authors") or []:
                suggestions.add("authors", author)
            for category in info.get("categories") or []:
                suggestions.add("tags", category)
        return suggestions

    def _volumes(self, query: str) -> dict[str, Any]:
        return self._http.get(
            GOOGLE_BOOKS_VOLUMES_URL,
            params={"q": query, "key": self._google_api_key or ""},
        )
