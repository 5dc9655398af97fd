# ABOUTME: Unit tests for metadata suggestions from Open Library and Google Books.
# ABOUTME: Uses a fake HttpClient to check queries, parsing, fallback, caching, and failures.

from typing import Any

import pytest

from biblioteca.db.mapping import BookRecord
from biblioteca.metadata.http import MetadataFetchError
from biblioteca.metadata.suggestions import (
    GOOGLE_BOOKS_VOLUMES_URL,
    OPEN_LIBRARY_SEARCH_URL,
    SuggestionService,
    Suggestions,
)


class FakeHttpClient:
    """Returns queued responses per URL and records every call."""

    def __init__(self, responses: dict[str, list[Any]]) -> None:
        self._responses = responses
        self.calls: list[tuple[str, dict[str, str] | None]] = []

    def get(self, url: str, params: dict[str, str] | None = None) -> dict[str, Any]:
        self.calls.append((url, params))
        response = self._responses[url].pop(0)
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture()
def record() -> BookRecord:
    return BookRecord(
        checksum="c",
        title="Dune Messiah",
        authors=["Frank Herbert", "Someone Else"],
        serie="Dune",
        serie_index=2.0,
    )


def _volume(**info: Any) -> dict[str, Any]:
    return {"volumeInfo": info}


class TestSuggestions:
    def test_add_skips_empty_and_duplicates(self) -> None:
        suggestions = Suggestions()
        suggestions.add("tags", "SF")
        suggestions.add("tags", "SF")
        suggestions.add("tags", "")
        suggestions.add("tags", None)
        assert suggestions.tags == ["SF"]

    def test_is_empty(self) -> None:
        assert Suggestions().is_empty
        assert not Suggestions(title=["x"]).is_empty


class TestOpenLibrarySuggestions:
    def test_collects_subjects_as_tags(self, record: BookRecord) -> None:
        http = FakeHttpClient({
            OPEN_LIBRARY_SEARCH_URL: [
                {
                    "docs": [
                        {"subject": ["Science fiction", "Arrakis"]},
                        {"subject": ["Arrakis"]},
                        {},
                    ]
                }
            ]
        })
        suggestions = SuggestionService(http).open_library_suggestions(record)

        assert suggestions.tags == ["Science fiction", "Arrakis"]
        url, params = http.calls[0]
        assert params["q"] == "title:Dune Messiah author:Frank Herbert"
        assert "subject" in params["fields"]

    def test_missing_docs_returns_empty(self, record: BookRecord) -> None:
        http = FakeHttpClient({OPEN_LIBRARY_SEARCH_URL: [{"numFound": 0}]})
        assert SuggestionService(http).open_library_suggestions(record).is_empty

    def test_fetch_error_returns_empty_and_is_not_cached(self, record: BookRecord) -> None:
        http = FakeHttpClient({
            OPEN_LIBRARY_SEARCH_URL: [
                MetadataFetchError("HTTP 503"),
                {"docs": [{"subject": ["SF"]}]},
            ]
        })
        service = SuggestionService(http)

        assert service.open_library_suggestions(record).is_empty
        assert service.open_library_suggestions(record).tags == ["SF"]

    def test_results_cached_until_ttl(self, record: BookRecord) -> None:
        now = [1000.0]
        http = FakeHttpClient({
            OPEN_LIBRARY_SEARCH_URL: [
                {"docs": [{"subject": ["A"]}]},
                {"docs": [{"subject": ["B"]}]},
            ]
        })
        service = SuggestionService(http, cache_ttl=60, clock=lambda: now[0])

        assert service.open_library_suggestions(record).tags == ["A"]
        now[0] += 30
        assert service.open_library_suggestions(record).tags == ["A"]
        assert len(http.calls) == 1

        now[0] += 31
        assert service.open_library_suggestions(record).tags == ["B"]
        assert len(http.calls) == 2


class TestGoogleSuggestions:
    def test_without_api_key_makes_no_request(self, record: BookRecord) -> None:
        http = FakeHttpClient({})
        assert SuggestionService(http).google_suggestions(record).is_empty
        assert http.calls == []

    def test_builds_query_with_series_and_authors(self, record: BookRecord) -> None:
        http = FakeHttpClient({GOOGLE_BOOKS_VOLUMES_URL: [{"totalItems": 1, "items": []}]})
        SuggestionService(http, google_api_key="k").google_suggestions(record)

        _, params = http.calls[0]
        assert params["q"] == 'intitle:"Dune 2 Dune Messiah" inauthor:Frank Herbert Someone Else'
        assert params["key"] == "k"

    def test_query_without_series(self) -> None:
        plain = BookRecord(checksum="c", title="Emma", authors=["Jane Austen"])
        http = FakeHttpClient({GOOGLE_BOOKS_VOLUMES_URL: [{"totalItems": 1, "items": []}]})
        SuggestionService(http, google_api_key="k").google_suggestions(plain)
        assert http.calls[0][1]["q"] == 'intitle:"Emma" inauthor:Jane Austen'

    def test_retries_without_author_when_nothing_found(self, record: BookRecord) -> None:
        http = FakeHttpClient({
            GOOGLE_BOOKS_VOLUMES_URL: [
                {"totalItems": 0},
                {"totalItems": 1, "items": [_volume(title="Dune Messiah")]},
            ]
        })
        suggestions = SuggestionService(http, google_api_key="k").google_suggestions(record)

        assert http.calls[1][1]["q"] == 'intitle:"Dune 2 Dune Messiah"'
        assert suggestions.title == ["Dune Messiah"]

    def test_parses_volume_info(self, record: BookRecord) -> None:
        http = FakeHttpClient({
            GOOGLE_BOOKS_VOLUMES_URL: [{
                "totalItems": 2,
                "items": [
                    _volume(
                        title="Dune Messiah",
                        authors=["Frank Herbert"],
                        publisher="Ace",
                        description="The sequel.",
                        categories=["Fiction"],
                        imageLinks={"thumbnail": "http://t", "large": "http://l"},
                    ),
                    _volume(
                        title="Dune Messiah",
                        authors=["Frank Herbert", "Brian Herbert"],
                        categories=["Fiction", "Space opera"],
                        imageLinks={"smallThumbnail": "http://s"},
                    ),
                    {},
                ],
            }]
        })
        suggestions = SuggestionService(http, google_api_key="k").google_suggestions(record)

        assert suggestions.title == ["Dune Messiah"]
        assert suggestions.authors == ["Frank Herbert", "Brian Herbert"]
        assert suggestions.publisher == ["Ace"]
        assert suggestions.summary == ["The sequel."]
        assert suggestions.tags == ["Fiction", "Space opera"]
        assert suggestions.image == ["http://l", "http://s"]


class TestSuggest:
    def test_merges_sources_google_first(self, record: BookRecord) -> None:
        http = FakeHttpClient({
            GOOGLE_BOOKS_VOLUMES_URL: [
                {"totalItems": 1, "items": [_volume(categories=["Fiction"])]}
            ],
            OPEN_LIBRARY_SEARCH_URL: [{"docs": [{"subject": ["Arrakis", "Fiction"]}]}],
        })
        suggestions = SuggestionService(http, google_api_key="k").suggest(record)
        assert suggestions.tags == ["Fiction", "Arrakis"]
