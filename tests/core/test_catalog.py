"""
Unit tests for the OMDb catalog client.

HTTP is replaced by a stub session, so no network access is needed.
"""

import pytest
import requests

from filmscape.core.catalog import (
    OMDbClient, CatalogError, CatalogNotFoundError, CatalogUnavailableError,
    parse_year, to_movie_fields,
)

MATRIX = {
    "Title": "The Matrix",
    "Year": "1999",
    "Rated": "R",
    "Released": "31 Mar 1999",
    "Runtime": "136 min",
    "Genre": "Action, Sci-Fi",
    "Director": "Lana Wachowski, Lilly Wachowski",
    "Plot": "A computer hacker learns about the true nature of reality.",
    "Poster": "https://example.com/matrix.jpg",
    "imdbRating": "8.7",
    "imdbVotes": "2,000,000",
    "imdbID": "tt0133093",
    "Type": "movie",
    "BoxOffice": "N/A",
    "Website": "N/A",
    "Response": "True",
}


class FakeResponse:
    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self._payload = payload

    def json(self):
        if self._payload is None:
            raise ValueError("no JSON")
        return self._payload


class FakeSession:
    """Records requests and replays a canned response or error."""

    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def get(self, url, params=None, timeout=None):
        self.calls.append((url, params, timeout))
        if self.error:
            raise self.error
        return self.response


def make_client(response=None, error=None, api_key="secret"):
    return OMDbClient(api_key=api_key, session=FakeSession(response, error), timeout=2.0)


class TestParsing:
    """Tests for OMDb payload mapping."""

    def test_parse_year_handles_ranges(self):
        assert parse_year("1999") == 1999
        assert parse_year("2005–2008") == 2005
        assert parse_year("N/A") is None

    def test_to_movie_fields_maps_and_cleans(self):
        fields = to_movie_fields(MATRIX)

        assert fields['imdb_id'] == "tt0133093"
        assert fields['title'] == "The Matrix"
        assert fields['year'] == 1999
        assert fields['genre'] == "Action, Sci-Fi"
        assert fields['imdb_rating'] == 8.7
        assert fields['box_office'] is None
        assert fields['website'] is None

    def test_to_movie_fields_requires_identity(self):
        with pytest.raises(CatalogError):
            to_movie_fields({"Title": "No ID", "Year": "2001"})


class TestOMDbClient:
    """Tests for request handling and error classification."""

    def test_fetch_success_sends_expected_params(self):
        client = make_client(FakeResponse(200, MATRIX))

        fields = client.fetch_movie_fields("tt0133093")

        assert fields['title'] == "The Matrix"
        url, params, timeout = client.session.calls[0]
        assert params == {'apikey': 'secret', 'i': 'tt0133093', 'plot': 'full'}
        assert timeout == 2.0

    def test_invalid_imdb_id_rejected_before_request(self):
        client = make_client(FakeResponse(200, MATRIX))
        with pytest.raises(ValueError):
            client.get_by_imdb_id("matrix")
        assert client.session.calls == []

    def test_missing_api_key(self):
        client = make_client(FakeResponse(200, MATRIX), api_key=None)
        with pytest.raises(CatalogUnavailableError):
            client.get_by_imdb_id("tt0133093")

    def test_not_found_response(self):
        client = make_client(FakeResponse(200, {"Response": "False", "Error": "Incorrect IMDb ID."}))
        with pytest.raises(CatalogNotFoundError):
            client.get_by_imdb_id("tt9999999")

    def test_upstream_error_status(self):
        client = make_client(FakeResponse(503, None))
        with pytest.raises(CatalogUnavailableError):
            client.get_by_imdb_id("tt0133093")

    def test_network_error(self):
        client = make_client(error=requests.ConnectionError("boom"))
        with pytest.raises(CatalogUnavailableError):
            client.get_by_imdb_id("tt0133093")

    def test_invalid_json(self):
        client = make_client(FakeResponse(200, None))
        with pytest.raises(CatalogUnavailableError):
            client.get_by_imdb_id("tt0133093")
