"""
Client for the public OMDb movie catalog.

Used by the admin import endpoint to turn an IMDb ID into a local movie
record. GET requests are retried on connection errors and on 429/5xx
responses; everything else is reported through the CatalogError family.
"""

import logging
import re
from typing import Any, Dict, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://www.omdbapi.com/"
IMDB_ID_PATTERN = re.compile(r"^tt\d{7,8}$")

# OMDb field name -> Movie column
FIELD_MAP = {
    'Title': 'title',
    'Rated': 'rated',
    'Released': 'released',
    'Runtime': 'runtime',
    'Genre': 'genre',
    'Director': 'director',
    'Writer': 'writer',
    'Actors': 'actors',
    'Plot': 'plot',
    'Language': 'language',
    'Country': 'country',
    'Awards': 'awards',
    'Poster': 'poster',
    'imdbVotes': 'imdb_votes',
    'Type': 'type',
    'BoxOffice': 'box_office',
    'Production': 'production',
    'Website': 'website',
}


class CatalogError(Exception):
    """Base exception for catalog lookups."""


class CatalogNotFoundError(CatalogError):
    """The catalog has no entry for the requested ID."""


class CatalogUnavailableError(CatalogError):
    """The catalog could not be reached or answered with an error."""


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return None if value in ('', 'N/A') else value


def parse_year(raw: Optional[str]) -> Optional[int]:
    """Extract the first four-digit year from values like '1999' or '2005–2008'."""
    match = re.search(r"\d{4}", raw or "")
    return int(match.group(0)) if match else None


def to_movie_fields(payload: Dict[str, Any]) -> Dict[str, Any]:
    """
    Map an OMDb detail response onto Movie column values.

    'N/A' placeholders become None and the IMDb rating becomes a float.

    Raises:
        CatalogError: If the payload lacks an IMDb ID, title or year
    """
    fields = {column: _clean(payload.get(name)) for name, column in FIELD_MAP.items()}
    fields['imdb_id'] = _clean(payload.get('imdbID'))
    fields['year'] = parse_year(payload.get('Year'))

    rating = _clean(payload.get('imdbRating'))
    try:
        fields['imdb_rating'] = float(rating) if rating else None
    except ValueError:
        fields['imdb_rating'] = None

    if not fields['imdb_id'] or not fields['title'] or fields['year'] is None:
        raise CatalogError("Catalog entry is missing its IMDb ID, title or year")

    # Trim values to the column widths used by the movies table
    for column, width in (('rated', 10), ('released', 50), ('runtime', 20),
                          ('imdb_votes', 20), ('type', 20), ('box_office', 50)):
        if fields.get(column):
            fields[column] = fields[column][:width]
    return fields


class OMDbClient:
    """
    Minimal OMDb client backed by a retrying ``requests.Session``.

    Args:
        api_key: OMDb API key
        base_url: OMDb endpoint
        timeout: Per-request timeout in seconds
        retries: Retry attempts for idempotent failures
        session: Pre-built session (tests inject a stub here)
    """

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 8.0,
        retries: int = 2,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url
        self.timeout = timeout
        self.session = session or self._make_session(retries)

    @staticmethod
    def _make_session(retries: int) -> requests.Session:
        session = requests.Session()
        retry = Retry(
            total=retries,
            backoff_factor=0.8,
            status_forcelist=(429, 500, 502, 503, 504),
            allowed_methods=frozenset(["GET"]),
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry)
        session.mount("https://", adapter)
        session.mount("http://", adapter)
        return session

    def get_by_imdb_id(self, imdb_id: str) -> Dict[str, Any]:
        """
        Fetch full details of a movie.

        Args:
            imdb_id: IMDb ID such as 'tt0133093'

        Returns:
            Raw OMDb JSON payload

        Raises:
            ValueError: If imdb_id is malformed
            CatalogNotFoundError: If OMDb has no such title
            CatalogUnavailableError: On missing key, network or upstream errors
        """
        if not IMDB_ID_PATTERN.match(imdb_id or ""):
            raise ValueError("Invalid IMDb ID format")
        if not self.api_key:
            raise CatalogUnavailableError("OMDB_API_KEY is not configured")

        params = {'apikey': self.api_key, 'i': imdb_id, 'plot': 'full'}
        try:
            response = self.session.get(self.base_url, params=params, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.warning("OMDb request for %s failed: %s", imdb_id, exc)
            raise CatalogUnavailableError(f"OMDb request failed: {exc}") from exc

        if response.status_code == 404:
            raise CatalogNotFoundError(f"No catalog entry for {imdb_id}")
        if response.status_code != 200:
            logger.warning("OMDb returned HTTP %s for %s", response.status_code, imdb_id)
            raise CatalogUnavailableError(f"OMDb returned HTTP {response.status_code}")

        try:
            data = response.json()
        except ValueError as exc:
            raise CatalogUnavailableError("OMDb returned invalid JSON") from exc

        if data.get('Response') == 'False':
            error = data.get('Error') or 'Unknown error'
            if 'not found' in error.lower() or 'incorrect imdb id' in error.lower():
                raise CatalogNotFoundError(f"No catalog entry for {imdb_id}")
            raise CatalogUnavailableError(f"OMDb error: {error}")

        logger.info("Fetched %s from OMDb (%s)", imdb_id, data.get('Title'))
        return data

    def fetch_movie_fields(self, imdb_id: str) -> Dict[str, Any]:
        """Fetch a movie and map it onto Movie column values."""
        return to_movie_fields(self.get_by_imdb_id(imdb_id))
