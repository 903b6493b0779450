"""
API tests for movie endpoints, including OMDb import with a stub catalog client.
"""

import pytest

from filmscape.api.dependencies import get_catalog_client
from filmscape.api.main import app
from filmscape.core.catalog import CatalogNotFoundError, CatalogUnavailableError
from filmscape.database import crud
from filmscape.database.models import MIN_MOVIE_YEAR, max_movie_year


def headers_for(user):
    return {"X-User-Id": str(user.id)}


class StubCatalog:
    """Catalog client returning canned fields or raising a canned error."""

    def __init__(self, fields=None, error=None):
        self.fields = fields
        self.error = error
        self.requested = []

    def fetch_movie_fields(self, imdb_id):
        self.requested.append(imdb_id)
        if self.error:
            raise self.error
        return dict(self.fields)


@pytest.fixture
def stub_catalog():
    def _install(**kwargs):
        catalog = StubCatalog(**kwargs)
        app.dependency_overrides[get_catalog_client] = lambda: catalog
        return catalog
    return _install


class TestListMovies:
    """Tests for GET /api/movies."""

    def test_empty_catalog(self, client):
        r = client.get("/api/movies")
        assert r.status_code == 200
        data = r.json()
        assert data["movies"] == []
        assert data["pagination"] == {
            "current_page": 1,
            "total_pages": 0,
            "total": 0,
            "limit": 20,
            "has_next": False,
            "has_prev": False,
        }

    def test_pagination(self, client, make_movie):
        for i in range(5):
            make_movie(f"Movie {i}")

        r = client.get("/api/movies", params={"page": 2, "limit": 2, "sort_by": "title", "sort_order": "ASC"})
        assert r.status_code == 200
        data = r.json()
        assert [m["title"] for m in data["movies"]] == ["Movie 2", "Movie 3"]
        assert data["pagination"]["total_pages"] == 3
        assert data["pagination"]["has_next"] is True
        assert data["pagination"]["has_prev"] is True

    def test_search_and_filters(self, client, make_movie):
        make_movie("The Matrix", genre="Action, Sci-Fi", year=1999)
        make_movie("The Matrix Reloaded", genre="Action, Sci-Fi", year=2003)
        make_movie("Notting Hill", genre="Comedy, Romance", year=1999)

        r = client.get("/api/movies", params={"search": "matrix", "year": 1999})
        assert [m["title"] for m in r.json()["movies"]] == ["The Matrix"]

        r = client.get("/api/movies", params={"genre": "sci-fi"})
        assert r.json()["pagination"]["total"] == 2

    def test_min_rating_uses_aggregate(self, client, session, make_user, make_movie):
        liked = make_movie("Liked")
        make_movie("Unrated")
        crud.create_review(session, make_user().id, liked.id, 8)

        r = client.get("/api/movies", params={"min_rating": 7})
        movies = r.json()["movies"]
        assert [m["title"] for m in movies] == ["Liked"]
        assert movies[0]["average_rating"] == 8.0
        assert movies[0]["total_reviews"] == 1

    @pytest.mark.parametrize("params", [
        {"sort_by": "password"},
        {"sort_order": "SIDEWAYS"},
        {"page": 0},
        {"limit": 101},
        {"min_rating": 11},
    ])
    def test_invalid_query(self, client, params):
        r = client.get("/api/movies", params=params)
        assert r.status_code == 400
        assert r.json()["error"] == "Validation Error"


class TestMovieDetail:
    """Tests for GET /api/movies/{id}, /imdb/{imdb_id} and /{id}/reviews."""

    def test_get_movie_with_reviews(self, client, session, make_user, make_movie):
        movie = make_movie("Heat", imdb_id="tt0113277")
        crud.create_review(session, make_user("vincent").id, movie.id, 9, review_text="Diner scene")

        r = client.get(f"/api/movies/{movie.id}")
        assert r.status_code == 200
        data = r.json()["movie"]
        assert data["imdb_id"] == "tt0113277"
        assert data["average_rating"] == 9.0
        assert len(data["reviews"]) == 1
        assert data["reviews"][0]["user"]["username"] == "vincent"

    def test_get_movie_by_imdb_id(self, client, make_movie):
        make_movie("Heat", imdb_id="tt0113277")
        r = client.get("/api/movies/imdb/tt0113277")
        assert r.status_code == 200
        assert r.json()["movie"]["title"] == "Heat"

    def test_get_movie_not_found(self, client):
        assert client.get("/api/movies/4242").status_code == 404
        assert client.get("/api/movies/imdb/tt0000001").status_code == 404

    def test_list_movie_reviews(self, client, session, make_user, make_movie):
        movie = make_movie()
        for rating in (3, 6, 9):
            crud.create_review(session, make_user().id, movie.id, rating)

        r = client.get(f"/api/movies/{movie.id}/reviews", params={"limit": 2})
        assert r.status_code == 200
        data = r.json()
        assert len(data["reviews"]) == 2
        assert data["pagination"]["total"] == 3


class TestAdminMovieEndpoints:
    """Tests for catalog management (admin only)."""

    PAYLOAD = {"imdb_id": "tt0133093", "title": "The Matrix", "year": 1999, "genre": "Action, Sci-Fi"}

    def test_create_movie(self, client, admin):
        r = client.post("/api/movies", json=self.PAYLOAD, headers=headers_for(admin))
        assert r.status_code == 201
        data = r.json()["movie"]
        assert data["title"] == "The Matrix"
        assert data["average_rating"] == 0
        assert data["total_reviews"] == 0

    def test_create_movie_requires_admin(self, client, make_user):
        r = client.post("/api/movies", json=self.PAYLOAD, headers=headers_for(make_user()))
        assert r.status_code == 403

    def test_create_movie_requires_identity(self, client):
        assert client.post("/api/movies", json=self.PAYLOAD).status_code == 401

    def test_create_movie_duplicate(self, client, admin, make_movie):
        make_movie(imdb_id="tt0133093")
        r = client.post("/api/movies", json=self.PAYLOAD, headers=headers_for(admin))
        assert r.status_code == 409

    def test_create_movie_ignores_aggregate_fields(self, client, admin):
        payload = dict(self.PAYLOAD, average_rating=9.9, total_reviews=500)
        r = client.post("/api/movies", json=payload, headers=headers_for(admin))
        assert r.status_code == 201
        assert r.json()["movie"]["average_rating"] == 0
        assert r.json()["movie"]["total_reviews"] == 0

    def test_create_movie_invalid(self, client, admin):
        r = client.post("/api/movies", json={"imdb_id": "123", "title": "", "year": 1700},
                        headers=headers_for(admin))
        assert r.status_code == 400
        fields = {d["field"] for d in r.json()["details"]}
        assert {"imdb_id", "title", "year"} <= fields

    def test_update_movie(self, client, admin, make_movie):
        movie = make_movie("Alien")
        r = client.put(f"/api/movies/{movie.id}", json={"year": 1979, "director": "Ridley Scott"},
                       headers=headers_for(admin))
        assert r.status_code == 200
        assert r.json()["movie"]["year"] == 1979
        assert r.json()["movie"]["title"] == "Alien"

    @pytest.mark.parametrize("field", ["title", "year"])
    def test_update_null_required_field_is_ignored(self, client, admin, make_movie, field):
        movie = make_movie("Alien", year=1979)
        r = client.put(f"/api/movies/{movie.id}", json={field: None, "plot": "Nostromo"},
                       headers=headers_for(admin))
        assert r.status_code == 200
        data = r.json()["movie"]
        assert data["title"] == "Alien"
        assert data["year"] == 1979
        assert data["plot"] == "Nostromo"

    def test_year_bounds(self, client, admin, make_movie):
        movie = make_movie()
        next_allowed = max_movie_year()

        r = client.put(f"/api/movies/{movie.id}", json={"year": next_allowed}, headers=headers_for(admin))
        assert r.status_code == 200

        for year in (MIN_MOVIE_YEAR - 1, next_allowed + 1):
            r = client.put(f"/api/movies/{movie.id}", json={"year": year}, headers=headers_for(admin))
            assert r.status_code == 400
            assert [d["field"] for d in r.json()["details"]] == ["year"]

    def test_update_missing_movie(self, client, admin):
        r = client.put("/api/movies/4242", json={"title": "x"}, headers=headers_for(admin))
        assert r.status_code == 404

    def test_delete_movie_removes_reviews(self, client, session, admin, make_user, make_movie):
        movie = make_movie()
        movie_id = movie.id
        crud.create_review(session, make_user().id, movie_id, 5)

        r = client.delete(f"/api/movies/{movie_id}", headers=headers_for(admin))
        assert r.status_code == 200
        assert client.get(f"/api/movies/{movie_id}").status_code == 404
        session.expire_all()
        assert crud.get_review_count(session) == 0


class TestImportMovie:
    """Tests for POST /api/movies/import."""

    FIELDS = {
        "imdb_id": "tt0133093",
        "title": "The Matrix",
        "year": 1999,
        "genre": "Action, Sci-Fi",
        "imdb_rating": 8.7,
        "box_office": None,
    }

    def test_import_creates_movie(self, client, admin, stub_catalog):
        catalog = stub_catalog(fields=self.FIELDS)

        r = client.post("/api/movies/import", json={"imdb_id": "tt0133093"}, headers=headers_for(admin))
        assert r.status_code == 201
        data = r.json()["movie"]
        assert data["title"] == "The Matrix"
        assert data["imdb_rating"] == 8.7
        assert data["total_reviews"] == 0
        assert catalog.requested == ["tt0133093"]

    def test_import_existing_skips_lookup(self, client, admin, make_movie, stub_catalog):
        make_movie(imdb_id="tt0133093")
        catalog = stub_catalog(fields=self.FIELDS)

        r = client.post("/api/movies/import", json={"imdb_id": "tt0133093"}, headers=headers_for(admin))
        assert r.status_code == 409
        assert catalog.requested == []

    def test_import_not_found(self, client, admin, stub_catalog):
        stub_catalog(error=CatalogNotFoundError("Movie not found in OMDb: tt9999999"))
        r = client.post("/api/movies/import", json={"imdb_id": "tt9999999"}, headers=headers_for(admin))
        assert r.status_code == 404

    def test_import_upstream_failure(self, client, admin, stub_catalog):
        stub_catalog(error=CatalogUnavailableError("OMDb request failed"))
        r = client.post("/api/movies/import", json={"imdb_id": "tt0133093"}, headers=headers_for(admin))
        assert r.status_code == 502
        assert r.json()["error"] == "Bad Gateway"

    def test_import_requires_admin(self, client, make_user, stub_catalog):
        stub_catalog(fields=self.FIELDS)
        r = client.post("/api/movies/import", json={"imdb_id": "tt0133093"}, headers=headers_for(make_user()))
        assert r.status_code == 403
