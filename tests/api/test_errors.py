"""
API tests for error responses, request size limits and the health endpoint.
"""

import pytest
from fastapi.testclient import TestClient

from filmscape.api.main import app
from filmscape.database import crud


@pytest.fixture
def failing_health(client, monkeypatch):
    """Make the health endpoint raise an unexpected error."""
    def boom(session):
        raise RuntimeError("counter exploded")

    monkeypatch.setattr(crud, "get_review_count", boom)
    return TestClient(app, raise_server_exceptions=False)


class TestHealth:

    def test_root(self, client):
        r = client.get("/")
        assert r.status_code == 200
        assert r.json()["health"] == "/api/health"

    def test_health_counts(self, client, admin, make_movie):
        make_movie()
        r = client.get("/api/health")
        assert r.status_code == 200
        assert r.json() == {
            "status": "healthy",
            "database": "connected",
            "users": 1,
            "movies": 1,
            "reviews": 0,
        }


class TestErrorResponses:

    def test_unknown_route(self, client):
        r = client.get("/api/nowhere")
        assert r.status_code == 404
        assert r.json()["error"] == "Not Found"

    def test_malformed_json(self, client):
        r = client.post("/api/users", content=b"{not json", headers={"Content-Type": "application/json"})
        assert r.status_code == 400
        assert r.json()["error"] == "Validation Error"

    def test_non_numeric_user_header(self, client, make_movie):
        movie = make_movie()
        r = client.post(f"/api/reviews/movies/{movie.id}", json={"rating": 5}, headers={"X-User-Id": "abc"})
        assert r.status_code == 400
        assert "X-User-Id" in [d["field"] for d in r.json()["details"]]

    def test_body_too_large(self, client, monkeypatch):
        monkeypatch.setenv("MAX_BODY_BYTES", "64")
        r = client.post("/api/users", json={"username": "bigbio", "email": "big@example.com", "bio": "x" * 200})
        assert r.status_code == 413
        assert r.json()["error"] in ("Request Entity Too Large", "Content Too Large")

    def test_chunked_body_too_large(self, client, monkeypatch):
        monkeypatch.setenv("MAX_BODY_BYTES", "64")

        def chunks():
            yield b'{"username": "chunky", "email": "chunky@example.com", "bio": "'
            for _ in range(10):
                yield b"x" * 40
            yield b'"}'

        r = client.post("/api/users", content=chunks(), headers={"Content-Type": "application/json"})
        assert r.status_code == 413
        assert client.get("/api/health").json()["users"] == 0

    def test_chunked_body_within_limit(self, client, monkeypatch):
        monkeypatch.setenv("MAX_BODY_BYTES", "4096")

        def chunks():
            yield b'{"username": "chunky", '
            yield b'"email": "chunky@example.com"}'

        r = client.post("/api/users", content=chunks(), headers={"Content-Type": "application/json"})
        assert r.status_code == 201
        assert r.json()["user"]["username"] == "chunky"

    def test_body_within_limit(self, client, monkeypatch):
        monkeypatch.setenv("MAX_BODY_BYTES", "4096")
        r = client.post("/api/users", json={"username": "smallbio", "email": "small@example.com"})
        assert r.status_code == 201

    def test_unhandled_error_hides_details_in_production(self, failing_health, monkeypatch):
        monkeypatch.setenv("APP_ENV", "production")
        r = failing_health.get("/api/health")
        assert r.status_code == 500
        body = r.json()
        assert body == {"error": "Internal Server Error", "message": "Internal Server Error"}

    def test_unhandled_error_includes_stack_in_development(self, failing_health, monkeypatch):
        monkeypatch.setenv("APP_ENV", "development")
        r = failing_health.get("/api/health")
        assert r.status_code == 500
        body = r.json()
        assert body["message"] == "counter exploded"
        assert any("RuntimeError" in line for line in body["stack"])
