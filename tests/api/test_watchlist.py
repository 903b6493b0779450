"""
API tests for watchlist endpoints under /api/users/{user_id}/watchlist.
"""

from filmscape.database import crud


def headers_for(user):
    return {"X-User-Id": str(user.id)}


class TestWatchlistEndpoints:

    def test_add_to_watchlist(self, client, make_user, make_movie):
        user, movie = make_user(), make_movie("Arrival")

        r = client.post(f"/api/users/{user.id}/watchlist",
                        json={"movie_id": movie.id, "priority": 2}, headers=headers_for(user))
        assert r.status_code == 201
        item = r.json()["watchlist_item"]
        assert item["status"] == "want_to_watch"
        assert item["priority"] == 2
        assert item["movie"]["title"] == "Arrival"

    def test_add_duplicate_conflict(self, client, make_user, make_movie):
        user, movie = make_user(), make_movie()
        url = f"/api/users/{user.id}/watchlist"
        client.post(url, json={"movie_id": movie.id}, headers=headers_for(user))

        r = client.post(url, json={"movie_id": movie.id}, headers=headers_for(user))
        assert r.status_code == 409
        assert len(client.get(url, headers=headers_for(user)).json()["watchlist"]) == 1

    def test_add_missing_movie(self, client, make_user):
        user = make_user()
        r = client.post(f"/api/users/{user.id}/watchlist", json={"movie_id": 4242}, headers=headers_for(user))
        assert r.status_code == 404

    def test_add_invalid_fields(self, client, make_user, make_movie):
        user, movie = make_user(), make_movie()
        r = client.post(f"/api/users/{user.id}/watchlist",
                        json={"movie_id": movie.id, "status": "abandoned", "priority": 9},
                        headers=headers_for(user))
        assert r.status_code == 400
        assert {d["field"] for d in r.json()["details"]} == {"status", "priority"}

    def test_other_users_watchlist_forbidden(self, client, make_user, make_movie):
        user, other = make_user(), make_user()
        movie = make_movie()

        assert client.get(f"/api/users/{other.id}/watchlist", headers=headers_for(user)).status_code == 403
        r = client.post(f"/api/users/{other.id}/watchlist", json={"movie_id": movie.id},
                        headers=headers_for(user))
        assert r.status_code == 403

    def test_get_watchlist_filtered(self, client, session, make_user, make_movie):
        user = make_user()
        first, second = make_movie("First"), make_movie("Second")
        crud.add_to_watchlist(session, user.id, first.id, status="watching")
        crud.add_to_watchlist(session, user.id, second.id)

        url = f"/api/users/{user.id}/watchlist"
        assert len(client.get(url, headers=headers_for(user)).json()["watchlist"]) == 2

        r = client.get(url, params={"status": "watching"}, headers=headers_for(user))
        assert [e["movie"]["title"] for e in r.json()["watchlist"]] == ["First"]

    def test_update_in_place(self, client, session, make_user, make_movie):
        user, movie = make_user(), make_movie()
        entry = crud.add_to_watchlist(session, user.id, movie.id)
        entry_id = entry.id

        r = client.put(f"/api/users/{user.id}/watchlist/{movie.id}",
                       json={"status": "watched", "notes": "Worth it"}, headers=headers_for(user))
        assert r.status_code == 200
        item = r.json()["watchlist_item"]
        assert item["id"] == entry_id
        assert item["status"] == "watched"
        assert item["notes"] == "Worth it"
        assert item["priority"] == 0

        watchlist = client.get(f"/api/users/{user.id}/watchlist", headers=headers_for(user)).json()["watchlist"]
        assert len(watchlist) == 1

    def test_update_missing_entry(self, client, make_user, make_movie):
        user, movie = make_user(), make_movie()
        r = client.put(f"/api/users/{user.id}/watchlist/{movie.id}",
                       json={"priority": 1}, headers=headers_for(user))
        assert r.status_code == 404

    def test_remove_from_watchlist(self, client, session, make_user, make_movie):
        user, movie = make_user(), make_movie()
        crud.add_to_watchlist(session, user.id, movie.id)
        url = f"/api/users/{user.id}/watchlist/{movie.id}"

        assert client.delete(url, headers=headers_for(user)).status_code == 200
        assert client.delete(url, headers=headers_for(user)).status_code == 404
