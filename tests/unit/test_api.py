"""
API tests through FastAPI's TestClient, with the TMDB wrapper replaced by
an in-memory fake and the store under tmp_path.
"""
import pytest
import requests
from fastapi.testclient import TestClient

from conftest import movie_payload

from api.dependencies import AppState, get_app_state
from api.main import app


def _state(settings, tmdb=None):
    state = AppState(settings)
    state.initialize()
    if tmdb is not None:
        state.set_tmdb(tmdb)
    return state


@pytest.fixture
def client(settings, fake_tmdb):
    state = _state(settings, fake_tmdb)
    app.dependency_overrides[get_app_state] = lambda: state
    yield TestClient(app)
    app.dependency_overrides.clear()


def _like(client, movie_id, user_id="alice", genres=(28,)):
    return client.post("/api/v1/signals", json={
        "userId": user_id, "movieId": movie_id, "action": "like", "genreIds": list(genres),
    })


def test_root_and_health(client):
    assert client.get("/").json()["status"] == "running"
    body = client.get("/api/v1/health").json()
    assert body["ok"] is True
    assert body["details"]["repository"] == "LocalFileRepository"


class TestConfiguration:

    def test_missing_tmdb_key_is_500_with_restore_steps(self, settings):
        state = _state(settings.model_copy(update={"tmdb": None}))
        app.dependency_overrides[get_app_state] = lambda: state
        try:
            client = TestClient(app)
            resp = client.get("/api/v1/movies/popular")
            assert resp.status_code == 500
            assert resp.json()["error"] == "TMDB_API_KEY missing"
            assert resp.json()["restore"]
            assert client.get("/api/v1/health").json()["ok"] is False
        finally:
            app.dependency_overrides.clear()

    def test_upstream_failure_is_502(self, client, fake_tmdb):
        fake_tmdb.fail_popular = requests.ConnectionError("refused")
        resp = client.get("/api/v1/movies/popular")
        assert resp.status_code == 502
        assert resp.json() == {"error": "Upstream movie service unavailable"}


class TestMovies:

    def test_search_requires_query(self, client):
        assert client.get("/api/v1/movies/search").status_code == 400
        assert client.get("/api/v1/movies/search", params={"query": "  "}).status_code == 400

    def test_search_filters_posters_and_sorts(self, client, fake_tmdb):
        fake_tmdb.search_payloads = [movie_payload(3), movie_payload(9), movie_payload(5, poster=None)]

        resp = client.get("/api/v1/movies/search", params={"query": "up"})
        assert resp.status_code == 200
        assert "s-maxage" in resp.headers["cache-control"]
        body = resp.json()
        assert [m["id"] for m in body["results"]] == [9, 3]
        assert body["results"][0]["posterPath"] == "/poster9.jpg"
        assert body["totalPages"] == 500

        upstream_order = client.get("/api/v1/movies/search", params={"query": "up", "sort": "none"}).json()
        assert [m["id"] for m in upstream_order["results"]] == [3, 9]

        assert client.get("/api/v1/movies/search", params={"query": "up", "sort": "rating"}).status_code == 400

    def test_popular_explicit_page_with_exclusions(self, client, fake_tmdb):
        body = client.get("/api/v1/movies/popular", params={"page": 2, "exclude": "1,2,junk"}).json()
        assert body["page"] == 2
        assert [m["id"] for m in body["results"]] == [3, 4, 5]
        assert fake_tmdb.called("popular") == [("popular", 2, "US")]

    def test_popular_randomized_uses_salted_page(self, client, fake_tmdb):
        body = client.get("/api/v1/movies/popular", params={"randomize": "true", "t": "1", "r": "abc", "region": "gb"}).json()
        _, page, region = fake_tmdb.called("popular")[0]
        assert body["page"] == page
        assert 1 <= page <= 500
        assert region == "GB"
        assert sorted(m["id"] for m in body["results"]) == [1, 2, 3, 4, 5]

    def test_details(self, client, fake_tmdb):
        fake_tmdb.details[550] = {"id": 550, "title": "Fight Club", "runtime": 139}
        assert client.get("/api/v1/movies/550").json()["runtime"] == 139
        assert client.get("/api/v1/movies/551").status_code == 404

    def test_discover_seeded_page_and_clamped_count(self, client, fake_tmdb):
        fake_tmdb.discover_payloads = [movie_payload(i) for i in range(1, 31)] + [movie_payload(1)]

        body = client.get("/api/v1/discover", params={"seed": "7", "count": 5}).json()
        assert body["page"] == 8
        assert body["count"] == 5
        assert len({m["id"] for m in body["results"]}) == 5

        body = client.get("/api/v1/discover", params={"seed": "7", "count": 100}).json()
        assert body["count"] == 20

        body = client.get("/api/v1/discover", params={"seed": "abc", "count": "-5"}).json()
        assert body["page"] == 1
        assert body["count"] == 1

    @pytest.mark.parametrize("count, expected", [("abc", 12), ("0", 12), ("5abc", 5), ("3.9", 3)])
    def test_discover_count_is_read_leniently(self, client, fake_tmdb, count, expected):
        fake_tmdb.discover_payloads = [movie_payload(i) for i in range(1, 31)]
        resp = client.get("/api/v1/discover", params={"seed": "12abc", "count": count})
        assert resp.status_code == 200
        assert resp.json()["count"] == expected
        assert resp.json()["page"] == 13

    def test_malformed_upstream_numbers_do_not_sink_the_page(self, client, fake_tmdb):
        fake_tmdb.popular_payloads = [
            movie_payload(1, vote_count="--5"),
            movie_payload(2, popularity="\u00b2"),
            {"id": "--3", "title": "bad id", "poster_path": "/p.jpg"},
        ]
        popular = client.get("/api/v1/movies/popular")
        assert popular.status_code == 200
        assert [m["id"] for m in popular.json()["results"]] == [1, 2]
        assert popular.json()["results"][0]["voteCount"] is None

        feed = client.get("/api/v1/feed")
        assert feed.status_code == 200
        assert sorted(m["id"] for m in feed.json()["results"]) == [1, 2]


class TestSignalsAndRecommendations:

    def test_signal_upsert(self, client):
        first = _like(client, 10)
        assert first.status_code == 200
        assert first.json() == {"success": True, "created": True}
        assert _like(client, 10).json()["created"] is False

    def test_invalid_action_is_rejected(self, client):
        resp = client.post("/api/v1/signals", json={"userId": "alice", "movieId": 1, "action": "love"})
        assert resp.status_code == 422

    def test_recommend_requires_user(self, client):
        assert client.get("/api/v1/recommend").status_code == 400

    def test_recommend_204_without_signals(self, client):
        resp = client.get("/api/v1/recommend", params={"userId": "newbie"})
        assert resp.status_code == 204
        assert resp.headers["x-reason"] == "INSUFFICIENT_SIGNALS"
        assert resp.content == b""

    def test_recommend_with_signals(self, client, fake_tmdb):
        for movie_id in (101, 102, 103):
            _like(client, movie_id)
        fake_tmdb.discover_payloads = [movie_payload(i) for i in (101, 200, 300)]

        body = client.get("/api/v1/recommend", params={"userId": "alice"}).json()
        assert [m["id"] for m in body["recommendations"]] == [300, 200]
        assert body["preferredGenres"] == [28]
        assert body["signalCount"] == 3


class TestFeed:

    def test_anonymous_feed_is_popular_minus_seen(self, client, fake_tmdb):
        fake_tmdb.popular_payloads.append(movie_payload(6, poster="null"))
        body = client.get("/api/v1/feed", params={"exclude": "1,2"}).json()
        assert body["source"] == "popular"
        assert sorted(m["id"] for m in body["results"]) == [3, 4, 5]
        assert body["page"] == fake_tmdb.called("popular")[0][1]
        assert fake_tmdb.called("discover") == []

    def test_user_without_signals_falls_back(self, client):
        body = client.get("/api/v1/feed", params={"userId": "newbie"}).json()
        assert body["source"] == "popular"
        assert body["personalizedError"] == "insufficient_signals"

    def test_personalized_feed(self, client, fake_tmdb):
        for movie_id in (101, 102, 103):
            _like(client, movie_id)
        fake_tmdb.discover_payloads = [movie_payload(i) for i in (101, 200, 201, 202)]

        body = client.get("/api/v1/feed", params={"userId": "alice", "exclude": "202"}).json()
        assert body["source"] == "personalized"
        assert sorted(m["id"] for m in body["results"]) == [200, 201]
        assert fake_tmdb.called("popular") == []

    def test_personalized_failure_falls_back(self, client, fake_tmdb):
        for movie_id in (101, 102, 103):
            _like(client, movie_id)
        fake_tmdb.fail_discover = requests.Timeout("slow")
        body = client.get("/api/v1/feed", params={"userId": "alice"}).json()
        assert body["source"] == "popular"
        assert len(fake_tmdb.called("discover")) == 1

    def test_both_paths_failing_is_502(self, client, fake_tmdb):
        fake_tmdb.fail_popular = requests.ConnectionError("refused")
        resp = client.get("/api/v1/feed")
        assert resp.status_code == 502


class TestWatchlist:

    def test_crud(self, client):
        resp = client.post("/api/v1/movies/watchlist", json={
            "userId": "alice", "movieId": 550, "movieTitle": "Fight Club", "moviePoster": "/fc.jpg",
        })
        assert resp.status_code == 200
        assert resp.json()["addedAt"]

        body = client.get("/api/v1/movies/watchlist/alice").json()
        assert body["count"] == 1
        assert body["items"][0]["movieTitle"] == "Fight Club"

        assert client.delete("/api/v1/movies/watchlist/alice/550").json() == {"success": True}
        assert client.delete("/api/v1/movies/watchlist/alice/550").status_code == 404
        assert client.get("/api/v1/movies/watchlist/alice").json()["count"] == 0

    def test_user_id_required(self, client):
        resp = client.post("/api/v1/movies/watchlist", json={"userId": "", "movieId": 1, "movieTitle": "A"})
        assert resp.status_code == 422


class TestStreaming:

    def test_availability(self, client, fake_tmdb):
        fake_tmdb.details[14160] = {"id": 14160, "title": "Up", "release_date": "2009-05-28", "poster_path": "/up.jpg"}
        fake_tmdb.providers[14160] = {"id": 14160, "results": {"FR": {
            "link": "https://www.themoviedb.org/movie/14160/watch?locale=FR",
            "flatrate": [{"provider_id": 337, "provider_name": "Disney Plus", "display_priority": 1}],
            "buy": [{"provider_id": 1899, "provider_name": "Some Local Store", "display_priority": 2}],
        }}}

        body = client.get("/api/v1/streaming/14160", params={"region": "fr"}).json()
        assert body["region"] == "FR"
        assert body["primary"]["platform"] == "disney"
        assert [p["provider_id"] for p in body["providers"]] == [337]
        assert body["counts"] == {"flatrate": 1, "rent": 0, "buy": 0}

    def test_unknown_movie_is_404(self, client):
        assert client.get("/api/v1/streaming/1").status_code == 404
