"""
Shared fixtures: movie factories and an in-memory stand-in for the TMDB wrapper.
"""
import json
from typing import Any, Dict, List, Optional

import pytest
import requests

from moviedrop.features.movie_schema import Movie
from moviedrop.settings import Settings, TMDBSettings


def movie_payload(movie_id: int, poster: Optional[str] = "auto", **extra) -> Dict[str, Any]:
    """TMDB-shaped list entry; poster='auto' gives a valid poster path"""
    payload = {
        "id": movie_id,
        "title": f"Movie {movie_id}",
        "overview": "",
        "poster_path": f"/poster{movie_id}.jpg" if poster == "auto" else poster,
        "release_date": "2020-01-01",
        "popularity": float(movie_id),
        "vote_average": 7.0,
        "vote_count": 100,
        "genre_ids": [28],
    }
    payload.update(extra)
    return payload


def make_movie(movie_id: int, poster: Optional[str] = "auto", **extra) -> Movie:
    return Movie.from_payload(movie_payload(movie_id, poster, **extra))


def page_of(payloads: List[Dict[str, Any]], page: int = 1) -> Dict[str, Any]:
    return {"page": page, "results": payloads, "total_pages": 500, "total_results": 10000}


class FakeTMDB:
    """Records calls; each endpoint returns the configured payload or raises the configured error."""

    def __init__(self):
        self.popular_payloads: List[Dict[str, Any]] = [movie_payload(i) for i in range(1, 6)]
        self.search_payloads: List[Dict[str, Any]] = []
        self.discover_payloads: List[Dict[str, Any]] = []
        self.details: Dict[int, Dict[str, Any]] = {}
        self.providers: Dict[int, Dict[str, Any]] = {}
        self.fail_popular: Optional[Exception] = None
        self.fail_discover: Optional[Exception] = None
        self.calls: List[tuple] = []

    def search_movies(self, query, page=1):
        self.calls.append(("search", query, page))
        return page_of(self.search_payloads, page)

    def get_popular_movies(self, page=1, region="US"):
        self.calls.append(("popular", page, region))
        if self.fail_popular is not None:
            raise self.fail_popular
        return page_of(self.popular_payloads, page)

    def discover_movies(self, page=1, region="US", with_genres=None):
        self.calls.append(("discover", page, region, list(with_genres) if with_genres else None))
        if self.fail_discover is not None:
            raise self.fail_discover
        return page_of(self.discover_payloads, page)

    def get_movie_details(self, movie_id):
        self.calls.append(("details", movie_id))
        return self.details.get(movie_id)

    def get_watch_providers(self, movie_id):
        self.calls.append(("providers", movie_id))
        return self.providers.get(movie_id, {"id": movie_id, "results": {}})

    def close(self):
        pass

    def called(self, name: str) -> List[tuple]:
        return [c for c in self.calls if c[0] == name]


@pytest.fixture
def fake_tmdb():
    return FakeTMDB()


@pytest.fixture
def settings(tmp_path):
    """Settings isolated from the developer's environment and .env file"""
    return Settings(
        _env_file=None,
        data_root=tmp_path,
        store_dir=tmp_path / "store",
        client_state_dir=tmp_path / "client",
        tmdb=TMDBSettings(_env_file=None, api_key="test-key", api_base_url="https://tmdb.test/3"),
        random_seed=7,
    )


@pytest.fixture
def connection_error():
    return requests.ConnectionError("connection refused")


class FakeResponse:
    """Just enough of requests.Response for the HTTP clients"""

    def __init__(self, status_code: int = 200, body: Any = None, url: str = "https://tmdb.test/3/x?api_key=secret"):
        self.status_code = status_code
        self._body = body
        self.url = url
        self.content = b"" if body is None else json.dumps(body).encode("utf-8")
        self.text = self.content.decode("utf-8")

    def json(self):
        if self._body is None:
            raise ValueError("No JSON body")
        return self._body

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)


class FakeSession:
    """Queue of canned responses (or exceptions); records every request made"""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests: List[Dict[str, Any]] = []
        self.headers: Dict[str, str] = {}
        self.closed = False

    def _next(self, record):
        self.requests.append(record)
        result = self.responses.pop(0)
        if isinstance(result, Exception):
            raise result
        return result

    def get(self, url, params=None, **kwargs):
        return self._next({"method": "GET", "url": url, "params": params, **kwargs})

    def request(self, method, url, **kwargs):
        return self._next({"method": method, "url": url, **kwargs})

    def close(self):
        self.closed = True
