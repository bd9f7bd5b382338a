"""
Unit tests for the MovieDrop HTTP client, alone and as feed sources.
"""
import pytest
import requests

from conftest import FakeResponse, FakeSession, movie_payload

from moviedrop.api_client import MovieDropAPIClient
from moviedrop.errors import InsufficientSignalsError, UpstreamError
from moviedrop.features.signal_schema import SignalAction
from moviedrop.feed.assembler import FeedAssembler
from moviedrop.feed.sampler import FeedRequest
from moviedrop.feed.seen_set import InMemoryStorage, SeenSetStore
from moviedrop.utils.reproducibility import get_random_state

BASE = "http://api.test/api/v1"


def _client(settings, *responses):
    session = FakeSession(*responses)
    return MovieDropAPIClient(base_url=BASE + "/", settings=settings, session=session), session


def test_recommend_204_is_insufficient_signals(settings):
    client, session = _client(settings, FakeResponse(status_code=204))
    with pytest.raises(InsufficientSignalsError):
        client.recommend("alice", 20)
    assert session.requests[0]["url"] == f"{BASE}/recommend"
    assert session.requests[0]["params"]["userId"] == "alice"


def test_recommend_parses_movies(settings):
    body = {"recommendations": [movie_payload(1), {"bad": True}], "preferredGenres": [28], "signalCount": 3}
    client, _ = _client(settings, FakeResponse(body=body))
    assert [m.id for m in client.recommend("alice", 20)] == [1]


def test_error_status_becomes_upstream_error(settings):
    client, _ = _client(settings, FakeResponse(status_code=503, body={"detail": "down"}))
    with pytest.raises(UpstreamError) as exc_info:
        client.search("up")
    assert exc_info.value.status_code == 503


def test_network_failure_becomes_upstream_error(settings):
    client, _ = _client(settings, requests.ConnectTimeout("timed out"))
    with pytest.raises(UpstreamError):
        client.recommend("alice", 5)


def test_popular_sends_sampled_page_and_exclusions(settings):
    client, session = _client(settings, FakeResponse(body={"page": 106, "results": [movie_payload(3)]}))
    page = client.popular(FeedRequest(randomize=True, salt="ab", exclude_ids=[1, 2], region="GB"))

    params = session.requests[0]["params"]
    assert params == {"region": "GB", "page": 106, "exclude": "1,2"}
    assert page.page == 106
    assert [m.id for m in page.movies] == [3]


def test_send_signal_posts_camel_case(settings):
    client, session = _client(settings, FakeResponse(body={"success": True, "created": True}))
    client.send_signal("alice", 550, SignalAction.LIKE, [18])

    sent = session.requests[0]
    assert sent["method"] == "POST"
    assert sent["url"] == f"{BASE}/signals"
    assert sent["json"]["movieId"] == 550
    assert sent["json"]["action"] == "like"
    assert sent["json"]["genreIds"] == [18]


def test_watchlist_calls(settings):
    client, session = _client(
        settings,
        FakeResponse(body={"userId": "alice", "items": [{"movieId": 1}], "count": 1}),
        FakeResponse(body={"success": True}),
    )
    assert client.get_watchlist("alice") == [{"movieId": 1}]
    client.remove_from_watchlist("alice", 1)
    assert session.requests[1]["method"] == "DELETE"
    assert session.requests[1]["url"] == f"{BASE}/movies/watchlist/alice/1"


def test_client_drives_fallback_chain(settings):
    """204 from /recommend, then a popular page with one seen id."""
    client, session = _client(
        settings,
        FakeResponse(status_code=204),
        FakeResponse(body={"page": 4, "results": [movie_payload(1), movie_payload(2)]}),
    )
    seen = SeenSetStore(InMemoryStorage()).load_on_startup()
    seen.add(1)
    result = FeedAssembler(client, client, seen, rng=get_random_state(0)).assemble(user_id="alice", salt="x")

    assert result.source == "popular"
    assert [m.id for m in result.movies] == [2]
    assert [r["url"] for r in session.requests] == [f"{BASE}/recommend", f"{BASE}/movies/popular"]
