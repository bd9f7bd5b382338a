"""
HTTP client for the MovieDrop API, used by the CLI and any Python front end.

It doubles as both feed sources of the fallback chain, so a FeedAssembler
can run client-side against a deployed API.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from moviedrop.errors import InsufficientSignalsError, UpstreamError
from moviedrop.features.movie_schema import Movie, parse_movies, results_of
from moviedrop.features.signal_schema import SignalAction
from moviedrop.feed.assembler import PersonalizedSource, PopularPage, PopularSource
from moviedrop.feed.sampler import FeedRequest, resolve_page
from moviedrop.settings import Settings, get_settings

logger = logging.getLogger(__name__)


class MovieDropAPIClient(PersonalizedSource, PopularSource):
    def __init__(self,
                 base_url: Optional[str] = None,
                 settings: Optional[Settings] = None,
                 session: Optional[requests.Session] = None,
                 total_retries: int = 1):
        """
        Args:
            base_url: API root including the version prefix (e.g. https://host/api/v1)
            settings: defaults for base_url, timeout, region and feed size
            session: pre-built session (tests)
        """
        cfg = settings or get_settings()
        self.base_url = (base_url or cfg.api_base_url).rstrip("/")
        self.timeout = cfg.request_timeout
        self.region = cfg.region_default
        self.min_signals = cfg.min_signals

        if session is None:
            session = requests.Session()
            retry_strategy = Retry(
                total=total_retries,
                backoff_factor=0.5,
                status_forcelist=(502, 503, 504),
                allowed_methods=frozenset(["GET"]),
                raise_on_status=False,
            )
            adapter = HTTPAdapter(max_retries=retry_strategy)
            session.mount("https://", adapter)
            session.mount("http://", adapter)
        self.session = session
        self.session.headers.update({"Accept": "application/json"})

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        try:
            resp = self.session.request(method, self._url(path), timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            # Timeouts land here too and are treated like any other network failure
            raise UpstreamError(f"{method} {path} failed: {e}") from e
        if resp.status_code >= 400:
            raise UpstreamError(f"{method} {path} returned HTTP {resp.status_code}", status_code=resp.status_code)
        return resp

    @staticmethod
    def _json(resp: requests.Response) -> Any:
        if not resp.content:
            return {}
        try:
            return resp.json()
        except ValueError:
            logger.warning(f"Ignoring malformed JSON body from {resp.url}")
            return {}

    # ---- feed sources ----

    def recommend(self, user_id: str, limit: int) -> List[Movie]:
        """
        Raises:
            InsufficientSignalsError: the API answered 204
            UpstreamError: network failure, timeout or error status
        """
        resp = self._request(
            "GET", "recommend",
            params={"userId": user_id, "region": self.region, "count": limit},
        )
        if resp.status_code == 204:
            raise InsufficientSignalsError(0, self.min_signals, reason="API reported insufficient signals")
        body = self._json(resp)
        if not isinstance(body, dict):
            return []
        return parse_movies(body.get("recommendations") or [])

    def popular(self, request: FeedRequest) -> PopularPage:
        params: Dict[str, Any] = {"region": request.region or self.region}
        if request.randomize:
            # The salt is resolved here so the page is known before the call
            params["page"] = resolve_page(request)
        elif request.page is not None:
            params["page"] = request.page
        if request.exclude_ids:
            params["exclude"] = ",".join(str(i) for i in request.exclude_ids)

        body = self._json(self._request("GET", "movies/popular", params=params))
        page = body.get("page") if isinstance(body, dict) else None
        return PopularPage(movies=results_of(body), page=page if isinstance(page, int) else None)

    # ---- other endpoints ----

    def search(self, query: str) -> List[Movie]:
        return results_of(self._json(self._request("GET", "movies/search", params={"query": query})))

    def send_signal(self,
                    user_id: Optional[str],
                    movie_id: int,
                    action: SignalAction,
                    genre_ids: Optional[List[int]] = None) -> None:
        payload = {
            "userId": user_id,
            "movieId": movie_id,
            "action": SignalAction(action).value,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "genreIds": genre_ids,
        }
        self._request("POST", "signals", json=payload)
        logger.debug(f"Signal sent: {payload['action']} {movie_id}")

    def add_to_watchlist(self, user_id: str, movie: Movie) -> Dict[str, Any]:
        payload = {
            "userId": user_id,
            "movieId": movie.id,
            "movieTitle": movie.title,
            "moviePoster": movie.poster_path,
        }
        return self._json(self._request("POST", "movies/watchlist", json=payload))

    def get_watchlist(self, user_id: str) -> List[Dict[str, Any]]:
        body = self._json(self._request("GET", f"movies/watchlist/{user_id}"))
        return body.get("items", []) if isinstance(body, dict) else []

    def remove_from_watchlist(self, user_id: str, movie_id: int) -> None:
        self._request("DELETE", f"movies/watchlist/{user_id}/{movie_id}")

    def streaming(self, movie_id: int, region: Optional[str] = None) -> Dict[str, Any]:
        return self._json(self._request("GET", f"streaming/{movie_id}", params={"region": region or self.region}))

    def close(self) -> None:
        self.session.close()
