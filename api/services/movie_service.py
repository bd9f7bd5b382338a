"""
Movie Service - TMDB pass-through endpoints reshaped for the mobile client

Search, popular (with randomized paging and exclusion), details and the
seeded discover sampler. Upstream transport failures surface as UpstreamError.
"""

import logging
from typing import Any, Dict, List, Optional

import numpy as np
from requests.exceptions import RequestException

from moviedrop.adapters.tmdb.tmdb import TMDB_API
from moviedrop.errors import UpstreamError
from moviedrop.features.movie_schema import Movie, results_of
from moviedrop.feed.filters import filter_results, has_usable_poster, sort_by_popularity
from moviedrop.feed.sampler import FeedRequest, resolve_page, seeded_discover_page
from moviedrop.feed.shuffle import shuffle_feed

from api.schemas.movies import DiscoverResponse, MovieListResponse

logger = logging.getLogger(__name__)

DISCOVER_MAX_COUNT = 20
DISCOVER_DEFAULT_COUNT = 12


def call_upstream(description: str, fn, *args, **kwargs) -> Any:
    try:
        return fn(*args, **kwargs)
    except RequestException as e:
        status = getattr(getattr(e, "response", None), "status_code", None)
        raise UpstreamError(f"TMDB {description} failed: {e}", status_code=status) from e
    except ValueError as e:
        raise UpstreamError(f"TMDB {description} returned invalid JSON: {e}") from e


def _paging(response: Dict[str, Any], key: str) -> Optional[int]:
    value = response.get(key) if isinstance(response, dict) else None
    return value if isinstance(value, int) else None


def search_movies(tmdb: TMDB_API, query: str, page: int = 1, sort: str = "popularity") -> MovieListResponse:
    """
    Search by title.

    Entries without a usable poster are dropped. `sort="popularity"` orders
    the page by popularity (the mobile search screen), `sort="none"` keeps
    TMDB's relevance order.
    """
    query = query.strip()
    if not query:
        raise ValueError("Missing query parameter")
    if sort not in ("popularity", "none"):
        raise ValueError("sort must be 'popularity' or 'none'")

    response = call_upstream("search", tmdb.search_movies, query, page=page)
    movies = filter_results(results_of(response))
    if sort == "popularity":
        movies = sort_by_popularity(movies)

    logger.info(f"Search '{query}' page {page}: {len(movies)} movies with posters")
    return MovieListResponse(
        page=_paging(response, "page") or page,
        results=movies,
        total_pages=_paging(response, "total_pages"),
        total_results=_paging(response, "total_results"),
    )


def popular_movies(tmdb: TMDB_API,
                   request: FeedRequest,
                   rng: Optional[np.random.RandomState] = None) -> MovieListResponse:
    """
    One page of popular movies.

    Randomized requests sample the page from their salt and shuffle the
    results; excluded ids are dropped in both modes. Poster filtering is left
    to the feed assembler so this stays a faithful page view.
    """
    page = resolve_page(request)
    response = call_upstream(f"popular page {page}", tmdb.get_popular_movies, page=page, region=request.region)

    excluded = set(request.exclude_ids)
    movies = [m for m in results_of(response) if m.id not in excluded]
    if request.randomize and len(movies) > 1:
        movies = shuffle_feed(movies, rng=rng)

    logger.info(f"Popular page {page} ({request.region}): {len(movies)} movies, {len(excluded)} excluded ids")
    return MovieListResponse(
        page=page,
        results=movies,
        total_pages=_paging(response, "total_pages"),
        total_results=_paging(response, "total_results"),
    )


def movie_details(tmdb: TMDB_API, movie_id: int) -> Optional[Dict[str, Any]]:
    """Full TMDB details passed through unchanged; None when TMDB has no such movie"""
    return call_upstream(f"details for {movie_id}", tmdb.get_movie_details, movie_id)


def discover_sample(tmdb: TMDB_API,
                    count: int = DISCOVER_DEFAULT_COUNT,
                    seed: Optional[str] = None,
                    region: str = "US",
                    rng: Optional[np.random.RandomState] = None) -> DiscoverResponse:
    """
    Sample up to `count` unique movies (clamped to 1-20) from a discover page.

    The page comes from the seed (1-50) or is random without one.
    """
    rng = rng or np.random.RandomState()
    count = max(1, min(int(count), DISCOVER_MAX_COUNT))
    page = seeded_discover_page(seed, rng=rng)

    response = call_upstream(f"discover page {page}", tmdb.discover_movies, page=page, region=region)
    unique: Dict[int, Movie] = {}
    for movie in results_of(response):
        unique.setdefault(movie.id, movie)
    candidates: List[Movie] = [m for m in unique.values() if has_usable_poster(m)]

    if len(candidates) > count:
        picked_idx = rng.choice(len(candidates), size=count, replace=False)
        picked = [candidates[int(i)] for i in picked_idx]
    else:
        picked = shuffle_feed(candidates, rng=rng)

    return DiscoverResponse(page=page, count=len(picked), results=picked)
