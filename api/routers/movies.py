"""
Movies Router - TMDB-backed search, popular, details and discover endpoints
"""

import logging
from typing import Any, Dict, Optional

import numpy as np
from fastapi import APIRouter, Depends, HTTPException, Query, Response

from moviedrop.adapters.tmdb.tmdb import TMDB_API
from moviedrop.feed.filters import parse_exclude_param
from moviedrop.feed.sampler import FeedRequest, make_salt, parse_leading_int
from moviedrop.settings import Settings

from api.dependencies import get_rng, get_settings_dep, get_tmdb
from api.schemas.movies import DiscoverResponse, MovieListResponse
from api.services import movie_service

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/movies/search", response_model=MovieListResponse)
def search_movies(
    response: Response,
    query: str = Query("", description="Title to search for"),
    page: int = Query(1, ge=1, le=500, description="Upstream page"),
    sort: str = Query("popularity", description="popularity (default) or none"),
    tmdb: TMDB_API = Depends(get_tmdb),
) -> MovieListResponse:
    """
    Search movies by title. Poster-less results are dropped.
    """
    if not query.strip():
        raise HTTPException(status_code=400, detail="Missing query parameter")
    try:
        result = movie_service.search_movies(tmdb, query, page=page, sort=sort)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    response.headers["Cache-Control"] = "s-maxage=600, stale-while-revalidate=1200"
    return result


@router.get("/movies/popular", response_model=MovieListResponse)
def popular_movies(
    response: Response,
    page: int = Query(1, ge=1, description="Explicit page (ignored when randomize=true)"),
    region: Optional[str] = Query(None, description="ISO 3166-1 region code"),
    randomize: bool = Query(False, description="Sample the page from a salt and shuffle results"),
    exclude: Optional[str] = Query(None, description="Comma-separated movie ids to leave out"),
    t: Optional[str] = Query(None, description="Client timestamp, part of the salt"),
    r: Optional[str] = Query(None, description="Client randomness, part of the salt"),
    tmdb: TMDB_API = Depends(get_tmdb),
    cfg: Settings = Depends(get_settings_dep),
    rng: np.random.RandomState = Depends(get_rng),
) -> MovieListResponse:
    """
    One page of popular movies, optionally randomized.
    """
    request = FeedRequest(
        randomize=randomize,
        salt=make_salt(t, r) if randomize else None,
        exclude_ids=parse_exclude_param(exclude),
        page=page,
        region=(region or cfg.region_default).upper(),
    )
    result = movie_service.popular_movies(tmdb, request, rng=rng)
    response.headers["Cache-Control"] = "s-maxage=300, stale-while-revalidate=600"
    return result


@router.get("/movies/{movie_id}")
def movie_details(
    movie_id: int,
    response: Response,
    tmdb: TMDB_API = Depends(get_tmdb),
) -> Dict[str, Any]:
    """
    Full TMDB movie details, passed through.
    """
    details = movie_service.movie_details(tmdb, movie_id)
    if details is None:
        raise HTTPException(status_code=404, detail=f"Movie {movie_id} not found")
    response.headers["Cache-Control"] = "s-maxage=1800, stale-while-revalidate=3600"
    return details


@router.get("/discover", response_model=DiscoverResponse)
def discover(
    response: Response,
    count: Optional[str] = Query(None, description="Number of movies (clamped to 1-20, default 12)"),
    seed: Optional[str] = Query(None, description="Pins the sampled page (1-50)"),
    region: Optional[str] = Query(None, description="ISO 3166-1 region code"),
    tmdb: TMDB_API = Depends(get_tmdb),
    cfg: Settings = Depends(get_settings_dep),
    rng: np.random.RandomState = Depends(get_rng),
) -> DiscoverResponse:
    """
    Random sample of unique movies from a popularity-sorted discover page.

    `count` and `seed` are read leniently: "5abc" means 5, and a missing,
    zero or non-numeric count means the default.
    """
    result = movie_service.discover_sample(
        tmdb,
        count=parse_leading_int(count) or movie_service.DISCOVER_DEFAULT_COUNT,
        seed=seed,
        region=(region or cfg.region_default).upper(),
        rng=rng,
    )
    response.headers["Cache-Control"] = "s-maxage=120, stale-while-revalidate=600"
    return result
