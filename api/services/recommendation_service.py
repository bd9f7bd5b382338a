"""
Recommendation Service - Personalized recommendations from preference signals

Derives the user's favourite genres from their 'like' signals and asks TMDB
discover for popular movies in those genres, skipping anything the user has
already liked or dismissed.
"""

import logging
from typing import Any, Dict, List, Optional

import pandas as pd
from requests.exceptions import RequestException

from moviedrop.adapters.tmdb.tmdb import TMDB_API
from moviedrop.errors import InsufficientSignalsError, UpstreamError
from moviedrop.features.movie_schema import Movie, results_of
from moviedrop.features.signal_schema import REJECTING_OR_CONSUMED, SignalAction
from moviedrop.feed.assembler import PersonalizedSource
from moviedrop.feed.filters import sort_by_popularity

from api.repositories.base import BaseRepository
from api.schemas.recommendations import RecommendationResponse

logger = logging.getLogger(__name__)

TOP_GENRES = 5
MAX_RECOMMENDATIONS = 20


def preferred_genres(signals: List[Dict[str, Any]], top_n: int = TOP_GENRES) -> List[int]:
    """
    Genre ids ranked by how many liked movies carry them.

    Ties go to the genre that shows up first in `signals`; with the
    repository's newest-first order that is the most recently liked one.
    """
    if not signals:
        return []

    df = pd.DataFrame(signals)
    if "genre_ids" not in df.columns or "action" not in df.columns:
        return []

    likes = df[df["action"] == SignalAction.LIKE.value]
    genres = likes["genre_ids"].explode().dropna()
    if genres.empty:
        return []

    genres = genres.astype(int)
    ranking = (
        pd.DataFrame({"genre_id": genres.values, "order": range(len(genres))})
        .groupby("genre_id")
        .agg(score=("order", "size"), first_seen=("order", "min"))
        .sort_values(["score", "first_seen"], ascending=[False, True])
    )
    return [int(g) for g in ranking.index[:top_n]]


def excluded_movie_ids(signals: List[Dict[str, Any]]) -> set[int]:
    """Movies the user already liked or dismissed"""
    rejected = {a.value for a in REJECTING_OR_CONSUMED}
    return {int(s["movie_id"]) for s in signals if s.get("action") in rejected}


def recommend_for_user(repo: BaseRepository,
                       tmdb: TMDB_API,
                       user_id: str,
                       region: str = "US",
                       count: int = MAX_RECOMMENDATIONS,
                       min_signals: int = 3) -> RecommendationResponse:
    """
    Personalized recommendations.

    Raises:
        InsufficientSignalsError: fewer than `min_signals` signals, or no liked genres yet
        UpstreamError: TMDB discover failed
    """
    signals = repo.get_signals(user_id)
    signal_count = len(signals)
    if signal_count < min_signals:
        raise InsufficientSignalsError(signal_count, min_signals)

    genres = preferred_genres(signals)
    if not genres:
        raise InsufficientSignalsError(signal_count, min_signals, reason="No genre preferences found")

    try:
        response = tmdb.discover_movies(page=1, region=region, with_genres=genres)
    except (RequestException, ValueError) as e:
        raise UpstreamError(f"TMDB discover for genres {genres} failed: {e}") from e

    excluded = excluded_movie_ids(signals)
    movies = [m for m in results_of(response) if m.id not in excluded]
    movies = sort_by_popularity(movies)[:max(1, min(count, MAX_RECOMMENDATIONS))]

    logger.info(f"Recommending {len(movies)} movies to {user_id} (genres={genres}, signals={signal_count})")
    return RecommendationResponse(
        recommendations=movies,
        preferred_genres=genres,
        signal_count=signal_count,
    )


class RepositoryPersonalizedSource(PersonalizedSource):
    """Personalized step of the feed chain, served in-process from the signal store"""

    def __init__(self, repo: BaseRepository, tmdb: TMDB_API, region: str = "US", min_signals: int = 3):
        self.repo = repo
        self.tmdb = tmdb
        self.region = region
        self.min_signals = min_signals

    def recommend(self, user_id: str, limit: int) -> List[Movie]:
        response = recommend_for_user(
            self.repo, self.tmdb, user_id,
            region=self.region, count=limit, min_signals=self.min_signals,
        )
        return list(response.recommendations)
