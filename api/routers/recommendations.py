"""
Recommendations Router - Personalized recommendations from preference signals
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from moviedrop.adapters.tmdb.tmdb import TMDB_API
from moviedrop.errors import InsufficientSignalsError
from moviedrop.settings import Settings

from api.dependencies import get_repository, get_settings_dep, get_tmdb
from api.repositories.base import BaseRepository
from api.schemas.recommendations import RecommendationResponse
from api.services import recommendation_service

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get(
    "/recommend",
    response_model=RecommendationResponse,
    responses={204: {"description": "Not enough preference signals yet"}},
)
def recommend(
    user_id: Optional[str] = Query(None, alias="userId", description="User to recommend for"),
    region: Optional[str] = Query(None, description="ISO 3166-1 region code"),
    count: int = Query(12, description="Number of recommendations (clamped to 1-20)"),
    repo: BaseRepository = Depends(get_repository),
    tmdb: TMDB_API = Depends(get_tmdb),
    cfg: Settings = Depends(get_settings_dep),
):
    """
    Popular movies in the user's most-liked genres.

    Answers 204 (no body) while the user has fewer than the minimum number of
    signals or has not liked anything yet; clients fall back to popular movies.
    """
    if not user_id or not user_id.strip():
        raise HTTPException(status_code=400, detail="userId is required")

    try:
        return recommendation_service.recommend_for_user(
            repo,
            tmdb,
            user_id.strip(),
            region=(region or cfg.region_default).upper(),
            count=count,
            min_signals=cfg.min_signals,
        )
    except InsufficientSignalsError as e:
        logger.info(f"No recommendations for {user_id}: {e}")
        return Response(status_code=204, headers={"X-Reason": "INSUFFICIENT_SIGNALS"})
