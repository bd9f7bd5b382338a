"""
Feed Router - Assembled discovery feed
"""

import logging
from typing import Optional

import numpy as np
from fastapi import APIRouter, Depends, HTTPException, Query

from moviedrop.adapters.tmdb.tmdb import TMDB_API
from moviedrop.errors import FeedUnavailableError
from moviedrop.feed.filters import parse_exclude_param
from moviedrop.settings import Settings

from api.dependencies import get_repository, get_rng, get_settings_dep, get_tmdb
from api.repositories.base import BaseRepository
from api.schemas.movies import FeedResponse
from api.services import feed_service

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/feed", response_model=FeedResponse)
def get_feed(
    user_id: Optional[str] = Query(None, alias="userId", description="Signed-in user (omit for anonymous)"),
    exclude: Optional[str] = Query(None, description="Comma-separated seen movie ids"),
    previous_first_id: Optional[int] = Query(None, alias="previousFirstId", description="Lead card of the previous feed"),
    t: Optional[str] = Query(None, description="Client timestamp, part of the salt"),
    r: Optional[str] = Query(None, description="Client randomness, part of the salt"),
    region: Optional[str] = Query(None, description="ISO 3166-1 region code"),
    limit: Optional[int] = Query(None, ge=1, le=50, description="Max movies in the feed"),
    repo: BaseRepository = Depends(get_repository),
    tmdb: TMDB_API = Depends(get_tmdb),
    cfg: Settings = Depends(get_settings_dep),
    rng: np.random.RandomState = Depends(get_rng),
) -> FeedResponse:
    """
    Discovery feed: personalized recommendations when the user has enough
    signals, otherwise a randomized popular page. Seen ids never come back.

    Raises:
        HTTPException 502: both the personalized and the popular path failed
    """
    try:
        return feed_service.assemble_feed(
            repo=repo,
            tmdb=tmdb,
            user_id=(user_id or "").strip() or None,
            exclude_ids=parse_exclude_param(exclude),
            previous_first_id=previous_first_id,
            t=t,
            r=r,
            region=(region or cfg.region_default).upper(),
            limit=limit or cfg.feed_limit,
            min_signals=cfg.min_signals,
            rng=rng,
        )
    except FeedUnavailableError as e:
        logger.error(f"Feed assembly failed: {e}")
        raise HTTPException(status_code=502, detail="Failed to load movies")
