"""
Streaming Router - Where a movie can be watched
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from moviedrop.adapters.tmdb.tmdb import TMDB_API
from moviedrop.settings import Settings

from api.dependencies import get_settings_dep, get_tmdb
from api.schemas.streaming import StreamingResponse
from api.services import streaming_service

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/streaming/{movie_id}", response_model=StreamingResponse)
def streaming_availability(
    movie_id: int,
    response: Response,
    region: Optional[str] = Query(None, description="ISO 3166-1 region code"),
    tmdb: TMDB_API = Depends(get_tmdb),
    cfg: Settings = Depends(get_settings_dep),
) -> StreamingResponse:
    """
    Subscription, rent and buy offers on known platforms, with search links.
    """
    result = streaming_service.get_availability(
        tmdb, movie_id, region=(region or cfg.region_default).upper(), image_base=cfg.tmdb_image_base
    )
    if result is None:
        raise HTTPException(status_code=404, detail=f"Movie {movie_id} not found")
    response.headers["Cache-Control"] = "s-maxage=600, stale-while-revalidate=1800"
    return result
