"""
Streaming Service - TMDB watch providers reshaped into linkable offers
"""

import logging
from typing import Optional

from moviedrop.adapters.tmdb.tmdb import TMDB_API
from moviedrop.streaming.availability import build_availability

from api.schemas.streaming import StreamingResponse
from api.services.movie_service import call_upstream

logger = logging.getLogger(__name__)


def get_availability(tmdb: TMDB_API, movie_id: int, region: str, image_base: str) -> Optional[StreamingResponse]:
    """
    Returns None when TMDB does not know the movie.

    Raises:
        UpstreamError: details or providers request failed
    """
    details = call_upstream(f"details for {movie_id}", tmdb.get_movie_details, movie_id)
    if details is None:
        return None
    providers = call_upstream(f"providers for {movie_id}", tmdb.get_watch_providers, movie_id)
    body = build_availability(movie_id, details, providers, region=region, image_base=image_base)
    logger.info(f"Streaming for {movie_id} in {region}: {len(body['providers'])} offers")
    return StreamingResponse(**body)
