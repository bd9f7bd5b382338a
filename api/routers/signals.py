"""
Signals Router - Record like / dismiss / watchlist events
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException

from api.dependencies import get_repository
from api.repositories.base import BaseRepository
from api.schemas.signals import SignalRequest, SignalResponse

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/signals", response_model=SignalResponse)
def record_signal(
    request: SignalRequest,
    repo: BaseRepository = Depends(get_repository),
) -> SignalResponse:
    """
    Record one preference signal. Idempotent per (userId, movieId, action):
    a repeat only refreshes the timestamp.
    """
    signal_data = {
        "user_id": request.user_id or None,
        "movie_id": request.movie_id,
        "action": request.action.value,
        "timestamp": (request.timestamp or datetime.now(timezone.utc)).isoformat(),
        "genre_ids": request.genre_ids,
    }

    try:
        created = repo.save_signal(signal_data)
    except OSError as e:
        logger.error(f"Failed to save signal: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to record signal")

    return SignalResponse(success=True, created=created)
