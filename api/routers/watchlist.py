"""
Watchlist Router - Per-user watchlist CRUD
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from api.dependencies import get_repository
from api.repositories.base import BaseRepository
from api.schemas.watchlist import WatchlistAddRequest, WatchlistItem, WatchlistResponse

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/movies/watchlist", response_model=WatchlistItem)
def add_to_watchlist(
    request: WatchlistAddRequest,
    repo: BaseRepository = Depends(get_repository),
) -> WatchlistItem:
    """Add a movie to a user's watchlist (re-adding refreshes it)."""
    try:
        stored = repo.add_watchlist_item(request.model_dump())
    except OSError as e:
        logger.error(f"Failed to save watchlist item: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to save watchlist item")
    return WatchlistItem(**stored)


@router.get("/movies/watchlist/{user_id}", response_model=WatchlistResponse)
def get_watchlist(
    user_id: str,
    repo: BaseRepository = Depends(get_repository),
) -> WatchlistResponse:
    """A user's watchlist, most recently added first."""
    items = [WatchlistItem(**row) for row in repo.get_watchlist(user_id)]
    return WatchlistResponse(user_id=user_id, items=items, count=len(items))


@router.delete("/movies/watchlist/{user_id}/{movie_id}")
def remove_from_watchlist(
    user_id: str,
    movie_id: int,
    repo: BaseRepository = Depends(get_repository),
):
    """Remove a movie from a user's watchlist."""
    if not repo.remove_watchlist_item(user_id, movie_id):
        raise HTTPException(status_code=404, detail=f"Movie {movie_id} is not on {user_id}'s watchlist")
    return {"success": True}
