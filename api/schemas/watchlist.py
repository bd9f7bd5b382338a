"""
Watchlist API Schemas
"""

from typing import List, Optional
from pydantic import Field

from api.schemas import CamelModel


class WatchlistAddRequest(CamelModel):
    user_id: str = Field(..., min_length=1, description="Owner of the watchlist")
    movie_id: int = Field(..., description="TMDB movie id")
    movie_title: str = Field(..., description="Title shown in the watchlist")
    movie_poster: Optional[str] = Field(None, description="Poster path fragment")


class WatchlistItem(CamelModel):
    user_id: str
    movie_id: int
    movie_title: str
    movie_poster: Optional[str] = None
    added_at: Optional[str] = Field(None, description="ISO timestamp")


class WatchlistResponse(CamelModel):
    user_id: str
    items: List[WatchlistItem]
    count: int
