"""
Signal API Schemas - Like / dismiss / watchlist events sent as cards are swiped
"""

from typing import List, Optional
from datetime import datetime
from pydantic import Field

from moviedrop.features.signal_schema import SignalAction
from api.schemas import CamelModel


class SignalRequest(CamelModel):
    """
    One user action on a movie card.

    Re-sending the same (user, movie, action) refreshes the timestamp
    instead of creating a duplicate.
    """

    user_id: Optional[str] = Field(None, description="User id (None for anonymous sessions)")
    movie_id: int = Field(..., description="TMDB movie id")
    action: SignalAction = Field(..., description="like, dismiss or watchlist")
    timestamp: Optional[datetime] = Field(None, description="When the action happened (defaults to now)")
    genre_ids: Optional[List[int]] = Field(None, description="Genres of the movie, used to learn preferences")


class SignalResponse(CamelModel):
    success: bool = Field(..., description="Signal recorded")
    created: bool = Field(..., description="False when an existing signal was refreshed")
