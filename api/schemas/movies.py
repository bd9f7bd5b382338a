"""
Movie API Schemas - Response models for search, popular, discover and feed endpoints
"""

from typing import List, Optional
from datetime import datetime
from pydantic import Field

from moviedrop.features.movie_schema import Movie
from api.schemas import CamelModel


class MovieListResponse(CamelModel):
    """A page of movies in TMDB's paging shape"""

    page: int = Field(..., description="Upstream page the results came from")
    results: List[Movie] = Field(..., description="Movies after filtering")
    total_pages: Optional[int] = Field(None, description="Upstream total pages")
    total_results: Optional[int] = Field(None, description="Upstream total results")


class DiscoverResponse(CamelModel):
    """Random sample of unique movies from a seeded discover page"""

    page: int = Field(..., description="Discover page sampled (1-50)")
    count: int = Field(..., description="Number of movies returned")
    results: List[Movie] = Field(..., description="Sampled movies")


class FeedResponse(CamelModel):
    """An assembled discovery feed"""

    source: str = Field(..., description="Which step of the fallback chain served the feed (personalized, popular)")
    page: Optional[int] = Field(None, description="Popular page sampled, when the popular path served the feed")
    results: List[Movie] = Field(..., description="Shuffled, filtered movies")
    personalized_error: Optional[str] = Field(None, description="Why personalization was skipped, if it was")
    timestamp: datetime = Field(
        default_factory=datetime.now,
        description="When the feed was assembled"
    )
