"""
Recommendation API Schemas - Personalized recommendation responses
"""

from typing import List
from pydantic import Field

from moviedrop.features.movie_schema import Movie
from api.schemas import CamelModel


class RecommendationResponse(CamelModel):
    """Movies in the user's preferred genres, most popular first"""

    recommendations: List[Movie] = Field(..., description="Recommended movies")
    preferred_genres: List[int] = Field(..., description="TMDB genre ids the user likes most (max 5)")
    signal_count: int = Field(..., description="Number of signals the user has recorded")
