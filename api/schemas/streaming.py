"""
Streaming API Schemas - Where a movie can be watched in a region

Kept snake_case on the wire: the mobile client decodes these keys as-is.
"""

from typing import Dict, List, Optional
from pydantic import BaseModel, Field


class ProviderOfferOut(BaseModel):
    provider_id: int
    name: str
    kind: str = Field(..., description="flatrate, rent, buy or rent/buy")
    platform: str = Field(..., description="Known platform key (netflix, prime, ...)")
    url: str = Field(..., description="Platform search link for the title")
    logo_path: Optional[str] = None
    display_priority: Optional[int] = None


class StreamingResponse(BaseModel):
    id: int
    title: str
    year: Optional[str] = None
    poster_url: Optional[str] = None
    region: str
    link: str = Field(..., description="TMDB/JustWatch page for the region")
    primary: Optional[ProviderOfferOut] = Field(None, description="Best offer: first subscription, else first purchase")
    providers: List[ProviderOfferOut]
    counts: Dict[str, int] = Field(..., description="Offers per kind (flatrate, rent, buy)")
