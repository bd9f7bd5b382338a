"""
Streaming platform lookup table.

TMDB reports providers by free-form name ("Amazon Prime Video", "Max",
"Disney Plus", ...). We map normalized names to a fixed set of platforms
and explicitly ignore anything we do not know how to link to.
"""

import logging
import re
from enum import Enum
from typing import Dict, Optional
from urllib.parse import quote

logger = logging.getLogger(__name__)


class StreamingPlatform(str, Enum):
    NETFLIX = "netflix"
    PRIME = "prime"
    HULU = "hulu"
    DISNEY = "disney"
    HBO = "hbo"
    APPLE = "apple"
    YOUTUBE = "youtube"
    PARAMOUNT = "paramount"
    PEACOCK = "peacock"

    @property
    def display_name(self) -> str:
        return PLATFORM_DISPLAY_NAMES[self]

    def search_url(self, title: str) -> str:
        """Platform search page for a title (deep links need private catalogs)."""
        return f"{PLATFORM_SEARCH_URLS[self]}{quote(title, safe='')}"


PLATFORM_DISPLAY_NAMES: Dict[StreamingPlatform, str] = {
    StreamingPlatform.NETFLIX: "Netflix",
    StreamingPlatform.PRIME: "Prime Video",
    StreamingPlatform.HULU: "Hulu",
    StreamingPlatform.DISNEY: "Disney+",
    StreamingPlatform.HBO: "Max",
    StreamingPlatform.APPLE: "Apple TV",
    StreamingPlatform.YOUTUBE: "YouTube Movies",
    StreamingPlatform.PARAMOUNT: "Paramount+",
    StreamingPlatform.PEACOCK: "Peacock",
}

PLATFORM_SEARCH_URLS: Dict[StreamingPlatform, str] = {
    StreamingPlatform.NETFLIX: "https://www.netflix.com/search?q=",
    StreamingPlatform.PRIME: "https://www.amazon.com/s?i=movies-tv&k=",
    StreamingPlatform.HULU: "https://www.hulu.com/search?q=",
    StreamingPlatform.DISNEY: "https://www.disneyplus.com/search?q=",
    StreamingPlatform.HBO: "https://play.max.com/search?q=",
    StreamingPlatform.APPLE: "https://tv.apple.com/search?term=",
    StreamingPlatform.YOUTUBE: "https://www.youtube.com/results?search_query=",
    StreamingPlatform.PARAMOUNT: "https://www.paramountplus.com/search?q=",
    StreamingPlatform.PEACOCK: "https://www.peacocktv.com/search?q=",
}

# Normalized upstream provider name -> platform
PROVIDER_NAME_TO_PLATFORM: Dict[str, StreamingPlatform] = {
    "netflix": StreamingPlatform.NETFLIX,
    "netflix basic with ads": StreamingPlatform.NETFLIX,
    "netflix standard with ads": StreamingPlatform.NETFLIX,
    "amazon prime video": StreamingPlatform.PRIME,
    "amazon prime video with ads": StreamingPlatform.PRIME,
    "prime video": StreamingPlatform.PRIME,
    "amazon video": StreamingPlatform.PRIME,
    "hulu": StreamingPlatform.HULU,
    "disney plus": StreamingPlatform.DISNEY,
    "max": StreamingPlatform.HBO,
    "max amazon channel": StreamingPlatform.HBO,
    "hbo max": StreamingPlatform.HBO,
    "apple tv": StreamingPlatform.APPLE,
    "apple tv plus": StreamingPlatform.APPLE,
    "apple itunes": StreamingPlatform.APPLE,
    "youtube": StreamingPlatform.YOUTUBE,
    "youtube premium": StreamingPlatform.YOUTUBE,
    "paramount plus": StreamingPlatform.PARAMOUNT,
    "paramount plus apple tv channel": StreamingPlatform.PARAMOUNT,
    "paramount plus essential": StreamingPlatform.PARAMOUNT,
    "peacock": StreamingPlatform.PEACOCK,
    "peacock premium": StreamingPlatform.PEACOCK,
    "peacock premium plus": StreamingPlatform.PEACOCK,
}


def normalize_provider_name(name: str) -> str:
    """'Disney+' -> 'disney plus', 'Paramount+ Apple TV Channel ' -> 'paramount plus apple tv channel'"""
    name = name.lower().replace("+", " plus ")
    name = re.sub(r"[^a-z0-9 ]+", " ", name)
    return re.sub(r"\s+", " ", name).strip()


def platform_for_provider(name: Optional[str]) -> Optional[StreamingPlatform]:
    """Platform for an upstream provider name; None for unknown providers."""
    if not name:
        return None
    platform = PROVIDER_NAME_TO_PLATFORM.get(normalize_provider_name(name))
    if platform is None:
        logger.debug(f"Ignoring provider without a known platform: {name!r}")
    return platform
