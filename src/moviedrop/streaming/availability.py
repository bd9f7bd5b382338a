"""
Streaming availability - reshapes TMDB watch/providers for one region.
"""

import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional

from moviedrop.streaming.platforms import StreamingPlatform, platform_for_provider

logger = logging.getLogger(__name__)

OFFER_KINDS = ("flatrate", "rent", "buy")


@dataclass
class ProviderOffer:
    provider_id: int
    name: str
    kind: str  # flatrate | rent | buy | rent/buy
    platform: StreamingPlatform
    url: str
    logo_path: Optional[str] = None
    display_priority: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["platform"] = self.platform.value
        return data


def _priority(offer: ProviderOffer) -> int:
    return offer.display_priority if offer.display_priority is not None else 10_000


def collect_offers(region_data: Optional[Dict[str, Any]], title: str) -> List[ProviderOffer]:
    """
    Offers for one region.

    Unknown platforms are dropped, duplicates (same provider and kind) are
    collapsed, and a provider offering both rent and buy becomes a single
    'rent/buy' offer. Subscription offers come first, each group ordered by
    TMDB's display priority.
    """
    if not isinstance(region_data, dict):
        return []

    flatrate: Dict[int, ProviderOffer] = {}
    purchase: Dict[int, ProviderOffer] = {}

    for kind in OFFER_KINDS:
        entries = region_data.get(kind) or []
        if not isinstance(entries, list):
            continue
        for entry in entries:
            if not isinstance(entry, dict) or not isinstance(entry.get("provider_id"), int):
                continue
            platform = platform_for_provider(entry.get("provider_name"))
            if platform is None:
                continue

            provider_id = entry["provider_id"]
            offer = ProviderOffer(
                provider_id=provider_id,
                name=entry.get("provider_name") or platform.display_name,
                kind=kind,
                platform=platform,
                url=platform.search_url(title),
                logo_path=entry.get("logo_path"),
                display_priority=entry.get("display_priority"),
            )

            if kind == "flatrate":
                flatrate.setdefault(provider_id, offer)
            elif provider_id in purchase:
                if purchase[provider_id].kind != kind:
                    purchase[provider_id].kind = "rent/buy"
            else:
                purchase[provider_id] = offer

    return sorted(flatrate.values(), key=_priority) + sorted(purchase.values(), key=_priority)


def count_offers(offers: List[ProviderOffer]) -> Dict[str, int]:
    counts = {"flatrate": 0, "rent": 0, "buy": 0}
    for offer in offers:
        if offer.kind == "rent/buy":
            counts["rent"] += 1
            counts["buy"] += 1
        else:
            counts[offer.kind] += 1
    return counts


def build_availability(movie_id: int,
                       details: Dict[str, Any],
                       providers: Dict[str, Any],
                       region: str,
                       image_base: str) -> Dict[str, Any]:
    """
    Response body for GET /streaming/{id}.

    Args:
        movie_id: TMDB movie id
        details: TMDB movie details (title, release_date, poster_path)
        providers: TMDB watch/providers response (all regions)
        region: ISO 3166-1 region code, upper case
        image_base: TMDB image CDN base URL
    """
    details = details if isinstance(details, dict) else {}
    title = details.get("title") or details.get("original_title") or ""
    release_date = details.get("release_date") or ""
    year = release_date[:4] if len(release_date) >= 4 else None
    poster_path = details.get("poster_path")

    results = providers.get("results") if isinstance(providers, dict) else None
    region_data = results.get(region) if isinstance(results, dict) else None
    link = None
    if isinstance(region_data, dict):
        link = region_data.get("link")
    if not link:
        link = f"https://www.themoviedb.org/movie/{movie_id}/watch?locale={region}"

    offers = collect_offers(region_data, title)
    primary = offers[0] if offers else None
    logger.debug(f"Movie {movie_id} in {region}: {len(offers)} linked offers")

    return {
        "id": movie_id,
        "title": title,
        "year": year,
        "poster_url": f"{image_base.rstrip('/')}/w780{poster_path}" if poster_path else None,
        "region": region,
        "link": link,
        "primary": primary.to_dict() if primary else None,
        "providers": [o.to_dict() for o in offers],
        "counts": count_offers(offers),
    }
