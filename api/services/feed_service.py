"""
Feed Service - Server-side run of the recommendation fallback chain

The client's seen-set arrives as an exclude list; it seeds a throwaway
in-memory store so the same assembler code runs here and on the client.
"""

import logging
from typing import List, Optional

import numpy as np

from moviedrop.adapters.tmdb.tmdb import TMDB_API
from moviedrop.feed.assembler import FeedAssembler
from moviedrop.feed.sampler import make_salt
from moviedrop.feed.seen_set import InMemoryStorage, SeenSetStore
from moviedrop.feed.sources import TMDBPopularSource

from api.repositories.base import BaseRepository
from api.schemas.movies import FeedResponse
from api.services.recommendation_service import RepositoryPersonalizedSource

logger = logging.getLogger(__name__)


def assemble_feed(repo: BaseRepository,
                  tmdb: TMDB_API,
                  user_id: Optional[str],
                  exclude_ids: List[int],
                  previous_first_id: Optional[int] = None,
                  t: Optional[str] = None,
                  r: Optional[str] = None,
                  region: str = "US",
                  limit: int = 20,
                  min_signals: int = 3,
                  rng: Optional[np.random.RandomState] = None) -> FeedResponse:
    """
    Raises:
        FeedUnavailableError: personalized and popular paths both failed
    """
    seen = SeenSetStore(InMemoryStorage()).load_on_startup()
    seen.add_many(exclude_ids)

    assembler = FeedAssembler(
        personalized=RepositoryPersonalizedSource(repo, tmdb, region=region, min_signals=min_signals),
        popular=TMDBPopularSource(tmdb),
        seen_store=seen,
        limit=limit,
        region=region,
        rng=rng,
    )
    result = assembler.assemble(
        user_id=user_id,
        previous_first_id=previous_first_id,
        salt=make_salt(t, r),
    )
    return FeedResponse(
        source=result.source,
        page=result.page,
        results=result.movies[:limit],
        personalized_error=result.personalized_error,
    )
