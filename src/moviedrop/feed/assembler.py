"""
Recommendation Fallback Chain - builds a discovery feed.

Order of attempts:
1. Personalized recommendations for the user (skipped for anonymous sessions)
2. Popular movies on a salt-sampled page, excluding everything already seen

Each attempt's failure is handled locally and triggers the next one; only
a failure of the popular path reaches the caller, as FeedUnavailableError.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Literal, Optional

import numpy as np

from moviedrop.errors import FeedUnavailableError, InsufficientSignalsError
from moviedrop.features.movie_schema import Movie
from moviedrop.feed.filters import filter_results
from moviedrop.feed.sampler import FeedRequest, make_salt
from moviedrop.feed.seen_set import SeenSetStore
from moviedrop.feed.shuffle import shuffle_feed

logger = logging.getLogger(__name__)

FeedSource = Literal["personalized", "popular"]


@dataclass
class PopularPage:
    """One upstream page of popular movies and the page number it came from"""
    movies: List[Movie]
    page: Optional[int] = None


@dataclass
class FeedResult:
    movies: List[Movie]
    source: FeedSource
    page: Optional[int] = None
    personalized_error: Optional[str] = None
    attempts: List[str] = field(default_factory=list)

    @property
    def first_id(self) -> Optional[int]:
        return self.movies[0].id if self.movies else None


class PersonalizedSource(ABC):
    @abstractmethod
    def recommend(self, user_id: str, limit: int) -> List[Movie]:
        """
        Personalized movies for `user_id`.

        Raises:
            InsufficientSignalsError: user has too little signal history
            UpstreamError / requests.RequestException: transport failures
        """
        pass


class PopularSource(ABC):
    @abstractmethod
    def popular(self, request: FeedRequest) -> PopularPage:
        """One page of popular movies for the request (page chosen from its salt)."""
        pass


class FeedAssembler:
    """
    Assembles feeds from injected sources and an injected seen-set.

    Args:
        personalized: personalized recommendation source (None disables step 1)
        popular: popular-movies source
        seen_store: seen ids, used as the exclude-set for every request
        limit: result-count limit asked from the personalized source
        region: upstream region for popular pages
        rng: random state for the shuffle stage
    """

    def __init__(self,
                 personalized: Optional[PersonalizedSource],
                 popular: PopularSource,
                 seen_store: SeenSetStore,
                 limit: int = 20,
                 region: str = "US",
                 rng: Optional[np.random.RandomState] = None):
        self.personalized = personalized
        self.popular = popular
        self.seen_store = seen_store
        self.limit = limit
        self.region = region
        self.rng = rng or np.random.RandomState()

    def _finish(self, movies: List[Movie], extra_exclude: Optional[List[int]], previous_first_id: Optional[int]) -> List[Movie]:
        exclude = self.seen_store.ids()
        if extra_exclude:
            exclude.update(extra_exclude)
        kept = filter_results(movies, exclude)
        return shuffle_feed(kept, previous_first_id=previous_first_id, rng=self.rng)

    def _try_personalized(self, user_id: str) -> tuple[Optional[List[Movie]], Optional[str]]:
        try:
            movies = self.personalized.recommend(user_id, self.limit)
        except InsufficientSignalsError as e:
            logger.info(f"Personalized feed unavailable for {user_id}: {e}")
            return None, "insufficient_signals"
        except Exception as e:
            logger.warning(f"Personalized feed failed for {user_id}, falling back to popular: {e}")
            return None, str(e) or type(e).__name__

        if not movies:
            logger.info(f"Personalized source returned nothing for {user_id}")
            return None, "empty"
        return movies, None

    def assemble(self,
                 user_id: Optional[str] = None,
                 previous_first_id: Optional[int] = None,
                 exclude_ids: Optional[List[int]] = None,
                 salt: Optional[str] = None) -> FeedResult:
        """
        Build one feed.

        Args:
            user_id: signed-in user, None for anonymous sessions
            previous_first_id: lead card of the previous feed (shuffle tie-break)
            exclude_ids: ids to exclude on top of the seen-set
            salt: page-sampling salt; a fresh time-based one when None

        Raises:
            FeedUnavailableError: popular path failed as well
        """
        attempts: List[str] = []
        personalized_error = None

        if user_id and self.personalized is not None:
            attempts.append("personalized")
            movies, personalized_error = self._try_personalized(user_id)
            if movies is not None:
                feed = self._finish(movies, exclude_ids, previous_first_id)
                if feed:
                    logger.info(f"Serving {len(feed)} personalized movies to {user_id}")
                    return FeedResult(movies=feed, source="personalized", attempts=attempts)
                personalized_error = "all_seen"
                logger.info(f"Every personalized movie for {user_id} was already seen")

        attempts.append("popular")
        exclude = sorted(self.seen_store.ids() | set(exclude_ids or ()))
        request = FeedRequest(
            randomize=True,
            salt=salt if salt is not None else make_salt(),
            exclude_ids=exclude,
            region=self.region,
        )
        try:
            page = self.popular.popular(request)
        except Exception as e:
            logger.error(f"Popular feed failed: {e}")
            raise FeedUnavailableError(f"Could not load movies: {e}") from e

        feed = self._finish(page.movies, exclude_ids, previous_first_id)
        logger.info(f"Serving {len(feed)} popular movies from page {page.page}")
        return FeedResult(
            movies=feed,
            source="popular",
            page=page.page,
            personalized_error=personalized_error,
            attempts=attempts,
        )
