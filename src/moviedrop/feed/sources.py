"""
In-process feed sources backed directly by the TMDB adapter.
"""

import logging

from requests.exceptions import RequestException

from moviedrop.adapters.tmdb.tmdb import TMDB_API
from moviedrop.errors import UpstreamError
from moviedrop.features.movie_schema import results_of
from moviedrop.feed.assembler import PopularPage, PopularSource
from moviedrop.feed.sampler import FeedRequest, resolve_page

logger = logging.getLogger(__name__)


class TMDBPopularSource(PopularSource):
    """Popular movies straight from TMDB, on the page the request's salt selects"""

    def __init__(self, tmdb: TMDB_API):
        self.tmdb = tmdb

    def popular(self, request: FeedRequest) -> PopularPage:
        page = resolve_page(request)
        try:
            response = self.tmdb.get_popular_movies(page=page, region=request.region)
        except (RequestException, ValueError) as e:
            raise UpstreamError(f"TMDB popular page {page} failed: {e}") from e
        movies = results_of(response)
        logger.debug(f"TMDB popular page {page}: {len(movies)} movies")
        return PopularPage(movies=movies, page=page)
