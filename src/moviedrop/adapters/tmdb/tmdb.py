# Folder in charge of TMDB API interactions
import logging
from typing import Any, Dict, Iterable, Optional

from requests.exceptions import HTTPError

from moviedrop.adapters.tmdb.client import TMDB_APIClient
from moviedrop.settings import Settings

logger = logging.getLogger(__name__)

# TMDB stops serving /movie/popular beyond this page
MAX_PAGE = 500


class TMDB_API():
    """Wrapper class for TMDB API interactions"""
    def __init__(self, settings: Optional[Settings] = None, client: Optional[TMDB_APIClient] = None):
        self._client: TMDB_APIClient = client or TMDB_APIClient(settings)

    def search_movies(self, query: str, page: int = 1) -> Dict[str, Any]:
        """Searches for movies by title"""
        return self._client.get('search/movie', params={'query': query, 'page': page, 'include_adult': 'false'})

    def get_popular_movies(self, page: int = 1, region: str = "US") -> Dict[str, Any]:
        """One page of TMDB's popular-movies ranking for a region"""
        page = max(1, min(int(page), MAX_PAGE))
        return self._client.get('movie/popular', params={'page': page, 'region': region})

    def discover_movies(self,
                        page: int = 1,
                        region: str = "US",
                        with_genres: Optional[Iterable[int]] = None) -> Dict[str, Any]:
        """
        Popularity-sorted discover query.

        `with_genres` is OR-combined (TMDB uses `|` for OR, `,` for AND).
        """
        params: Dict[str, Any] = {
            'page': max(1, min(int(page), MAX_PAGE)),
            'region': region,
            'sort_by': 'popularity.desc',
            'include_adult': 'false',
        }
        if with_genres:
            params['with_genres'] = '|'.join(str(g) for g in with_genres)
        return self._client.get('discover/movie', params=params)

    def get_movie_details(self, movie_id: int) -> Dict[str, Any] | None:
        """Fetches full movie details from a given movie_id, None when TMDB does not know it"""
        try:
            return self._client.get(f'movie/{movie_id}')
        except HTTPError as e:
            if e.response is not None and e.response.status_code == 404:
                logger.warning(f"Movie ID {movie_id} not found (404)")
                return None
            raise

    def get_watch_providers(self, movie_id: int) -> Dict[str, Any]:
        """Watch providers for every region: {"id": .., "results": {"US": {...}, ...}}"""
        return self._client.get(f'movie/{movie_id}/watch/providers')

    def close(self) -> None:
        self._client.close()
