"""
Base Repository - Abstract interface for data access

This defines the contract that all repository implementations must follow.
Allows swapping between local files (current) and a database (future) without
changing the rest of the API code.
"""

from abc import ABC, abstractmethod
from typing import Optional, List, Dict, Any


class BaseRepository(ABC):
    """Abstract base class for data repositories"""

    @abstractmethod
    def save_signal(self, signal: Dict[str, Any]) -> bool:
        """
        Upsert a preference signal.

        Args:
            signal: Dict containing:
                - user_id: Optional[str] (None for anonymous sessions)
                - movie_id: int
                - action: str (like, dismiss, watchlist)
                - timestamp: ISO datetime string
                - genre_ids: Optional[List[int]]

        Returns:
            True if a new signal was stored, False if an existing
            (user_id, movie_id, action) signal had its timestamp refreshed
        """
        pass

    @abstractmethod
    def get_signals(self, user_id: str) -> List[Dict[str, Any]]:
        """
        All signals recorded for a user, most recent first.
        """
        pass

    def count_signals(self, user_id: str) -> int:
        return len(self.get_signals(user_id))

    @abstractmethod
    def add_watchlist_item(self, item: Dict[str, Any]) -> Dict[str, Any]:
        """
        Add (or refresh) a movie on a user's watchlist.

        Args:
            item: Dict with user_id, movie_id, movie_title, movie_poster

        Returns:
            The stored item including its added_at timestamp
        """
        pass

    @abstractmethod
    def get_watchlist(self, user_id: str, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """
        A user's watchlist, most recently added first.
        """
        pass

    @abstractmethod
    def remove_watchlist_item(self, user_id: str, movie_id: int) -> bool:
        """
        Remove a movie from a user's watchlist.

        Returns:
            True if the movie was on the watchlist
        """
        pass
