"""
Feed session - the stateful side of the discovery screen.

Keeps a monotonically increasing request generation so a slow prefetch
cannot overwrite a newer refresh, tracks per-card state and hands signal
sends to a best-effort dispatcher.
"""

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional

from moviedrop.errors import FeedUnavailableError
from moviedrop.features.movie_schema import Movie
from moviedrop.features.signal_schema import SignalAction
from moviedrop.feed.assembler import FeedAssembler, FeedResult
from moviedrop.feed.dispatch import BestEffortDispatcher
from moviedrop.feed.seen_set import SeenSetStore

logger = logging.getLogger(__name__)

# (user_id, movie_id, action, genre_ids) -> None
SignalSink = Callable[[Optional[str], int, SignalAction, Optional[List[int]]], None]


class RequestGeneration:
    """Monotonic request token; only the latest token's result is applied."""

    def __init__(self):
        self._lock = threading.Lock()
        self._current = 0

    def next(self) -> int:
        with self._lock:
            self._current += 1
            return self._current

    def is_current(self, token: int) -> bool:
        with self._lock:
            return token == self._current

    @property
    def current(self) -> int:
        return self._current


class CardState(Enum):
    UNSEEN = "unseen"
    SHOWN = "shown"
    LIKED = "liked"
    DISMISSED = "dismissed"
    WATCHLISTED = "watchlisted"


TERMINAL_STATES = (CardState.LIKED, CardState.DISMISSED, CardState.WATCHLISTED)

_ACTION_TO_STATE = {
    SignalAction.LIKE: CardState.LIKED,
    SignalAction.DISMISS: CardState.DISMISSED,
    SignalAction.WATCHLIST: CardState.WATCHLISTED,
}


@dataclass
class FeedState:
    """What the screen renders; `error` set means show the empty/error state"""
    movies: List[Movie]
    source: Optional[str] = None
    error: Optional[str] = None
    generation: int = 0


class FeedSession:
    def __init__(self,
                 assembler: FeedAssembler,
                 seen_store: SeenSetStore,
                 dispatcher: BestEffortDispatcher,
                 signal_sink: Optional[SignalSink] = None,
                 user_id: Optional[str] = None):
        self.assembler = assembler
        self.seen_store = seen_store
        self.dispatcher = dispatcher
        self.signal_sink = signal_sink
        self.user_id = user_id
        self.generation = RequestGeneration()
        self.state = FeedState(movies=[])
        self.previous_first_id: Optional[int] = None
        self._cards: Dict[int, CardState] = {}
        self._movies: Dict[int, Movie] = {}

    def card_state(self, movie_id: int) -> CardState:
        return self._cards.get(movie_id, CardState.UNSEEN)

    def begin_refresh(self) -> int:
        """Start a fetch; any earlier in-flight fetch is superseded."""
        return self.generation.next()

    def fetch(self) -> FeedState:
        """Run the fallback chain. Failures become an empty state with an error message."""
        try:
            result: FeedResult = self.assembler.assemble(
                user_id=self.user_id,
                previous_first_id=self.previous_first_id,
            )
        except FeedUnavailableError as e:
            logger.error(f"Feed unavailable: {e}")
            return FeedState(movies=[], error=str(e))
        return FeedState(movies=result.movies, source=result.source)

    def apply(self, token: int, state: FeedState) -> bool:
        """
        Apply a finished fetch if it is still the newest one.

        Returns False (and leaves the current feed alone) for stale results.
        """
        if not self.generation.is_current(token):
            logger.info(f"Discarding stale feed result (token {token}, current {self.generation.current})")
            return False

        state.generation = token
        self.state = state
        for movie in state.movies:
            self._movies[movie.id] = movie
        if state.movies:
            lead = state.movies[0]
            self.previous_first_id = lead.id
            self.mark_shown(lead.id)
        return True

    def refresh(self) -> Optional[FeedState]:
        """Fetch and apply in one go; None if superseded meanwhile."""
        token = self.begin_refresh()
        state = self.fetch()
        return state if self.apply(token, state) else None

    def mark_shown(self, movie_id: int) -> None:
        if self.card_state(movie_id) == CardState.UNSEEN:
            self._cards[movie_id] = CardState.SHOWN

    def record(self, movie_id: int, action: SignalAction) -> CardState:
        """
        Move a card to its terminal state, remember it as seen and send the
        signal in the background. Never blocks on, or raises for, the send.
        """
        action = SignalAction(action)
        current = self.card_state(movie_id)
        if current in TERMINAL_STATES:
            logger.debug(f"Card {movie_id} already {current.value}, re-sending signal only")
        new_state = _ACTION_TO_STATE[action]
        self._cards[movie_id] = new_state
        self.seen_store.add(movie_id)

        if self.signal_sink is not None:
            movie = self._movies.get(movie_id)
            genre_ids = movie.genre_ids if movie is not None else None
            self.dispatcher.submit(self.signal_sink, self.user_id, movie_id, action, genre_ids)
        return new_state

    def reset(self) -> None:
        """Clear the seen-set; every card becomes UNSEEN again."""
        self.seen_store.clear()
        self._cards.clear()
        self.previous_first_id = None
