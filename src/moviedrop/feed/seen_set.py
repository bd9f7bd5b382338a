"""
Seen-Set Store - movie ids the user has already been shown.

The set only grows during a session; `clear()` is the single way to remove
ids. Every mutation is persisted straight away through a small key/value
storage backend so a crash never re-shows swiped cards.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Set

from moviedrop.io import readers, writers

logger = logging.getLogger(__name__)

SEEN_IDS_KEY = "seen_movie_ids"


class KeyValueStorage(ABC):
    """Minimal persisted key/value contract (the client's local storage)."""

    @abstractmethod
    def load(self, key: str) -> Any:
        """
        Raw value stored under `key`, or None when absent.

        May raise ValueError / OSError when the backing data is unreadable.
        """
        pass

    @abstractmethod
    def save(self, key: str, value: Any) -> None:
        pass


class InMemoryStorage(KeyValueStorage):
    """Storage for tests and throwaway sessions"""

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self.data: Dict[str, Any] = dict(initial or {})

    def load(self, key: str) -> Any:
        return self.data.get(key)

    def save(self, key: str, value: Any) -> None:
        self.data[key] = value


class JsonFileStorage(KeyValueStorage):
    """All keys in one JSON object on disk, rewritten atomically on save"""

    def __init__(self, path: Path):
        self.path = Path(path)

    def _read_all(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        data = readers.read_json(self.path)
        if not isinstance(data, dict):
            raise ValueError(f"Expected a JSON object in {self.path}, got {type(data).__name__}")
        return data

    def load(self, key: str) -> Any:
        return self._read_all().get(key)

    def save(self, key: str, value: Any) -> None:
        try:
            data = self._read_all()
        except (ValueError, OSError) as e:
            logger.warning(f"Overwriting unreadable state file {self.path}: {e}")
            data = {}
        data[key] = value
        writers.atomic_write_json(data, self.path)


class SeenSetStore:
    """
    Persisted set of seen movie ids, injected into the feed assembler.

    Call `load_on_startup()` once before use; a missing or corrupt entry
    starts the session with an empty set.
    """

    def __init__(self, storage: KeyValueStorage, key: str = SEEN_IDS_KEY):
        self.storage = storage
        self.key = key
        self._ids: Set[int] = set()

    def load_on_startup(self) -> "SeenSetStore":
        try:
            raw = self.storage.load(self.key)
        except (ValueError, OSError) as e:
            logger.warning(f"Seen-set storage unreadable, starting empty: {e}")
            raw = None

        self._ids = set()
        if raw is None:
            logger.info("No persisted seen-set, starting empty")
            return self

        if not isinstance(raw, list):
            logger.warning(f"Seen-set under '{self.key}' is not a list ({type(raw).__name__}), starting empty")
            return self

        for value in raw:
            if isinstance(value, int) and not isinstance(value, bool):
                self._ids.add(value)
            else:
                logger.warning(f"Seen-set under '{self.key}' holds a non-integer id ({value!r}), starting empty")
                self._ids = set()
                return self

        logger.info(f"Loaded {len(self._ids)} seen movie ids")
        return self

    def _persist(self) -> None:
        self.storage.save(self.key, sorted(self._ids))

    def add(self, movie_id: int) -> None:
        """Insert one id and persist. Adding an id twice is a no-op."""
        if movie_id in self._ids:
            return
        self._ids.add(movie_id)
        self._persist()

    def add_many(self, movie_ids: Iterable[int]) -> None:
        new_ids = set(movie_ids) - self._ids
        if not new_ids:
            return
        self._ids |= new_ids
        self._persist()

    def contains(self, movie_id: int) -> bool:
        return movie_id in self._ids

    def __contains__(self, movie_id: object) -> bool:
        return movie_id in self._ids

    def __len__(self) -> int:
        return len(self._ids)

    def ids(self) -> Set[int]:
        """Snapshot of the current ids (safe to pass as an exclude-set)."""
        return set(self._ids)

    def clear(self) -> None:
        """Forget every seen id and persist the empty set."""
        self._ids = set()
        self._persist()
        logger.info("Seen-set cleared")
