"""
Local File Repository - File-based data access implementation

Keeps signals and watchlist items in JSON files under the configured store
directory. Writes go through an atomic replace, reads are cached in memory.
"""

import logging
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, List, Dict, Any

from moviedrop.io import readers, writers
from moviedrop.settings import Settings, get_settings
from api.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


def _anon(user_id: Optional[str]) -> str:
    return user_id if user_id else ""


_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _sort_time(value: Any) -> datetime:
    """Aware datetime for ordering rows; naive stamps are UTC, unreadable ones sort last."""
    if not isinstance(value, str) or not value:
        return _EPOCH
    try:
        ts = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return _EPOCH
    return ts if ts.tzinfo is not None else ts.replace(tzinfo=timezone.utc)


class LocalFileRepository(BaseRepository):
    """Repository implementation using local file storage"""

    def __init__(self, settings: Optional[Settings] = None, store_dir: Optional[Path] = None):
        self.settings = settings or get_settings()
        self.store_dir = Path(store_dir) if store_dir is not None else self.settings.store_dir
        self.signals_path = self.store_dir / "signals.json"
        self.watchlist_path = self.store_dir / "watchlist.json"

        self._lock = threading.RLock()
        self._signals_cache: Optional[List[Dict[str, Any]]] = None
        self._watchlist_cache: Optional[List[Dict[str, Any]]] = None

        logger.info(f"LocalFileRepository initialized with store_dir: {self.store_dir}")

    def _load(self, path: Path) -> List[Dict[str, Any]]:
        if not path.exists():
            return []
        try:
            data = readers.read_json(path)
        except ValueError as e:
            # A corrupt store is treated as empty rather than failing every request
            logger.error(f"Store file {path} is not valid JSON, starting empty: {e}")
            return []
        if not isinstance(data, list):
            logger.error(f"Store file {path} does not hold a list, starting empty")
            return []
        return [r for r in data if isinstance(r, dict)]

    def _signals(self) -> List[Dict[str, Any]]:
        if self._signals_cache is None:
            self._signals_cache = self._load(self.signals_path)
            logger.info(f"Loaded {len(self._signals_cache)} signals")
        return self._signals_cache

    def _watchlist(self) -> List[Dict[str, Any]]:
        if self._watchlist_cache is None:
            self._watchlist_cache = self._load(self.watchlist_path)
            logger.info(f"Loaded {len(self._watchlist_cache)} watchlist items")
        return self._watchlist_cache

    # ---- signals ----

    def save_signal(self, signal: Dict[str, Any]) -> bool:
        """Upsert on (user_id, movie_id, action); an existing row only gets a new timestamp."""
        record = dict(signal)
        if isinstance(record.get("timestamp"), datetime):
            record["timestamp"] = record["timestamp"].isoformat()
        record.setdefault("timestamp", datetime.now(timezone.utc).isoformat())

        key = (_anon(record.get("user_id")), record["movie_id"], record["action"])
        with self._lock:
            signals = self._signals()
            for existing in signals:
                if (_anon(existing.get("user_id")), existing.get("movie_id"), existing.get("action")) == key:
                    existing["timestamp"] = record["timestamp"]
                    if record.get("genre_ids"):
                        existing["genre_ids"] = record["genre_ids"]
                    writers.atomic_write_json(signals, self.signals_path)
                    logger.debug(f"Refreshed signal {key}")
                    return False

            signals.append(record)
            writers.atomic_write_json(signals, self.signals_path)
        logger.info(f"Signal saved: user={record.get('user_id')} movie={record['movie_id']} action={record['action']}")
        return True

    def get_signals(self, user_id: str) -> List[Dict[str, Any]]:
        with self._lock:
            rows = [dict(s) for s in self._signals() if s.get("user_id") == user_id]
        rows.sort(key=lambda x: _sort_time(x.get("timestamp")), reverse=True)
        return rows

    # ---- watchlist ----

    def add_watchlist_item(self, item: Dict[str, Any]) -> Dict[str, Any]:
        record = dict(item)
        record["added_at"] = datetime.now(timezone.utc).isoformat()
        with self._lock:
            items = [
                i for i in self._watchlist()
                if not (i.get("user_id") == record["user_id"] and i.get("movie_id") == record["movie_id"])
            ]
            items.append(record)
            self._watchlist_cache = items
            writers.atomic_write_json(items, self.watchlist_path)
        logger.info(f"Watchlist: user={record['user_id']} added movie {record['movie_id']}")
        return dict(record)

    def get_watchlist(self, user_id: str, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        with self._lock:
            rows = [dict(i) for i in self._watchlist() if i.get("user_id") == user_id]
        rows.sort(key=lambda x: _sort_time(x.get("added_at")), reverse=True)
        if limit is not None:
            rows = rows[:limit]
        return rows

    def remove_watchlist_item(self, user_id: str, movie_id: int) -> bool:
        with self._lock:
            items = self._watchlist()
            kept = [i for i in items if not (i.get("user_id") == user_id and i.get("movie_id") == movie_id)]
            if len(kept) == len(items):
                return False
            self._watchlist_cache = kept
            writers.atomic_write_json(kept, self.watchlist_path)
        logger.info(f"Watchlist: user={user_id} removed movie {movie_id}")
        return True

    def clear_cache(self) -> None:
        """Drop in-memory copies so the next read goes to disk"""
        logger.info("Clearing repository cache")
        with self._lock:
            self._signals_cache = None
            self._watchlist_cache = None
