"""
Best-effort async dispatch for fire-and-forget work (signal sends).
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


class BestEffortDispatcher:
    """
    Runs submitted callables on a small thread pool.

    `submit` returns immediately. A failing task is logged and dropped: it is
    never retried and never raised to the caller, so a lost signal cannot
    block card advancement.
    """

    def __init__(self, max_workers: int = 2, name: str = "best-effort"):
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix=name)
        self._lock = threading.Lock()
        self._closed = False
        self.failures = 0

    def submit(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Optional[Future]:
        with self._lock:
            if self._closed:
                logger.warning(f"Dispatcher closed, dropping {getattr(fn, '__name__', fn)}")
                return None
            future = self._executor.submit(fn, *args, **kwargs)
        future.add_done_callback(self._log_failure)
        return future

    def _log_failure(self, future: Future) -> None:
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            with self._lock:
                self.failures += 1
            logger.warning(f"Background task failed (ignored): {exc}")

    def shutdown(self, wait: bool = True) -> None:
        with self._lock:
            self._closed = True
        self._executor.shutdown(wait=wait)


class InlineDispatcher(BestEffortDispatcher):
    """Runs tasks synchronously with the same swallow-and-log contract. Used by tests and the CLI's --sync mode."""

    def __init__(self):
        self._lock = threading.Lock()
        self._closed = False
        self.failures = 0

    def submit(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Optional[Future]:
        future: Future = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as e:
            future.set_exception(e)
        self._log_failure(future)
        return future

    def shutdown(self, wait: bool = True) -> None:
        self._closed = True
