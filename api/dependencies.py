"""
API Dependencies - Shared application state and FastAPI dependency injection

One AppState per process holds the repository, the TMDB wrapper and the
random state. Routers receive them through Depends so tests can override
any of them.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

import numpy as np
from fastapi import Depends

from moviedrop.adapters.tmdb.tmdb import TMDB_API
from moviedrop.settings import Settings, get_settings
from moviedrop.utils.reproducibility import get_random_state
from api.repositories.base import BaseRepository
from api.repositories.local import LocalFileRepository

logger = logging.getLogger(__name__)


class AppState:
    """
    Application state shared across requests.

    The TMDB wrapper is built lazily: a missing API key must not stop the
    process from starting (health checks still answer), but every route that
    needs the upstream fails with a configuration error.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings: Settings = settings or get_settings()
        self.repository: Optional[BaseRepository] = None
        self.rng: np.random.RandomState = get_random_state(self.settings.random_seed)
        self._tmdb: Optional[TMDB_API] = None
        self._initialized = False

    def initialize(self) -> None:
        if self._initialized:
            logger.debug("AppState already initialized")
            return

        logger.info("Initializing AppState...")
        self.repository = LocalFileRepository(self.settings)
        if self.settings.tmdb is None:
            logger.error("TMDB_API_KEY missing: upstream routes will answer 500 until it is set")
        self._initialized = True
        logger.info("AppState initialization complete!")

    @property
    def tmdb_configured(self) -> bool:
        return self._tmdb is not None or self.settings.tmdb is not None

    def get_tmdb(self) -> TMDB_API:
        if self._tmdb is None:
            # Raises MissingCredentialError when the key is absent
            self._tmdb = TMDB_API(self.settings)
        return self._tmdb

    def set_tmdb(self, tmdb: TMDB_API) -> None:
        self._tmdb = tmdb

    def get_status(self) -> dict:
        return {
            "initialized": self._initialized,
            "tmdb_configured": self.tmdb_configured,
            "repository": type(self.repository).__name__ if self.repository else None,
        }


# Global singleton instance
app_state = AppState()


def get_app_state() -> AppState:
    """
    FastAPI dependency to access app state.

    Usage in routers:
        @router.get("/example")
        async def example(state: AppState = Depends(get_app_state)):
            ...
    """
    if not app_state._initialized:
        app_state.initialize()
    return app_state


def get_repository(state: AppState = Depends(get_app_state)) -> BaseRepository:
    if state.repository is None:
        raise RuntimeError("Repository not initialized")
    return state.repository


def get_tmdb(state: AppState = Depends(get_app_state)) -> TMDB_API:
    """
    Raises:
        MissingCredentialError: TMDB_API_KEY is not configured (mapped to 500 by the app)
    """
    return state.get_tmdb()


def get_settings_dep(state: AppState = Depends(get_app_state)) -> Settings:
    return state.settings


def get_rng(state: AppState = Depends(get_app_state)) -> np.random.RandomState:
    return state.rng


@asynccontextmanager
async def lifespan_handler(app):
    """
    FastAPI lifespan context manager for startup/shutdown.

    Usage in main.py:
        app = FastAPI(lifespan=lifespan_handler)
    """
    logger.info("FastAPI starting up...")
    get_app_state()

    yield  # App is now running

    logger.info("FastAPI shutting down...")
    if app_state._tmdb is not None:
        app_state._tmdb.close()
    logger.info("Shutdown complete")

