"""
MovieDrop Discovery API - FastAPI Application

Main entry point for the API server.
Environment-agnostic: configuration reads from settings (.env file).
"""

import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from moviedrop import __version__
from moviedrop.errors import MissingCredentialError, UpstreamError
from moviedrop.settings import get_settings
from api.dependencies import lifespan_handler
from api.routers import feed, health, movies, recommendations, signals, streaming, watchlist

# Get settings
cfg = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, cfg.log_level),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


async def missing_credential_handler(request: Request, exc: MissingCredentialError) -> JSONResponse:
    """Configuration error: not retried, tells the operator how to fix it"""
    logger.error(f"{request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"error": str(exc), "restore": exc.restore})


async def upstream_error_handler(request: Request, exc: UpstreamError) -> JSONResponse:
    logger.error(f"{request.url.path}: upstream failure: {exc}")
    return JSONResponse(status_code=502, content={"error": "Upstream movie service unavailable"})


def create_app() -> FastAPI:
    """
    Application factory for creating FastAPI app.

    Configuration is loaded from settings (reads from .env file).

    Returns:
        Configured FastAPI application instance
    """
    app = FastAPI(
        title="MovieDrop Discovery API",
        description="Movie discovery feed, recommendations, watchlists and streaming availability on top of TMDB",
        version=__version__,
        lifespan=lifespan_handler  # Handles startup/shutdown
    )

    # CORS configuration from settings
    logger.info(f"Configuring CORS with origins: {cfg.cors_origins}")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(MissingCredentialError, missing_credential_handler)
    app.add_exception_handler(UpstreamError, upstream_error_handler)

    # Mount routers
    app.include_router(movies.router, prefix="/api/v1", tags=["movies"])
    app.include_router(watchlist.router, prefix="/api/v1", tags=["watchlist"])
    app.include_router(feed.router, prefix="/api/v1", tags=["feed"])
    app.include_router(recommendations.router, prefix="/api/v1", tags=["recommendations"])
    app.include_router(signals.router, prefix="/api/v1", tags=["signals"])
    app.include_router(streaming.router, prefix="/api/v1", tags=["streaming"])
    app.include_router(health.router, prefix="/api/v1/health", tags=["health"])

    logger.info(f"FastAPI application created (env={cfg.env})")

    return app


# Create app instance
app = create_app()


# Root endpoint
@app.get("/")
async def root():
    """Root endpoint - API info"""
    return {
        "name": "MovieDrop Discovery API",
        "version": __version__,
        "environment": cfg.env,
        "status": "running",
        "docs": "/docs",
        "health": "/api/v1/health"
    }


if __name__ == "__main__":
    import uvicorn

    logger.info(f"Starting API server on {cfg.api_host}:{cfg.api_port}")
    logger.info(f"Environment: {cfg.env}")

    uvicorn.run(
        "api.main:app",
        host=cfg.api_host,
        port=cfg.api_port,
        reload=cfg.api_reload,
        workers=cfg.api_workers if not cfg.api_reload else 1,  # Workers only work without reload
        log_level=cfg.log_level.lower()
    )
