"""TMDB adapter: HTTP client and endpoint wrapper."""
