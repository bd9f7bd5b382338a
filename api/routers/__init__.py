"""
API Routers - HTTP endpoint handlers

Each router handles a specific domain of functionality:
- movies: search, popular, details and the seeded discover sampler
- feed: assembled discovery feed (personalized with popular fallback)
- recommendations: personalized recommendations from preference signals
- signals: like / dismiss / watchlist events
- watchlist: per-user watchlist CRUD
- streaming: where a movie can be watched
- health: health checks and configuration status
"""
