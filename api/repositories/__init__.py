"""
API Repositories - Data access abstraction layer

Provides a clean interface for signal and watchlist storage that can be
swapped between local JSON files (current) and a database (future).

Pattern: Repository Pattern
"""
