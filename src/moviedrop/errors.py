"""
Exception types shared by the adapters, the feed library and the API layer.
"""


class MoviedropError(Exception):
    """Base class for all MovieDrop errors"""


class MissingCredentialError(MoviedropError):
    """An upstream credential (TMDB API key) is not configured. Not retried."""

    def __init__(self, name: str, restore: list[str] | None = None):
        self.name = name
        self.restore = restore or [
            f"Set {name} in the environment or in the .env file",
            "Restart the API process after setting the key",
        ]
        super().__init__(f"{name} missing")


class UpstreamError(MoviedropError):
    """An upstream call failed (network error, timeout or non-2xx status)."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class InsufficientSignalsError(MoviedropError):
    """The user has not recorded enough preference signals to personalize."""

    def __init__(self, signal_count: int, required: int, reason: str | None = None):
        self.signal_count = signal_count
        self.required = required
        super().__init__(
            reason or f"Need at least {required} preference signals for recommendations (have {signal_count})"
        )


class FeedUnavailableError(MoviedropError):
    """Every step of the recommendation fallback chain failed."""
