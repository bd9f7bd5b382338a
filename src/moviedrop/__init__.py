"""MovieDrop: movie discovery feed assembly and TMDB proxy."""

__version__ = "0.1.0"
