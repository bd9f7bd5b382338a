"""I/O utilities for reading and writing local state files."""

from . import readers
from . import writers

__all__ = ["readers", "writers"]
