"""
Result Filter - drops movies the user has already seen or that have no poster.
"""

from typing import Iterable, List, Optional

from moviedrop.features.movie_schema import Movie


def has_usable_poster(movie: Movie) -> bool:
    """Poster path present, non-empty and not the literal string 'null'."""
    path = movie.poster_path
    if path is None:
        return False
    path = path.strip()
    return path != "" and path.lower() != "null"


def filter_results(movies: Iterable[Movie], exclude_ids: Optional[Iterable[int]] = None) -> List[Movie]:
    """
    Order-preserving sublist of `movies` with a usable poster and an id
    outside `exclude_ids`. Never raises.
    """
    excluded = set(exclude_ids or ())
    return [m for m in movies if has_usable_poster(m) and m.id not in excluded]


def sort_by_popularity(movies: Iterable[Movie]) -> List[Movie]:
    """Most popular first; missing popularity counts as 0. Stable for ties."""
    return sorted(movies, key=lambda m: m.popularity or 0.0, reverse=True)


def parse_exclude_param(raw: Optional[str]) -> List[int]:
    """'1, 2,x,3' -> [1, 2, 3]; junk entries are skipped."""
    if not raw:
        return []
    ids = []
    for part in raw.split(","):
        part = part.strip()
        try:
            ids.append(int(part))
        except ValueError:
            continue
    return ids
