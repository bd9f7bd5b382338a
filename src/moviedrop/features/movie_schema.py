# Movie fields as returned by TMDB list and detail endpoints, see https://developer.themoviedb.org/reference/movie-popular-list
import logging
from typing import Any, Callable, Dict, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)


def _as_str(value: Any) -> Optional[str]:
    if isinstance(value, str):
        return value
    return None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    return value if isinstance(value, bool) else None


def _as_int_list(value: Any) -> Optional[List[int]]:
    if not isinstance(value, list):
        return None
    ids = [_as_int(v) for v in value]
    return [i for i in ids if i is not None]


# 1) How to extract each optional field: (snake_case key, camelCase key, transform)
# Missing or malformed values map to None, never to an error.
FieldSpec = Dict[str, tuple[str, str, Callable[[Any], Any]]]

MOVIE_FIELDS: FieldSpec = {
    "overview":          ("overview",          "overview",         _as_str),
    "poster_path":       ("poster_path",       "posterPath",       _as_str),
    "backdrop_path":     ("backdrop_path",     "backdropPath",     _as_str),
    "release_date":      ("release_date",      "releaseDate",      _as_str),
    "original_language": ("original_language", "originalLanguage", _as_str),
    "original_title":    ("original_title",    "originalTitle",    _as_str),
    "popularity":        ("popularity",        "popularity",       _as_float),
    "vote_average":      ("vote_average",      "voteAverage",      _as_float),
    "vote_count":        ("vote_count",        "voteCount",        _as_int),
    "genre_ids":         ("genre_ids",         "genreIds",         _as_int_list),
    "adult":             ("adult",             "adult",            _as_bool),
}


class Movie(BaseModel):
    """
    A movie as shown on a discovery card.

    Built from TMDB's snake_case payloads (or our own camelCase ones) and
    serialized to clients in camelCase. Immutable once fetched.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: int
    title: str
    overview: Optional[str] = None
    poster_path: Optional[str] = None
    backdrop_path: Optional[str] = None
    release_date: Optional[str] = None
    original_language: Optional[str] = None
    original_title: Optional[str] = None
    popularity: Optional[float] = None
    vote_average: Optional[float] = None
    vote_count: Optional[int] = None
    genre_ids: Optional[List[int]] = None
    adult: Optional[bool] = None

    @classmethod
    def from_payload(cls, payload: Any) -> Optional["Movie"]:
        """
        Lenient constructor for upstream JSON.

        Returns None (instead of raising) when the payload has no usable id.
        Detail payloads carry `genres: [{id, name}]` rather than `genre_ids`;
        both are accepted.
        """
        if not isinstance(payload, dict):
            return None

        movie_id = _as_int(payload.get("id"))
        if movie_id is None:
            logger.debug(f"Skipping payload without a usable id: {str(payload)[:80]}")
            return None

        fields: Dict[str, Any] = {}
        for name, (snake_key, camel_key, transform) in MOVIE_FIELDS.items():
            raw = payload.get(snake_key)
            if raw is None:
                raw = payload.get(camel_key)
            fields[name] = transform(raw) if raw is not None else None

        if fields["genre_ids"] is None and isinstance(payload.get("genres"), list):
            fields["genre_ids"] = _as_int_list(
                [g.get("id") for g in payload["genres"] if isinstance(g, dict)]
            )

        title = _as_str(payload.get("title")) or fields["original_title"] or ""
        return cls(id=movie_id, title=title, **fields)

    def poster_url(self, image_base: str, size: str = "w342") -> Optional[str]:
        if not self.poster_path:
            return None
        return f"{image_base.rstrip('/')}/{size}{self.poster_path}"

    def backdrop_url(self, image_base: str, size: str = "w780") -> Optional[str]:
        if not self.backdrop_path:
            return None
        return f"{image_base.rstrip('/')}/{size}{self.backdrop_path}"

    @property
    def year(self) -> Optional[str]:
        if self.release_date and len(self.release_date) >= 4:
            return self.release_date[:4]
        return None


def parse_movies(payloads: Iterable[Any]) -> List[Movie]:
    """Parse a TMDB `results` array, dropping entries without an id."""
    if not isinstance(payloads, (list, tuple)):
        return []
    movies = []
    for payload in payloads:
        movie = Movie.from_payload(payload)
        if movie is not None:
            movies.append(movie)
    return movies


def results_of(response: Any) -> List[Movie]:
    """Movies from a paginated TMDB response (`{"page": .., "results": [..]}`)."""
    if not isinstance(response, dict):
        return []
    return parse_movies(response.get("results") or [])
