"""Result Assembler: flat query rows → `Movie` domain objects."""

from __future__ import annotations

import uuid
from typing import Any, Dict, Iterable, List, Mapping, Optional

from movies_api.db.functions import GENRE_SEPARATOR
from movies_api.domain.movie import Movie


def split_genres(text: Optional[str]) -> List[str]:
    if not text:
        return []
    return text.split(GENRE_SEPARATOR)


def _as_float(value: Any) -> Optional[float]:
    # PostgreSQL returns Decimal for round(avg(..), 1)
    return None if value is None else float(value)


def _as_int(value: Any) -> Optional[int]:
    return None if value is None else int(value)


def _as_uuid(value: Any) -> uuid.UUID:
    return value if isinstance(value, uuid.UUID) else uuid.UUID(str(value))


def movie_from_row(row: Mapping[str, Any]) -> Movie:
    """Map one row (`id`, `title`, `yearofrelease`, `genres`, `rating`, `userrating`)."""
    return Movie(
        id=_as_uuid(row["id"]),
        title=row["title"],
        year_of_release=int(row["yearofrelease"]),
        genres=split_genres(row.get("genres")),
        rating=_as_float(row.get("rating")),
        user_rating=_as_int(row.get("userrating")),
    )


def assemble_movies(rows: Iterable[Mapping[str, Any]]) -> List[Movie]:
    """One `Movie` per distinct id, in first-seen order.

    Rows repeating an id (row-per-genre shapes) extend the first movie's genres.
    """
    by_id: Dict[uuid.UUID, Movie] = {}
    for row in rows:
        movie = movie_from_row(row)
        existing = by_id.get(movie.id)
        if existing is None:
            by_id[movie.id] = movie
        else:
            existing.genres.extend(movie.genres)
    return list(by_id.values())


__all__ = ["split_genres", "movie_from_row", "assemble_movies"]
