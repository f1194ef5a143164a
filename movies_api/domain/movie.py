from __future__ import annotations

import re
import uuid
from dataclasses import dataclass, field
from typing import List, Optional

_SLUG_STRIP_RE = re.compile(r"[^0-9A-Za-z _-]")


def generate_slug(title: str, year_of_release: int) -> str:
    """Deterministic URL slug: `"Dalmations 101!", 2024` → `"dalmations-101-2024"`."""
    slugged = _SLUG_STRIP_RE.sub("", title).lower().replace(" ", "-")
    return f"{slugged}-{year_of_release}"


@dataclass
class Movie:
    """A catalog movie with its genres and (optional) rating aggregates.

    `rating` is the average across all users rounded to one decimal, `None`
    when unrated. `user_rating` is the acting user's own rating, `None` when
    there is no acting user or they have not rated the movie.
    """

    id: uuid.UUID
    title: str
    year_of_release: int
    genres: List[str] = field(default_factory=list)
    rating: Optional[float] = None
    user_rating: Optional[int] = None

    @property
    def slug(self) -> str:
        return generate_slug(self.title, self.year_of_release)


@dataclass(frozen=True)
class MovieRating:
    """One row of a user's rating history."""

    movie_id: uuid.UUID
    slug: str
    rating: int


__all__ = ["Movie", "MovieRating", "generate_slug"]
