from __future__ import annotations

import uuid
from typing import List, Optional

from pydantic import BaseModel, Field

from movies_api.domain.movie import Movie


class MovieRequest(BaseModel):
    """Body for create and update. Field rules are enforced by `MovieValidator`."""

    title: str
    year_of_release: int
    genres: List[str] = Field(default_factory=list)

    def to_movie(self, movie_id: Optional[uuid.UUID] = None) -> Movie:
        return Movie(
            id=movie_id or uuid.uuid4(),
            title=self.title,
            year_of_release=self.year_of_release,
            genres=list(self.genres),
        )


class CreateMovieRequest(MovieRequest):
    pass


class UpdateMovieRequest(MovieRequest):
    pass


class MovieResponse(BaseModel):
    id: uuid.UUID
    title: str
    slug: str
    year_of_release: int
    rating: Optional[float] = None
    user_rating: Optional[int] = None
    genres: List[str] = []

    @classmethod
    def from_movie(cls, movie: Movie) -> "MovieResponse":
        return cls(
            id=movie.id,
            title=movie.title,
            slug=movie.slug,
            year_of_release=movie.year_of_release,
            rating=movie.rating,
            user_rating=movie.user_rating,
            genres=list(movie.genres),
        )


class MoviesResponse(BaseModel):
    items: List[MovieResponse]
    page: int
    page_size: int
    total: int
    has_next_page: bool
