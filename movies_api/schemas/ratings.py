from __future__ import annotations

import uuid

from pydantic import BaseModel

from movies_api.domain.movie import MovieRating


class RateMovieRequest(BaseModel):
    rating: int


class MovieRatingResponse(BaseModel):
    movie_id: uuid.UUID
    slug: str
    rating: int

    @classmethod
    def from_rating(cls, rating: MovieRating) -> "MovieRatingResponse":
        return cls(movie_id=rating.movie_id, slug=rating.slug, rating=rating.rating)
