from __future__ import annotations

"""Rating service: bounds check, movie existence, upsert."""

import uuid
from typing import List

from movies_api.core.config import settings
from movies_api.core.exceptions import ValidationError, ValidationFailedException
from movies_api.domain.movie import MovieRating
from movies_api.repositories.movies import MovieRepositoryProtocol
from movies_api.repositories.ratings import RatingRepositoryProtocol


class RatingService:
    def __init__(self, ratings: RatingRepositoryProtocol, movies: MovieRepositoryProtocol):
        self._ratings = ratings
        self._movies = movies

    async def rate_movie(self, movie_id: uuid.UUID, rating: int, user_id: uuid.UUID) -> bool:
        """Upsert the caller's rating. `False` when the movie does not exist."""
        if not settings.RATING_MIN <= rating <= settings.RATING_MAX:
            raise ValidationFailedException(
                errors=[
                    ValidationError(
                        "rating",
                        f"Rating must be between {settings.RATING_MIN} and {settings.RATING_MAX}.",
                    )
                ]
            )

        if not await self._movies.exists_by_id(movie_id):
            return False

        return await self._ratings.rate_movie(movie_id, rating, user_id)

    async def delete_rating(self, movie_id: uuid.UUID, user_id: uuid.UUID) -> bool:
        return await self._ratings.delete_rating(movie_id, user_id)

    async def get_user_ratings(self, user_id: uuid.UUID) -> List[MovieRating]:
        return await self._ratings.get_user_ratings(user_id)

__all__ = ["RatingService"]
