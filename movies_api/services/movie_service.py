from __future__ import annotations

"""
Movie service
=============
Composes validation, existence checks and rating re-attachment around the
movies repository. "Not found" is reported as `None`/`False`, never raised;
validation always fails before any write is attempted.
"""

import asyncio
import logging
import uuid
from typing import List, Optional, Tuple

from movies_api.domain.movie import Movie
from movies_api.domain.options import ListMoviesOptions
from movies_api.repositories.movies import MovieRepositoryProtocol
from movies_api.repositories.ratings import RatingRepositoryProtocol
from movies_api.services.validators import MovieValidator

logger = logging.getLogger(__name__)


def parse_movie_id(token: str) -> Optional[uuid.UUID]:
    try:
        return uuid.UUID(token)
    except (TypeError, ValueError):
        return None


class MovieService:
    def __init__(
        self,
        movies: MovieRepositoryProtocol,
        ratings: RatingRepositoryProtocol,
        validator: Optional[MovieValidator] = None,
    ):
        self._movies = movies
        self._ratings = ratings
        self._validator = validator or MovieValidator(movies)

    async def create(self, movie: Movie) -> bool:
        await self._validator.validate(movie)
        return await self._movies.create(movie)

    async def get_by_id(self, movie_id: uuid.UUID, user_id: Optional[uuid.UUID] = None) -> Optional[Movie]:
        return await self._movies.get_by_id(movie_id, user_id)

    async def get_by_slug(self, slug: str, user_id: Optional[uuid.UUID] = None) -> Optional[Movie]:
        return await self._movies.get_by_slug(slug, user_id)

    async def get_by_id_or_slug(self, token: str, user_id: Optional[uuid.UUID] = None) -> Optional[Movie]:
        """A token that parses as a UUID is an id; anything else is a slug."""
        movie_id = parse_movie_id(token)
        if movie_id is not None:
            return await self.get_by_id(movie_id, user_id)
        return await self.get_by_slug(token, user_id)

    async def get_all(self, options: ListMoviesOptions) -> List[Movie]:
        return await self._movies.get_all(options)

    async def get_count(self, title: Optional[str], year_of_release: Optional[int]) -> int:
        return await self._movies.get_count(title, year_of_release)

    async def list_movies(self, options: ListMoviesOptions) -> Tuple[List[Movie], int]:
        """Page of movies plus the total matching count, queried concurrently.

        If either query fails (or the caller is cancelled) the other one is
        cancelled and awaited before the error propagates.
        """
        page_task = asyncio.ensure_future(self.get_all(options))
        count_task = asyncio.ensure_future(self.get_count(options.title, options.year_of_release))
        try:
            movies, total = await asyncio.gather(page_task, count_task)
        except BaseException:
            for task in (page_task, count_task):
                task.cancel()
            await asyncio.gather(page_task, count_task, return_exceptions=True)
            raise
        return movies, total

    async def update(self, movie: Movie, user_id: Optional[uuid.UUID] = None) -> Optional[Movie]:
        """Update an existing movie and return it with fresh rating aggregates.

        Returns `None` when the movie does not exist (no upsert).
        """
        await self._validator.validate(movie)

        if not await self._movies.exists_by_id(movie.id):
            return None

        if not await self._movies.update(movie):
            logger.info("Movie %s vanished before update", movie.id)
            return None

        if user_id is None:
            movie.rating = await self._ratings.get_rating(movie.id)
            movie.user_rating = None
        else:
            movie.rating, movie.user_rating = await self._ratings.get_rating_for_user(movie.id, user_id)
        return movie

    async def delete_by_id(self, movie_id: uuid.UUID) -> bool:
        return await self._movies.delete_by_id(movie_id)


__all__ = ["MovieService", "parse_movie_id"]
