from __future__ import annotations

"""Ratings repository: per-user ratings and their per-movie aggregate."""

import logging
import uuid
from typing import List, Optional, Tuple

from sqlalchemy import and_, delete, func, insert, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncConnection

from movies_api.core.config import settings
from movies_api.db.models.movie import movies_table
from movies_api.db.models.rating import ratings_table
from movies_api.db.session import DbConnectionFactory, connection_factory
from movies_api.domain.movie import MovieRating
from movies_api.repositories.errors import storage_errors

logger = logging.getLogger(__name__)

_UPSERT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class RatingRepositoryProtocol:
    async def rate_movie(self, movie_id: uuid.UUID, rating: int, user_id: uuid.UUID) -> bool:
        raise NotImplementedError

    async def get_rating(self, movie_id: uuid.UUID) -> Optional[float]:
        raise NotImplementedError

    async def get_rating_for_user(
        self, movie_id: uuid.UUID, user_id: uuid.UUID
    ) -> Tuple[Optional[float], Optional[int]]:
        raise NotImplementedError

    async def delete_rating(self, movie_id: uuid.UUID, user_id: uuid.UUID) -> bool:
        raise NotImplementedError

    async def get_user_ratings(self, user_id: uuid.UUID) -> List[MovieRating]:
        raise NotImplementedError


def _average_rating():
    return func.round(func.avg(ratings_table.c.rating), 1)


def _as_float(value) -> Optional[float]:
    return None if value is None else float(value)


class SqlRatingRepository(RatingRepositoryProtocol):
    """SQL-backed ratings repository. At most one row per (user, movie)."""

    def __init__(self, db: DbConnectionFactory):
        self._db = db

    async def _upsert(self, conn: AsyncConnection, movie_id: uuid.UUID, rating: int, user_id: uuid.UUID) -> int:
        insert_fn = _UPSERT_INSERTS.get(conn.dialect.name)
        if insert_fn is not None:
            stmt = insert_fn(ratings_table).values(userid=user_id, movieid=movie_id, rating=rating)
            stmt = stmt.on_conflict_do_update(
                index_elements=[ratings_table.c.userid, ratings_table.c.movieid],
                set_={"rating": stmt.excluded.rating},
            )
            return (await conn.execute(stmt)).rowcount

        # Dialects without ON CONFLICT: update, then insert when nothing matched.
        result = await conn.execute(
            update(ratings_table)
            .where(and_(ratings_table.c.userid == user_id, ratings_table.c.movieid == movie_id))
            .values(rating=rating)
        )
        if result.rowcount:
            return result.rowcount
        result = await conn.execute(insert(ratings_table).values(userid=user_id, movieid=movie_id, rating=rating))
        return result.rowcount

    async def rate_movie(self, movie_id: uuid.UUID, rating: int, user_id: uuid.UUID) -> bool:
        with storage_errors("ratings.rate_movie"):
            async with self._db.transaction() as conn:
                affected = await self._upsert(conn, movie_id, rating, user_id)
        logger.info("User %s rated movie %s: %s", user_id, movie_id, rating)
        return affected > 0

    async def get_rating(self, movie_id: uuid.UUID) -> Optional[float]:
        stmt = select(_average_rating()).where(ratings_table.c.movieid == movie_id)
        with storage_errors("ratings.get_rating"):
            async with self._db.connect() as conn:
                value = (await conn.execute(stmt)).scalar_one_or_none()
        return _as_float(value)

    async def get_rating_for_user(
        self, movie_id: uuid.UUID, user_id: uuid.UUID
    ) -> Tuple[Optional[float], Optional[int]]:
        mine = ratings_table.alias("mine")
        user_rating = (
            select(mine.c.rating)
            .where(and_(mine.c.movieid == movie_id, mine.c.userid == user_id))
            .scalar_subquery()
        )
        stmt = select(_average_rating().label("rating"), user_rating.label("userrating")).where(
            ratings_table.c.movieid == movie_id
        )
        with storage_errors("ratings.get_rating_for_user"):
            async with self._db.connect() as conn:
                row = (await conn.execute(stmt)).mappings().first()
        if row is None:
            return None, None
        mine_value = row["userrating"]
        return _as_float(row["rating"]), None if mine_value is None else int(mine_value)

    async def delete_rating(self, movie_id: uuid.UUID, user_id: uuid.UUID) -> bool:
        stmt = delete(ratings_table).where(
            and_(ratings_table.c.movieid == movie_id, ratings_table.c.userid == user_id)
        )
        with storage_errors("ratings.delete_rating"):
            async with self._db.transaction() as conn:
                result = await conn.execute(stmt)
        return result.rowcount > 0

    async def get_user_ratings(self, user_id: uuid.UUID) -> List[MovieRating]:
        stmt = (
            select(ratings_table.c.movieid, movies_table.c.slug, ratings_table.c.rating)
            .join(movies_table, movies_table.c.id == ratings_table.c.movieid)
            .where(ratings_table.c.userid == user_id)
            .order_by(movies_table.c.slug)
        )
        with storage_errors("ratings.get_user_ratings"):
            async with self._db.connect() as conn:
                rows = (await conn.execute(stmt)).mappings().all()
        return [MovieRating(movie_id=row["movieid"], slug=row["slug"], rating=int(row["rating"])) for row in rows]


def get_ratings_repository() -> RatingRepositoryProtocol:
    """Factory/dependency mirroring `get_movies_repository`."""
    if settings.MOVIES_REPOSITORY_BACKEND == "memory":
        from movies_api.repositories.memory import MemoryRatingRepository, default_store

        return MemoryRatingRepository(default_store)
    return SqlRatingRepository(connection_factory)


__all__ = ["RatingRepositoryProtocol", "SqlRatingRepository", "get_ratings_repository"]
