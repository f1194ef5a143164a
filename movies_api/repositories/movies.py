from __future__ import annotations

"""Movies repository (Movie Query Engine).

Defines the storage-facing interface consumed by `MovieService` and its SQL
implementation on SQLAlchemy Core. Every read is a single round trip: genres
and ratings are pre-aggregated per movie in grouped subqueries and LEFT
JOINed, so a movie with no genres or no ratings still appears and multiple
genres never skew the average.
"""

import logging
import uuid
from typing import Any, Dict, List, Optional

from sqlalchemy import Select, and_, delete, func, insert, null, select, update
from sqlalchemy.sql.elements import ColumnElement

from movies_api.core.config import settings
from movies_api.db.functions import genre_list
from movies_api.db.models.genre import genres_table
from movies_api.db.models.movie import movies_table
from movies_api.db.models.rating import ratings_table
from movies_api.db.session import DbConnectionFactory, connection_factory
from movies_api.domain.movie import Movie
from movies_api.domain.options import ListMoviesOptions, SortField, SortOrder
from movies_api.repositories.assembler import assemble_movies
from movies_api.repositories.errors import storage_errors

logger = logging.getLogger(__name__)


class MovieRepositoryProtocol:
    async def create(self, movie: Movie) -> bool:
        raise NotImplementedError

    async def get_by_id(self, movie_id: uuid.UUID, user_id: Optional[uuid.UUID] = None) -> Optional[Movie]:
        raise NotImplementedError

    async def get_by_slug(self, slug: str, user_id: Optional[uuid.UUID] = None) -> Optional[Movie]:
        raise NotImplementedError

    async def get_all(self, options: ListMoviesOptions) -> List[Movie]:
        raise NotImplementedError

    async def get_count(self, title: Optional[str], year_of_release: Optional[int]) -> int:
        raise NotImplementedError

    async def update(self, movie: Movie) -> bool:
        raise NotImplementedError

    async def delete_by_id(self, movie_id: uuid.UUID) -> bool:
        raise NotImplementedError

    async def exists_by_id(self, movie_id: uuid.UUID) -> bool:
        raise NotImplementedError


# ─────────────────────────────────────────────────────────────
# Query composition
# ─────────────────────────────────────────────────────────────

# Caller text never reaches SQL: sort fields map to literal columns.
SORT_COLUMNS: Dict[SortField, Any] = {
    SortField.TITLE: movies_table.c.title,
    SortField.YEAR_OF_RELEASE: movies_table.c.yearofrelease,
}


def build_filters(title: Optional[str], year_of_release: Optional[int]) -> List[ColumnElement[bool]]:
    """Predicates shared by the list and count queries. Absent filters add nothing."""
    clauses: List[ColumnElement[bool]] = []
    if title:
        clauses.append(movies_table.c.title.icontains(title, autoescape=True))
    if year_of_release is not None:
        clauses.append(movies_table.c.yearofrelease == year_of_release)
    return clauses


def movie_select(user_id: Optional[uuid.UUID] = None) -> Select:
    """Base projection: id, title, yearofrelease, genres, rating, userrating."""
    g = (
        select(genres_table.c.movieid, genre_list(genres_table.c.name).label("genres"))
        .group_by(genres_table.c.movieid)
        .subquery("g")
    )
    r = (
        select(ratings_table.c.movieid, func.round(func.avg(ratings_table.c.rating), 1).label("rating"))
        .group_by(ratings_table.c.movieid)
        .subquery("r")
    )
    m = movies_table

    source = m.outerjoin(g, g.c.movieid == m.c.id).outerjoin(r, r.c.movieid == m.c.id)
    columns: List[Any] = [m.c.id, m.c.title, m.c.yearofrelease, g.c.genres, r.c.rating]

    if user_id is not None:
        myr = ratings_table.alias("myr")
        source = source.outerjoin(myr, and_(myr.c.movieid == m.c.id, myr.c.userid == user_id))
        columns.append(myr.c.rating.label("userrating"))
    else:
        columns.append(null().label("userrating"))

    return select(*columns).select_from(source)


def list_select(options: ListMoviesOptions) -> Select:
    stmt = movie_select(options.user_id).where(*build_filters(options.title, options.year_of_release))
    if options.is_sorted:
        column = SORT_COLUMNS[options.sort_field]
        ordered = column.desc() if options.sort_order is SortOrder.DESCENDING else column.asc()
        stmt = stmt.order_by(ordered, movies_table.c.id)
    return stmt.limit(options.page_size).offset(options.offset)


def count_select(title: Optional[str], year_of_release: Optional[int]) -> Select:
    return select(func.count()).select_from(movies_table).where(*build_filters(title, year_of_release))


def _genre_rows(movie: Movie) -> List[Dict[str, Any]]:
    return [{"movieid": movie.id, "name": name} for name in movie.genres]


# ─────────────────────────────────────────────────────────────
# SQL implementation
# ─────────────────────────────────────────────────────────────

class SqlMovieRepository(MovieRepositoryProtocol):
    """SQL-backed movies repository over a pooled connection provider."""

    def __init__(self, db: DbConnectionFactory):
        self._db = db

    async def create(self, movie: Movie) -> bool:
        with storage_errors("movies.create"):
            async with self._db.transaction() as conn:
                result = await conn.execute(
                    insert(movies_table).values(
                        id=movie.id,
                        slug=movie.slug,
                        title=movie.title,
                        yearofrelease=movie.year_of_release,
                    )
                )
                genre_rows = _genre_rows(movie)
                if genre_rows:
                    await conn.execute(insert(genres_table), genre_rows)
        logger.info("Created movie %s (%s)", movie.id, movie.slug)
        return result.rowcount > 0

    async def _fetch_one(self, stmt: Select, operation: str) -> Optional[Movie]:
        with storage_errors(operation):
            async with self._db.connect() as conn:
                rows = (await conn.execute(stmt)).mappings().all()
        movies = assemble_movies(rows)
        return movies[0] if movies else None

    async def get_by_id(self, movie_id: uuid.UUID, user_id: Optional[uuid.UUID] = None) -> Optional[Movie]:
        stmt = movie_select(user_id).where(movies_table.c.id == movie_id)
        return await self._fetch_one(stmt, "movies.get_by_id")

    async def get_by_slug(self, slug: str, user_id: Optional[uuid.UUID] = None) -> Optional[Movie]:
        stmt = movie_select(user_id).where(movies_table.c.slug == slug)
        return await self._fetch_one(stmt, "movies.get_by_slug")

    async def get_all(self, options: ListMoviesOptions) -> List[Movie]:
        with storage_errors("movies.get_all"):
            async with self._db.connect() as conn:
                rows = (await conn.execute(list_select(options))).mappings().all()
        return assemble_movies(rows)

    async def get_count(self, title: Optional[str], year_of_release: Optional[int]) -> int:
        with storage_errors("movies.get_count"):
            async with self._db.connect() as conn:
                return int((await conn.execute(count_select(title, year_of_release))).scalar_one())

    async def update(self, movie: Movie) -> bool:
        with storage_errors("movies.update"):
            async with self._db.connect() as conn:
                async with conn.begin() as tx:
                    result = await conn.execute(
                        update(movies_table)
                        .where(movies_table.c.id == movie.id)
                        .values(slug=movie.slug, title=movie.title, yearofrelease=movie.year_of_release)
                    )
                    if result.rowcount == 0:
                        await tx.rollback()
                        return False
                    await conn.execute(delete(genres_table).where(genres_table.c.movieid == movie.id))
                    genre_rows = _genre_rows(movie)
                    if genre_rows:
                        await conn.execute(insert(genres_table), genre_rows)
        logger.info("Updated movie %s (%s)", movie.id, movie.slug)
        return True

    async def delete_by_id(self, movie_id: uuid.UUID) -> bool:
        with storage_errors("movies.delete_by_id"):
            async with self._db.connect() as conn:
                async with conn.begin() as tx:
                    await conn.execute(delete(genres_table).where(genres_table.c.movieid == movie_id))
                    await conn.execute(delete(ratings_table).where(ratings_table.c.movieid == movie_id))
                    result = await conn.execute(delete(movies_table).where(movies_table.c.id == movie_id))
                    if result.rowcount == 0:
                        await tx.rollback()
                        return False
        logger.info("Deleted movie %s", movie_id)
        return True

    async def exists_by_id(self, movie_id: uuid.UUID) -> bool:
        with storage_errors("movies.exists_by_id"):
            async with self._db.connect() as conn:
                found = (
                    await conn.execute(select(movies_table.c.id).where(movies_table.c.id == movie_id).limit(1))
                ).first()
        return found is not None


def get_movies_repository() -> MovieRepositoryProtocol:
    """
    Factory/dependency for the movies repository.
    `MOVIES_REPOSITORY_BACKEND=memory` selects the process-wide in-memory store.
    """
    if settings.MOVIES_REPOSITORY_BACKEND == "memory":
        from movies_api.repositories.memory import MemoryMovieRepository, default_store

        return MemoryMovieRepository(default_store)
    return SqlMovieRepository(connection_factory)


__all__ = [
    "MovieRepositoryProtocol",
    "SqlMovieRepository",
    "SORT_COLUMNS",
    "build_filters",
    "movie_select",
    "list_select",
    "count_select",
    "get_movies_repository",
]
