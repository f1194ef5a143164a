from __future__ import annotations

"""In-memory movies and ratings repositories.

Same filter, sort, paginate and aggregate semantics as the SQL repositories,
over plain Python structures. Used by tests and selectable at runtime with
`MOVIES_REPOSITORY_BACKEND=memory`.
"""

import uuid
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, List, Optional, Tuple

from movies_api.core.exceptions import StorageFailureException
from movies_api.domain.movie import Movie, MovieRating
from movies_api.domain.options import ListMoviesOptions, SortField, SortOrder
from movies_api.repositories.movies import MovieRepositoryProtocol
from movies_api.repositories.ratings import RatingRepositoryProtocol


@dataclass
class _MemoryMovie:
    id: uuid.UUID
    slug: str
    title: str
    year_of_release: int


@dataclass
class MemoryMovieStore:
    """Rows of the three tables: movies, genre rows and ratings keyed by (user, movie)."""

    movies: Dict[uuid.UUID, _MemoryMovie] = field(default_factory=dict)
    genres: List[Tuple[uuid.UUID, str]] = field(default_factory=list)
    ratings: Dict[Tuple[uuid.UUID, uuid.UUID], int] = field(default_factory=dict)

    def clear(self) -> None:
        self.movies.clear()
        self.genres.clear()
        self.ratings.clear()

    # Helpers
    def slug_taken(self, slug: str, except_id: Optional[uuid.UUID] = None) -> bool:
        return any(m.slug == slug and m.id != except_id for m in self.movies.values())

    def genres_of(self, movie_id: uuid.UUID) -> List[str]:
        return [name for (mid, name) in self.genres if mid == movie_id]

    def average_rating(self, movie_id: uuid.UUID) -> Optional[float]:
        values = [r for (_, mid), r in self.ratings.items() if mid == movie_id]
        if not values:
            return None
        avg = Decimal(sum(values)) / Decimal(len(values))
        return float(avg.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))

    def user_rating(self, movie_id: uuid.UUID, user_id: Optional[uuid.UUID]) -> Optional[int]:
        if user_id is None:
            return None
        return self.ratings.get((user_id, movie_id))


class MemoryMovieRepository(MovieRepositoryProtocol):
    def __init__(self, store: MemoryMovieStore):
        self._store = store

    def _to_movie(self, m: _MemoryMovie, user_id: Optional[uuid.UUID]) -> Movie:
        return Movie(
            id=m.id,
            title=m.title,
            year_of_release=m.year_of_release,
            genres=self._store.genres_of(m.id),
            rating=self._store.average_rating(m.id),
            user_rating=self._store.user_rating(m.id, user_id),
        )

    def _apply_filters(self, items: List[_MemoryMovie], title: Optional[str], year: Optional[int]) -> List[_MemoryMovie]:
        needle = title.lower() if title else None

        def ok(m: _MemoryMovie) -> bool:
            if needle is not None and needle not in m.title.lower():
                return False
            if year is not None and m.year_of_release != year:
                return False
            return True

        return [m for m in items if ok(m)]

    def _sort(self, items: List[_MemoryMovie], options: ListMoviesOptions) -> List[_MemoryMovie]:
        if not options.is_sorted:
            return items
        # id ascending is the tiebreaker; the stable sort keeps it under equal keys
        items.sort(key=lambda m: m.id)
        reverse = options.sort_order is SortOrder.DESCENDING
        if options.sort_field is SortField.TITLE:
            items.sort(key=lambda m: m.title, reverse=reverse)
        else:
            items.sort(key=lambda m: m.year_of_release, reverse=reverse)
        return items

    # Interface
    async def create(self, movie: Movie) -> bool:
        if movie.id in self._store.movies or self._store.slug_taken(movie.slug):
            raise StorageFailureException(operation="movies.create")
        self._store.movies[movie.id] = _MemoryMovie(movie.id, movie.slug, movie.title, movie.year_of_release)
        self._store.genres.extend((movie.id, name) for name in movie.genres)
        return True

    async def get_by_id(self, movie_id: uuid.UUID, user_id: Optional[uuid.UUID] = None) -> Optional[Movie]:
        m = self._store.movies.get(movie_id)
        return self._to_movie(m, user_id) if m else None

    async def get_by_slug(self, slug: str, user_id: Optional[uuid.UUID] = None) -> Optional[Movie]:
        for m in self._store.movies.values():
            if m.slug == slug:
                return self._to_movie(m, user_id)
        return None

    async def get_all(self, options: ListMoviesOptions) -> List[Movie]:
        items = self._apply_filters(list(self._store.movies.values()), options.title, options.year_of_release)
        items = self._sort(items, options)
        page_items = items[options.offset : options.offset + options.page_size]
        return [self._to_movie(m, options.user_id) for m in page_items]

    async def get_count(self, title: Optional[str], year_of_release: Optional[int]) -> int:
        return len(self._apply_filters(list(self._store.movies.values()), title, year_of_release))

    async def update(self, movie: Movie) -> bool:
        if movie.id not in self._store.movies:
            return False
        if self._store.slug_taken(movie.slug, except_id=movie.id):
            raise StorageFailureException(operation="movies.update")
        self._store.movies[movie.id] = _MemoryMovie(movie.id, movie.slug, movie.title, movie.year_of_release)
        self._store.genres = [(mid, name) for (mid, name) in self._store.genres if mid != movie.id]
        self._store.genres.extend((movie.id, name) for name in movie.genres)
        return True

    async def delete_by_id(self, movie_id: uuid.UUID) -> bool:
        if self._store.movies.pop(movie_id, None) is None:
            return False
        self._store.genres = [(mid, name) for (mid, name) in self._store.genres if mid != movie_id]
        for key in [k for k in self._store.ratings if k[1] == movie_id]:
            del self._store.ratings[key]
        return True

    async def exists_by_id(self, movie_id: uuid.UUID) -> bool:
        return movie_id in self._store.movies


class MemoryRatingRepository(RatingRepositoryProtocol):
    def __init__(self, store: MemoryMovieStore):
        self._store = store

    async def rate_movie(self, movie_id: uuid.UUID, rating: int, user_id: uuid.UUID) -> bool:
        if movie_id not in self._store.movies:
            # mirrors the foreign key on ratings.movieid
            raise StorageFailureException(operation="ratings.rate_movie")
        self._store.ratings[(user_id, movie_id)] = rating
        return True

    async def get_rating(self, movie_id: uuid.UUID) -> Optional[float]:
        return self._store.average_rating(movie_id)

    async def get_rating_for_user(
        self, movie_id: uuid.UUID, user_id: uuid.UUID
    ) -> Tuple[Optional[float], Optional[int]]:
        return self._store.average_rating(movie_id), self._store.user_rating(movie_id, user_id)

    async def delete_rating(self, movie_id: uuid.UUID, user_id: uuid.UUID) -> bool:
        return self._store.ratings.pop((user_id, movie_id), None) is not None

    async def get_user_ratings(self, user_id: uuid.UUID) -> List[MovieRating]:
        items = [
            MovieRating(movie_id=mid, slug=self._store.movies[mid].slug, rating=rating)
            for (uid, mid), rating in self._store.ratings.items()
            if uid == user_id and mid in self._store.movies
        ]
        return sorted(items, key=lambda r: r.slug)


# Process-wide store used when MOVIES_REPOSITORY_BACKEND=memory
default_store = MemoryMovieStore()

__all__ = ["MemoryMovieStore", "MemoryMovieRepository", "MemoryRatingRepository", "default_store"]
