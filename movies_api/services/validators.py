from __future__ import annotations

"""Movie payload validation run before create and update."""

from datetime import datetime, timezone
from typing import List, Optional

from movies_api.core.exceptions import ValidationError, ValidationFailedException
from movies_api.domain.movie import Movie
from movies_api.repositories.movies import MovieRepositoryProtocol

DUPLICATE_SLUG_MESSAGE = "This movie already exists in the system"


class MovieValidator:
    """Field rules first; the slug uniqueness lookup only runs on a well-formed movie."""

    def __init__(self, repository: MovieRepositoryProtocol):
        self._repository = repository

    @staticmethod
    def field_errors(movie: Movie, *, current_year: Optional[int] = None) -> List[ValidationError]:
        year_now = current_year if current_year is not None else datetime.now(timezone.utc).year
        errors: List[ValidationError] = []
        if not movie.title or not movie.title.strip():
            errors.append(ValidationError("title", "Title must not be empty."))
        if movie.year_of_release > year_now:
            errors.append(ValidationError("year_of_release", "Year of release cannot be in the future."))
        if not movie.genres:
            errors.append(ValidationError("genres", "At least one genre is required."))
        return errors

    async def validate(self, movie: Movie, *, current_year: Optional[int] = None) -> None:
        """Raise `ValidationFailedException` listing every failing field."""
        errors = self.field_errors(movie, current_year=current_year)
        if errors:
            raise ValidationFailedException(errors=errors)

        existing = await self._repository.get_by_slug(movie.slug)
        if existing is not None and existing.id != movie.id:
            raise ValidationFailedException(errors=[ValidationError("slug", DUPLICATE_SLUG_MESSAGE)])


__all__ = ["MovieValidator", "DUPLICATE_SLUG_MESSAGE"]
