"""Service wiring. Routers depend on these; tests override them."""

from movies_api.repositories.movies import get_movies_repository
from movies_api.repositories.ratings import get_ratings_repository
from movies_api.services.movie_service import MovieService
from movies_api.services.rating_service import RatingService


def get_movie_service() -> MovieService:
    return MovieService(get_movies_repository(), get_ratings_repository())


def get_rating_service() -> RatingService:
    return RatingService(get_ratings_repository(), get_movies_repository())


__all__ = ["get_movie_service", "get_rating_service"]
