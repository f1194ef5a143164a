# tests/fixtures/app.py
"""
App fixtures:
- `create_app()` with the service dependencies pointed at a fresh in-memory store
- `TestClient` without lifespan (no schema creation, no engine dispose)
"""

import pytest
from fastapi.testclient import TestClient

from movies_api.dependencies.services import get_movie_service, get_rating_service
from movies_api.main import create_app
from movies_api.services.movie_service import MovieService
from movies_api.services.rating_service import RatingService


@pytest.fixture()
def app(memory_movies, memory_ratings):
    application = create_app()
    application.dependency_overrides[get_movie_service] = lambda: MovieService(memory_movies, memory_ratings)
    application.dependency_overrides[get_rating_service] = lambda: RatingService(memory_ratings, memory_movies)
    yield application
    application.dependency_overrides.clear()


@pytest.fixture()
def client(app) -> TestClient:
    return TestClient(app)


__all__ = ["app", "client"]
