# tests/test_repositories/test_sql_ratings.py

import uuid

import pytest

from movies_api.domain.movie import Movie, MovieRating


@pytest.fixture()
async def heat(sql_movies):
    movie = Movie(id=uuid.uuid4(), title="Heat", year_of_release=1995, genres=["Crime"])
    await sql_movies.create(movie)
    return movie


@pytest.mark.anyio
async def test_rating_twice_keeps_one_row_with_latest_value(sql_ratings, heat):
    user = uuid.uuid4()
    assert await sql_ratings.rate_movie(heat.id, 2, user) is True
    assert await sql_ratings.rate_movie(heat.id, 5, user) is True

    assert await sql_ratings.get_user_ratings(user) == [MovieRating(movie_id=heat.id, slug="heat-1995", rating=5)]
    assert await sql_ratings.get_rating(heat.id) == 5.0


@pytest.mark.anyio
async def test_unrated_movie_has_no_aggregate(sql_ratings, heat):
    assert await sql_ratings.get_rating(heat.id) is None
    assert await sql_ratings.get_rating_for_user(heat.id, uuid.uuid4()) == (None, None)


@pytest.mark.anyio
async def test_rating_for_user(sql_ratings, heat):
    alice, bob = uuid.uuid4(), uuid.uuid4()
    await sql_ratings.rate_movie(heat.id, 3, alice)
    await sql_ratings.rate_movie(heat.id, 4, bob)

    assert await sql_ratings.get_rating_for_user(heat.id, alice) == (3.5, 3)
    assert await sql_ratings.get_rating_for_user(heat.id, uuid.uuid4()) == (3.5, None)


@pytest.mark.anyio
async def test_delete_rating(sql_ratings, heat):
    user = uuid.uuid4()
    await sql_ratings.rate_movie(heat.id, 4, user)

    assert await sql_ratings.delete_rating(heat.id, user) is True
    assert await sql_ratings.delete_rating(heat.id, user) is False
    assert await sql_ratings.get_rating(heat.id) is None


@pytest.mark.anyio
async def test_user_ratings_only_include_the_user(sql_movies, sql_ratings, heat):
    casino = Movie(id=uuid.uuid4(), title="Casino", year_of_release=1995, genres=["Crime"])
    await sql_movies.create(casino)
    alice, bob = uuid.uuid4(), uuid.uuid4()
    await sql_ratings.rate_movie(heat.id, 5, alice)
    await sql_ratings.rate_movie(casino.id, 3, alice)
    await sql_ratings.rate_movie(heat.id, 1, bob)

    mine = await sql_ratings.get_user_ratings(alice)
    assert [(r.slug, r.rating) for r in mine] == [("casino-1995", 3), ("heat-1995", 5)]
