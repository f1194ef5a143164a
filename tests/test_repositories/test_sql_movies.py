# tests/test_repositories/test_sql_movies.py
"""SQL movies repository against a throwaway SQLite database."""

import uuid

import pytest

from movies_api.core.exceptions import StorageFailureException
from movies_api.domain.movie import Movie
from movies_api.domain.options import build_list_options

YEAR = 2026


def _movie(title, year, genres=("Drama",)):
    return Movie(id=uuid.uuid4(), title=title, year_of_release=year, genres=list(genres))


async def _seed(repo, *movies):
    for m in movies:
        assert await repo.create(m) is True
    return movies


def _options(**kw):
    kw.setdefault("current_year", YEAR)
    return build_list_options(**kw)


# ─────────────────────────────────────────────────────────────
# Create / read
# ─────────────────────────────────────────────────────────────

@pytest.mark.anyio
async def test_create_then_read_back_by_id_and_slug(sql_movies):
    movie = _movie("Dalmations 101", 2024, ["Animation", "Family"])
    await _seed(sql_movies, movie)

    by_id = await sql_movies.get_by_id(movie.id)
    assert by_id is not None
    assert by_id.title == "Dalmations 101"
    assert by_id.year_of_release == 2024
    assert sorted(by_id.genres) == ["Animation", "Family"]
    assert by_id.slug == "dalmations-101-2024"
    assert by_id.rating is None
    assert by_id.user_rating is None

    by_slug = await sql_movies.get_by_slug("dalmations-101-2024")
    assert by_slug is not None and by_slug.id == movie.id


@pytest.mark.anyio
async def test_missing_movie_is_none(sql_movies):
    assert await sql_movies.get_by_id(uuid.uuid4()) is None
    assert await sql_movies.get_by_slug("nope-2000") is None
    assert await sql_movies.exists_by_id(uuid.uuid4()) is False


@pytest.mark.anyio
async def test_movie_without_genres_still_listed(sql_movies):
    movie = _movie("Silent", 1990, genres=())
    await _seed(sql_movies, movie)

    found = await sql_movies.get_by_id(movie.id)
    assert found is not None and found.genres == []
    assert [m.id for m in await sql_movies.get_all(_options())] == [movie.id]


@pytest.mark.anyio
async def test_duplicate_slug_is_a_storage_failure(sql_movies):
    await _seed(sql_movies, _movie("Heat", 1995))
    with pytest.raises(StorageFailureException):
        await sql_movies.create(_movie("Heat", 1995))


# ─────────────────────────────────────────────────────────────
# Filter / sort / paginate / count
# ─────────────────────────────────────────────────────────────

@pytest.mark.anyio
async def test_title_filter_is_case_insensitive_substring(sql_movies):
    await _seed(
        sql_movies,
        _movie("Dalmations 101", 2024),
        _movie("The Dalmatian Returns", 2020),
        _movie("Heat", 1995),
    )
    titles = sorted(m.title for m in await sql_movies.get_all(_options(title="DALMA")))
    assert titles == ["Dalmations 101", "The Dalmatian Returns"]
    assert await sql_movies.get_count("dalma", None) == 2


@pytest.mark.anyio
async def test_title_filter_escapes_like_wildcards(sql_movies):
    await _seed(sql_movies, _movie("100% Wolf", 2020), _movie("Up", 2009), _movie("snake_eyes", 1998))

    assert [m.title for m in await sql_movies.get_all(_options(title="%"))] == ["100% Wolf"]
    assert [m.title for m in await sql_movies.get_all(_options(title="_"))] == ["snake_eyes"]


@pytest.mark.anyio
async def test_year_filter_and_combined_filters(sql_movies):
    await _seed(sql_movies, _movie("Heat", 1995), _movie("Casino", 1995), _movie("Heat Wave", 2001))

    assert sorted(m.title for m in await sql_movies.get_all(_options(year_of_release=1995))) == ["Casino", "Heat"]
    assert [m.title for m in await sql_movies.get_all(_options(title="heat", year_of_release=1995))] == ["Heat"]
    assert await sql_movies.get_count("heat", 1995) == 1
    assert await sql_movies.get_count(None, None) == 3


@pytest.mark.anyio
async def test_sort_ascending_and_descending(sql_movies):
    await _seed(sql_movies, _movie("B", 2001), _movie("C", 1999), _movie("A", 2005))

    asc = await sql_movies.get_all(_options(sort_by="title"))
    assert [m.title for m in asc] == ["A", "B", "C"]

    desc = await sql_movies.get_all(_options(sort_by="-yearofrelease"))
    assert [m.year_of_release for m in desc] == [2005, 2001, 1999]


@pytest.mark.anyio
async def test_equal_sort_keys_are_stable_across_pages(sql_movies):
    movies = [_movie(f"Movie {i}", 2000) for i in range(5)]
    await _seed(sql_movies, *movies)

    seen = []
    for page in (1, 2, 3):
        seen.extend(m.id for m in await sql_movies.get_all(_options(sort_by="yearofrelease", page=page, page_size=2)))
    assert sorted(seen) == sorted(m.id for m in movies)
    assert len(set(seen)) == 5


@pytest.mark.anyio
async def test_pagination_and_count_agree(sql_movies):
    await _seed(sql_movies, *[_movie(f"Title {i:02d}", 2000 + i) for i in range(12)])

    first = await sql_movies.get_all(_options(sort_by="title"))
    second = await sql_movies.get_all(_options(sort_by="title", page=2))
    beyond = await sql_movies.get_all(_options(sort_by="title", page=5))

    assert len(first) == 10
    assert len(second) == 2
    assert beyond == []
    assert [m.title for m in second] == ["Title 10", "Title 11"]
    assert await sql_movies.get_count(None, None) == len(first) + len(second)


# ─────────────────────────────────────────────────────────────
# Ratings joined into reads
# ─────────────────────────────────────────────────────────────

@pytest.mark.anyio
async def test_reads_carry_average_and_personal_rating(sql_movies, sql_ratings):
    movie = _movie("Heat", 1995, ["Crime", "Drama", "Thriller"])
    await _seed(sql_movies, movie)
    alice, bob = uuid.uuid4(), uuid.uuid4()
    await sql_ratings.rate_movie(movie.id, 4, alice)
    await sql_ratings.rate_movie(movie.id, 5, bob)

    anonymous = await sql_movies.get_by_id(movie.id)
    assert anonymous.rating == 4.5
    assert anonymous.user_rating is None
    # three genre rows must not skew the average
    assert sorted(anonymous.genres) == ["Crime", "Drama", "Thriller"]

    personal = await sql_movies.get_by_slug("heat-1995", user_id=alice)
    assert personal.rating == 4.5
    assert personal.user_rating == 4

    stranger = await sql_movies.get_all(_options(user_id=uuid.uuid4()))
    assert stranger[0].rating == 4.5
    assert stranger[0].user_rating is None


@pytest.mark.anyio
async def test_average_is_rounded_to_one_decimal(sql_movies, sql_ratings):
    movie = _movie("Heat", 1995)
    await _seed(sql_movies, movie)
    for value in (4, 4, 5):
        await sql_ratings.rate_movie(movie.id, value, uuid.uuid4())

    assert (await sql_movies.get_by_id(movie.id)).rating == 4.3


# ─────────────────────────────────────────────────────────────
# Update / delete
# ─────────────────────────────────────────────────────────────

@pytest.mark.anyio
async def test_update_replaces_genres_and_slug(sql_movies):
    movie = _movie("Dalmations 101", 2024, ["Animation", "Family"])
    await _seed(sql_movies, movie)

    movie.genres = ["Animation", "Family", "Adventure"]
    assert await sql_movies.update(movie) is True
    found = await sql_movies.get_by_slug("dalmations-101-2024")
    assert sorted(found.genres) == ["Adventure", "Animation", "Family"]

    movie.title = "Dalmations 102"
    assert await sql_movies.update(movie) is True
    assert await sql_movies.get_by_slug("dalmations-101-2024") is None
    assert (await sql_movies.get_by_slug("dalmations-102-2024")).id == movie.id


@pytest.mark.anyio
async def test_update_of_missing_movie_writes_nothing(sql_movies):
    ghost = _movie("Ghost", 1990, ["Drama"])
    assert await sql_movies.update(ghost) is False
    assert await sql_movies.get_by_id(ghost.id) is None
    assert await sql_movies.get_count(None, None) == 0


@pytest.mark.anyio
async def test_failed_genre_insert_rolls_back_the_create(sql_movies):
    broken = _movie("Heat", 1995, ["Crime", None])

    with pytest.raises(StorageFailureException):
        await sql_movies.create(broken)

    assert await sql_movies.get_count(None, None) == 0
    assert await sql_movies.get_by_slug("heat-1995") is None


@pytest.mark.anyio
async def test_failed_genre_insert_rolls_back_the_update(sql_movies):
    movie = _movie("Heat", 1995, ["Crime", "Drama"])
    await _seed(sql_movies, movie)

    renamed = Movie(id=movie.id, title="Heat 2", year_of_release=1995, genres=["Thriller", None])
    with pytest.raises(StorageFailureException):
        await sql_movies.update(renamed)

    found = await sql_movies.get_by_id(movie.id)
    assert found.title == "Heat"
    assert sorted(found.genres) == ["Crime", "Drama"]
    assert await sql_movies.get_by_slug("heat-2-1995") is None


@pytest.mark.anyio
async def test_delete_removes_movie_genres_and_ratings(sql_movies, sql_ratings):
    movie = _movie("Dalmations 101", 2024, ["Animation", "Family"])
    await _seed(sql_movies, movie)
    user = uuid.uuid4()
    await sql_ratings.rate_movie(movie.id, 5, user)

    assert await sql_movies.delete_by_id(movie.id) is True
    assert await sql_movies.get_by_id(movie.id) is None
    assert await sql_movies.get_by_slug("dalmations-101-2024") is None
    assert await sql_ratings.get_user_ratings(user) == []
    assert await sql_movies.delete_by_id(movie.id) is False


@pytest.mark.anyio
async def test_exists_by_id(sql_movies):
    movie = _movie("Heat", 1995)
    await _seed(sql_movies, movie)
    assert await sql_movies.exists_by_id(movie.id) is True
