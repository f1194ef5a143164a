# tests/test_domain/test_list_options.py

import uuid

import pytest

from movies_api.core.exceptions import ValidationFailedException
from movies_api.domain.options import (
    SORT_FIELD_MESSAGE,
    ListMoviesOptions,
    SortField,
    SortOrder,
    build_list_options,
    parse_sort_token,
)

YEAR = 2026


def _errors(exc_info):
    return {e.property_name: e.message for e in exc_info.value.errors}


# ─────────────────────────────────────────────────────────────
# Sort token parsing
# ─────────────────────────────────────────────────────────────

@pytest.mark.parametrize(
    "token, expected",
    [
        (None, (None, SortOrder.UNSORTED)),
        ("", (None, SortOrder.UNSORTED)),
        ("   ", (None, SortOrder.UNSORTED)),
        ("title", ("title", SortOrder.ASCENDING)),
        ("+title", ("title", SortOrder.ASCENDING)),
        ("-yearofrelease", ("yearofrelease", SortOrder.DESCENDING)),
        (" -title ", ("title", SortOrder.DESCENDING)),
    ],
)
def test_parse_sort_token(token, expected):
    assert parse_sort_token(token) == expected


# ─────────────────────────────────────────────────────────────
# Normalizer
# ─────────────────────────────────────────────────────────────

def test_defaults_when_nothing_is_given():
    options = build_list_options(current_year=YEAR)
    assert options == ListMoviesOptions()
    assert options.page == 1
    assert options.page_size == 10
    assert options.sort_field is None
    assert options.sort_order is SortOrder.UNSORTED
    assert not options.is_sorted
    assert options.offset == 0


def test_full_options_are_carried_through():
    user_id = uuid.uuid4()
    options = build_list_options(
        title="dal",
        year_of_release=2024,
        sort_by="-yearofrelease",
        page=3,
        page_size=25,
        user_id=user_id,
        current_year=YEAR,
    )
    assert options.title == "dal"
    assert options.year_of_release == 2024
    assert options.sort_field is SortField.YEAR_OF_RELEASE
    assert options.sort_order is SortOrder.DESCENDING
    assert options.page == 3
    assert options.page_size == 25
    assert options.user_id == user_id
    assert options.offset == 50


def test_sort_field_is_case_insensitive():
    options = build_list_options(sort_by="+Title", current_year=YEAR)
    assert options.sort_field is SortField.TITLE
    assert options.sort_order is SortOrder.ASCENDING


def test_unknown_sort_field_fails_validation():
    with pytest.raises(ValidationFailedException) as exc:
        build_list_options(sort_by="director", current_year=YEAR)
    assert _errors(exc) == {"sort_by": SORT_FIELD_MESSAGE}


def test_current_year_is_allowed_future_year_is_not():
    assert build_list_options(year_of_release=YEAR, current_year=YEAR).year_of_release == YEAR

    with pytest.raises(ValidationFailedException) as exc:
        build_list_options(year_of_release=YEAR + 1, current_year=YEAR)
    assert "year_of_release" in _errors(exc)


@pytest.mark.parametrize("page_size", [0, 26, -1])
def test_page_size_bounds(page_size):
    with pytest.raises(ValidationFailedException) as exc:
        build_list_options(page_size=page_size, current_year=YEAR)
    assert _errors(exc) == {"page_size": "You can get between 1 and 25 movies per page."}


@pytest.mark.parametrize("page_size", [1, 25])
def test_page_size_edges_are_valid(page_size):
    assert build_list_options(page_size=page_size, current_year=YEAR).page_size == page_size


def test_page_must_be_positive():
    with pytest.raises(ValidationFailedException) as exc:
        build_list_options(page=0, current_year=YEAR)
    assert set(_errors(exc)) == {"page"}


def test_all_failures_are_reported_together():
    with pytest.raises(ValidationFailedException) as exc:
        build_list_options(
            year_of_release=YEAR + 5,
            sort_by="director",
            page=0,
            page_size=100,
            current_year=YEAR,
        )
    assert set(_errors(exc)) == {"year_of_release", "sort_by", "page", "page_size"}
    assert exc.value.status_code == 400
    assert len(exc.value.details["errors"]) == 4


def test_empty_title_filter_is_treated_as_absent():
    assert build_list_options(title="", current_year=YEAR).title is None
