from __future__ import annotations

"""
Query Option Normalizer
=======================
Turns raw listing parameters (title filter, year filter, sort token, page,
page size, acting user) into a validated `ListMoviesOptions`.

Every failure is collected before raising, so callers get all field messages
at once. Pure: no I/O, and the only clock read is the current year when the
caller does not pass one.
"""

import enum
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from movies_api.core.config import settings
from movies_api.core.exceptions import ValidationError, ValidationFailedException


class SortField(str, enum.Enum):
    TITLE = "title"
    YEAR_OF_RELEASE = "yearofrelease"


class SortOrder(str, enum.Enum):
    UNSORTED = "unsorted"
    ASCENDING = "ascending"
    DESCENDING = "descending"


SORT_FIELD_MESSAGE = "You can only sort by 'title' or 'yearofrelease'."


@dataclass(frozen=True)
class ListMoviesOptions:
    title: Optional[str] = None
    year_of_release: Optional[int] = None
    sort_field: Optional[SortField] = None
    sort_order: SortOrder = SortOrder.UNSORTED
    page: int = 1
    page_size: int = 10
    user_id: Optional[uuid.UUID] = None

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    @property
    def is_sorted(self) -> bool:
        return self.sort_field is not None and self.sort_order is not SortOrder.UNSORTED


def parse_sort_token(token: Optional[str]) -> Tuple[Optional[str], SortOrder]:
    """Split a sort token into (field name, order).

    `None` or blank → `(None, UNSORTED)`; a leading `-` means descending,
    a leading `+` or no prefix means ascending.
    """
    if token is None or not token.strip():
        return None, SortOrder.UNSORTED
    token = token.strip()
    order = SortOrder.DESCENDING if token.startswith("-") else SortOrder.ASCENDING
    return token.lstrip("+-"), order


def build_list_options(
    *,
    title: Optional[str] = None,
    year_of_release: Optional[int] = None,
    sort_by: Optional[str] = None,
    page: Optional[int] = None,
    page_size: Optional[int] = None,
    user_id: Optional[uuid.UUID] = None,
    current_year: Optional[int] = None,
) -> ListMoviesOptions:
    """Validate raw listing parameters.

    Raises
    ------
    ValidationFailedException
        With one entry per failing field; nothing downstream runs.
    """
    errors: List[ValidationError] = []
    year_now = current_year if current_year is not None else datetime.now(timezone.utc).year
    page = 1 if page is None else page
    page_size = settings.DEFAULT_PAGE_SIZE if page_size is None else page_size

    if year_of_release is not None and year_of_release > year_now:
        errors.append(ValidationError("year_of_release", "Year of release cannot be in the future."))

    field_name, order = parse_sort_token(sort_by)
    sort_field: Optional[SortField] = None
    if field_name is not None:
        try:
            sort_field = SortField(field_name.lower())
        except ValueError:
            errors.append(ValidationError("sort_by", SORT_FIELD_MESSAGE))

    if page < 1:
        errors.append(ValidationError("page", "Page must be greater than or equal to 1."))

    if not 1 <= page_size <= settings.MAX_PAGE_SIZE:
        errors.append(
            ValidationError("page_size", f"You can get between 1 and {settings.MAX_PAGE_SIZE} movies per page.")
        )

    if errors:
        raise ValidationFailedException(errors=errors)

    return ListMoviesOptions(
        title=title if title else None,
        year_of_release=year_of_release,
        sort_field=sort_field,
        sort_order=order if sort_field is not None else SortOrder.UNSORTED,
        page=page,
        page_size=page_size,
        user_id=user_id,
    )


__all__ = [
    "SortField",
    "SortOrder",
    "SORT_FIELD_MESSAGE",
    "ListMoviesOptions",
    "parse_sort_token",
    "build_list_options",
]
