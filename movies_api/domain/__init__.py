from movies_api.domain.movie import Movie, MovieRating, generate_slug
from movies_api.domain.options import (
    ListMoviesOptions,
    SortField,
    SortOrder,
    build_list_options,
    parse_sort_token,
)

__all__ = [
    "Movie",
    "MovieRating",
    "generate_slug",
    "ListMoviesOptions",
    "SortField",
    "SortOrder",
    "build_list_options",
    "parse_sort_token",
]
