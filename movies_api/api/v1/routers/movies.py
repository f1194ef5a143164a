# movies_api/api/v1/routers/movies.py
# ╔══════════════════════════════════════════════════════════════════════════╗
# ║ 🎬 Movies API · Movies                                                   ║
# ║                                                                          ║
# ║ Endpoints:                                                               ║
# ║  - POST   /movies                 → Create (trusted member)              ║
# ║  - GET    /movies/{id_or_slug}    → Detail by id or slug (cached)        ║
# ║  - GET    /movies                 → Filtered, sorted, paginated (cached) ║
# ║  - PUT    /movies/{movie_id}      → Update (trusted member)              ║
# ║  - DELETE /movies/{movie_id}      → Delete (admin)                       ║
# ╠──────────────────────────────────────────────────────────────────────────╣
# ║ Notes                                                                    ║
# ║  - Listing parameters reach the normalizer raw; it owns the messages.    ║
# ║  - Reads are cached per user under the `movies` tag; writes evict it.    ║
# ║  - RFC 5988 pagination headers (`Link`) + `X-Total-Count`.               ║
# ╚══════════════════════════════════════════════════════════════════════════╝

from __future__ import annotations

import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, Request, Response, status
from fastapi.responses import JSONResponse

from movies_api.api.http_utils import (
    cache_generation,
    cached_json_response,
    get_cached_response,
    pagination_headers,
)
from movies_api.cache.invalidation import invalidate_movie_caches
from movies_api.core.config import settings
from movies_api.core.exceptions import StorageFailureException
from movies_api.core.security import Principal
from movies_api.dependencies.auth import get_optional_user_id, require_admin, require_trusted_member
from movies_api.dependencies.services import get_movie_service
from movies_api.domain.options import build_list_options
from movies_api.schemas.movies import CreateMovieRequest, MovieResponse, MoviesResponse, UpdateMovieRequest
from movies_api.services.movie_service import MovieService

log = logging.getLogger(__name__)
router = APIRouter(
    prefix="/movies",
    tags=["Movies"],
    responses={
        400: {"description": "Bad Request"},
        401: {"description": "Unauthorized"},
        403: {"description": "Forbidden"},
        404: {"description": "Not Found"},
        500: {"description": "Internal Server Error"},
    },
)


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Movie not found")


# ╔════════════════════════════════ Writes ═══════════════════════════════════╗

@router.post(
    "",
    response_model=MovieResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a movie",
)
async def create_movie(
    request: Request,
    body: CreateMovieRequest,
    principal: Principal = Depends(require_trusted_member),
    service: MovieService = Depends(get_movie_service),
):
    """Create a movie with a fresh id; its slug is derived from title + year.

    Steps
    -----
    1) Validate (400 with field errors; nothing is written).
    2) Insert movie + genres in one transaction.
    3) Evict cached movie responses.
    4) 201 with `Location` pointing at the new resource.
    """
    movie = body.to_movie()
    if not await service.create(movie):
        raise StorageFailureException(operation="movies.create")

    await invalidate_movie_caches()
    log.info("Movie %s created by %s", movie.id, principal.user_id)

    payload = MovieResponse.from_movie(movie).model_dump(mode="json")
    location = str(request.url_for("get_movie", id_or_slug=str(movie.id)))
    return JSONResponse(status_code=status.HTTP_201_CREATED, content=payload, headers={"Location": location})


@router.put("/{movie_id}", response_model=MovieResponse, summary="Update a movie")
async def update_movie(
    body: UpdateMovieRequest,
    movie_id: uuid.UUID = Path(..., description="Movie id"),
    principal: Principal = Depends(require_trusted_member),
    service: MovieService = Depends(get_movie_service),
) -> MovieResponse:
    """Replace title, year and genres; returns the movie with its current ratings."""
    updated = await service.update(body.to_movie(movie_id), user_id=principal.user_id)
    if updated is None:
        raise _not_found()

    await invalidate_movie_caches()
    return MovieResponse.from_movie(updated)


@router.delete("/{movie_id}", summary="Delete a movie")
async def delete_movie(
    movie_id: uuid.UUID = Path(..., description="Movie id"),
    _admin: Principal = Depends(require_admin),
    service: MovieService = Depends(get_movie_service),
) -> Response:
    if not await service.delete_by_id(movie_id):
        raise _not_found()

    await invalidate_movie_caches()
    return Response(status_code=status.HTTP_200_OK)


# ╔════════════════════════════════ Reads ════════════════════════════════════╗

@router.get("/{id_or_slug}", response_model=MovieResponse, name="get_movie", summary="Get a movie by id or slug")
async def get_movie(
    request: Request,
    id_or_slug: str = Path(..., description="Movie id (UUID) or slug"),
    user_id: Optional[uuid.UUID] = Depends(get_optional_user_id),
    service: MovieService = Depends(get_movie_service),
):
    ttl = settings.MOVIES_CACHE_TTL_SECONDS
    generation = cache_generation()
    cached = get_cached_response(request, user_id, ttl=ttl)
    if cached is not None:
        return cached

    movie = await service.get_by_id_or_slug(id_or_slug, user_id)
    if movie is None:
        raise _not_found()

    payload = MovieResponse.from_movie(movie).model_dump(mode="json")
    return cached_json_response(request, payload, ttl=ttl, user_id=user_id, generation=generation)


@router.get("", response_model=MoviesResponse, summary="List movies (filtered, sorted, paginated)")
async def list_movies(
    request: Request,
    title: Optional[str] = Query(None, description="Case-insensitive substring of the title"),
    year: Optional[int] = Query(None, description="Exact year of release"),
    sort_by: Optional[str] = Query(None, description="title|yearofrelease, '-' prefix for descending"),
    page: Optional[int] = Query(None, description="1-based page number (default 1)"),
    page_size: Optional[int] = Query(None, description="Items per page (default 10, max 25)"),
    user_id: Optional[uuid.UUID] = Depends(get_optional_user_id),
    service: MovieService = Depends(get_movie_service),
):
    """Paginated listing with a total count.

    Steps
    -----
    1) Serve the cached snapshot when present (still validates ETag).
    2) Normalize parameters (400 on any invalid field; no query runs).
    3) Fetch the page and the total concurrently.
    4) Shape payload + pagination headers; cache under the `movies` tag unless
       a write evicted it while the queries ran.
    """
    ttl = settings.MOVIES_CACHE_TTL_SECONDS
    # captured before any query so a concurrent write can veto the store
    generation = cache_generation()

    # (1) Hot path
    cached = get_cached_response(request, user_id, ttl=ttl)
    if cached is not None:
        return cached

    # (2) Normalize
    options = build_list_options(
        title=title,
        year_of_release=year,
        sort_by=sort_by,
        page=page,
        page_size=page_size,
        user_id=user_id,
    )

    # (3) Query
    movies, total = await service.list_movies(options)

    # (4) Shape
    payload = MoviesResponse(
        items=[MovieResponse.from_movie(m) for m in movies],
        page=options.page,
        page_size=options.page_size,
        total=total,
        has_next_page=total > options.page * options.page_size,
    ).model_dump(mode="json")
    headers = pagination_headers(request, page=options.page, page_size=options.page_size, total=total)
    return cached_json_response(
        request, payload, ttl=ttl, user_id=user_id, extra_headers=headers, generation=generation
    )


__all__ = ["router"]
