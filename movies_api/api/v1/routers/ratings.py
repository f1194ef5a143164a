# movies_api/api/v1/routers/ratings.py
# ╔══════════════════════════════════════════════════════════════════════════╗
# ║ ⭐ Movies API · Ratings (authenticated)                                   ║
# ║                                                                          ║
# ║  - PUT    /movies/{movie_id}/ratings  → Rate (upsert, 1..5)              ║
# ║  - DELETE /movies/{movie_id}/ratings  → Remove own rating                ║
# ║  - GET    /ratings/me                 → Own rating history               ║
# ╚══════════════════════════════════════════════════════════════════════════╝

from __future__ import annotations

import uuid
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Path, Response, status

from movies_api.cache.invalidation import invalidate_movie_caches
from movies_api.core.security import Principal
from movies_api.dependencies.auth import require_user
from movies_api.dependencies.services import get_rating_service
from movies_api.schemas.ratings import MovieRatingResponse, RateMovieRequest
from movies_api.services.rating_service import RatingService

router = APIRouter(tags=["Ratings"])


@router.put("/movies/{movie_id}/ratings", summary="Rate a movie")
async def rate_movie(
    body: RateMovieRequest,
    movie_id: uuid.UUID = Path(..., description="Movie id"),
    principal: Principal = Depends(require_user),
    service: RatingService = Depends(get_rating_service),
) -> Response:
    if not await service.rate_movie(movie_id, body.rating, principal.user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Movie not found")
    # aggregates changed
    await invalidate_movie_caches()
    return Response(status_code=status.HTTP_200_OK)


@router.delete("/movies/{movie_id}/ratings", summary="Remove your rating of a movie")
async def delete_rating(
    movie_id: uuid.UUID = Path(..., description="Movie id"),
    principal: Principal = Depends(require_user),
    service: RatingService = Depends(get_rating_service),
) -> Response:
    if not await service.delete_rating(movie_id, principal.user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Rating not found")
    await invalidate_movie_caches()
    return Response(status_code=status.HTTP_200_OK)


@router.get("/ratings/me", response_model=List[MovieRatingResponse], summary="Your ratings")
async def get_user_ratings(
    principal: Principal = Depends(require_user),
    service: RatingService = Depends(get_rating_service),
) -> List[MovieRatingResponse]:
    ratings = await service.get_user_ratings(principal.user_id)
    return [MovieRatingResponse.from_rating(r) for r in ratings]


__all__ = ["router"]
