"""
🧭 Movies API • v1 Router Aggregator
===================================

Exports the **combined `router`** (ready to include) and each individual
sub-router.

Quick usage
-----------
    from movies_api.api.v1.routers import router as v1_router
    app.include_router(v1_router, prefix="/api/v1")

Auth and caching live in the child routers; this layer only composes them.
"""

from fastapi import APIRouter

from .movies import router as movies_router
from .ratings import router as ratings_router


def build_v1_router() -> APIRouter:
    """Compose the API v1 surface (`/movies`, `/movies/{id}/ratings`, `/ratings/me`)."""
    r = APIRouter()
    r.include_router(movies_router)
    r.include_router(ratings_router)
    return r


router = build_v1_router()

__all__ = ["router", "build_v1_router", "movies_router", "ratings_router"]
