# movies_api/main.py
from __future__ import annotations

"""
# Movies API · Application Entrypoint (FastAPI)

ASGI application factory and lifecycle for the movie catalog service.

## Design Goals
- Deterministic, testable **app factory** (`create_app`) with explicit lifespan.
- Explicit **middleware order**: 1) request id → 2) CORS → 3) gzip.
- Centralized exception handling (problem+json bodies, no internals leaked).

## Probes
- `/healthz`: liveness (process up).
- `/readyz`: readiness (quick DB check).
"""

import logging
import os
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.gzip import GZipMiddleware
from starlette.responses import JSONResponse

# Importing sets up Loguru sinks + stdlib intercept.
from movies_api.core import logger as _logsetup  # noqa: F401
from movies_api.api.v1.routers import router as api_v1_router
from movies_api.core.config import settings
from movies_api.core.exception_handlers import (
    app_exception_handler,
    global_exception_handler,
    http_exception_handler,
    validation_exception_handler,
)
from movies_api.core.exceptions import AppException
from movies_api.db.session import async_engine, db_healthcheck, init_models
from movies_api.middleware.request_id import RequestIDMiddleware

logger = logging.getLogger("movies_api")


# ─────────────────────────────────────────────────────────────────────────────
# 🔄 Lifespan: startup & shutdown
# ─────────────────────────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Startup:
        - Ensure the schema exists (SQL backend only).

    Shutdown:
        - Dispose the DB async engine.
    """
    logger.info("Movies API starting up (backend=%s)", settings.MOVIES_REPOSITORY_BACKEND)
    if settings.MOVIES_REPOSITORY_BACKEND == "sql":
        await init_models()

    try:
        yield
    finally:
        await async_engine.dispose()
        logger.info("Movies API shutting down")


# ─────────────────────────────────────────────────────────────────────────────
# 🏗️ App factory
# ─────────────────────────────────────────────────────────────────────────────
def create_app() -> FastAPI:
    """
    Build and configure the FastAPI app instance.

    Returns:
        FastAPI: application with middleware, exception handlers, routers and
        health/readiness endpoints.
    """
    enable_docs = settings.ENABLE_DOCS
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        docs_url="/docs" if enable_docs else None,
        redoc_url="/redoc" if enable_docs else None,
        openapi_url="/openapi.json" if enable_docs else None,
        lifespan=lifespan,
    )

    # ── Middlewares (last added runs first) ─────────────────────────────────
    app.add_middleware(GZipMiddleware, minimum_size=1024)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Total-Count", "Link", "ETag", "Location"],
    )
    app.add_middleware(RequestIDMiddleware)

    # ── Exception handlers ──────────────────────────────────────────────────
    app.add_exception_handler(AppException, app_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(HTTPException, http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, global_exception_handler)  # type: ignore[arg-type]

    # ── Routers (versioned API) ─────────────────────────────────────────────
    app.include_router(api_v1_router, prefix=settings.API_V1_STR)

    # ── Meta endpoints ──────────────────────────────────────────────────────
    @app.get("/healthz", tags=["meta"])
    async def healthz() -> dict[str, bool]:
        """Liveness probe. No external checks."""
        return {"ok": True}

    @app.get("/readyz", tags=["meta"])
    async def readyz() -> JSONResponse:
        """Readiness probe: `SELECT 1` against the database (skipped for the memory backend)."""
        if settings.MOVIES_REPOSITORY_BACKEND == "memory":
            db_ok = True
        else:
            db_ok = await db_healthcheck()
        return JSONResponse(
            status_code=200 if db_ok else 503,
            content={"ready": db_ok, "checks": {"db": db_ok}},
        )

    @app.get("/", include_in_schema=False)
    async def root() -> JSONResponse:
        return JSONResponse({"name": settings.PROJECT_NAME, "docs": app.docs_url or "", "version": settings.VERSION})

    return app


# ─────────────────────────────────────────────────────────────────────────────
# 🚀 Module-level ASGI app for Uvicorn
# ─────────────────────────────────────────────────────────────────────────────
app = create_app()
__all__ = ["create_app", "app"]


# Local dev runner (prefer: `uvicorn movies_api.main:app --reload`)
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "movies_api.main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", "8000")),
        reload=os.getenv("RELOAD", "1") == "1",
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )
