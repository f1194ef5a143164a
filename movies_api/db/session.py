# movies_api/db/session.py
from __future__ import annotations

"""
Movies API · Database Engine & Connection Provider

- One pooled `AsyncEngine` per process (asyncpg in prod, aiosqlite in tests).
- `DbConnectionFactory` is the only storage abstraction repositories depend
  on: `connect()` yields one pooled `AsyncConnection` per logical operation,
  `transaction()` yields a connection inside `BEGIN` that commits on success
  and rolls back on any exception, cancellation included.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine

from movies_api.core.config import settings

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────────────

def _derive_async_url(url: str) -> str:
    """Convert a sync Postgres/SQLite URL to its async driver form if needed."""
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if url.startswith("sqlite://"):
        return url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    return url


def _engine_kwargs(url: str) -> Dict[str, Any]:
    """Pool knobs only apply to queue pools; SQLite engines reject them."""
    kwargs: Dict[str, Any] = {"echo": settings.DB_ECHO, "pool_pre_ping": True}
    if url.startswith("postgresql"):
        kwargs.update(
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_timeout=settings.DB_POOL_TIMEOUT,
            pool_recycle=settings.DB_POOL_RECYCLE,
        )
    return kwargs


def build_engine(url: Optional[str] = None, **overrides: Any) -> AsyncEngine:
    resolved = _derive_async_url(url or settings.DATABASE_URL)
    kwargs = _engine_kwargs(resolved)
    kwargs.update(overrides)
    return create_async_engine(resolved, **kwargs)


# ─────────────────────────────────────────────────────────────
# ⚡ Connection provider
# ─────────────────────────────────────────────────────────────

class DbConnectionFactory:
    """Hands out pooled connections from one `AsyncEngine`."""

    def __init__(self, engine: AsyncEngine):
        self.engine = engine

    @asynccontextmanager
    async def connect(self) -> AsyncIterator[AsyncConnection]:
        async with self.engine.connect() as conn:
            yield conn

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[AsyncConnection]:
        async with self.engine.begin() as conn:
            yield conn

    async def dispose(self) -> None:
        await self.engine.dispose()


async_engine: AsyncEngine = build_engine()
connection_factory = DbConnectionFactory(async_engine)


async def init_models(engine: Optional[AsyncEngine] = None) -> None:
    """Create `movies`, `genres` and `ratings` (and the slug index) if missing."""
    from movies_api.db.base import Base

    target = engine or async_engine
    async with target.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database schema ensured")


async def db_healthcheck(engine: Optional[AsyncEngine] = None) -> bool:
    """Quick SELECT 1 to verify DB connectivity (used by /readyz)."""
    try:
        async with (engine or async_engine).connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except Exception:
        logger.exception("DB healthcheck failed")
        return False


__all__ = [
    "DbConnectionFactory",
    "async_engine",
    "build_engine",
    "connection_factory",
    "init_models",
    "db_healthcheck",
]
