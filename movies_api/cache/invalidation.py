# movies_api/cache/invalidation.py
from __future__ import annotations

"""
# Movies API · Output Cache Invalidation

Evicts cached read responses after writes so listings and detail pages never
serve stale titles, genres or rating aggregates.

## Key properties
- Tag-based: every cached movie response is registered under `MOVIES_CACHE_TAG`.
- Async signature so routers can `await` it the same way they await storage.
- Never raises: a cache problem must not fail a write that already committed.

## Public API
- invalidate_movie_caches(cache=None) -> int

## Usage
>>> removed = await invalidate_movie_caches()
"""

import logging
from typing import Optional

from movies_api.core.cache import TaggedTTLCache, movies_cache

MOVIES_CACHE_TAG = "movies"

__all__ = ["MOVIES_CACHE_TAG", "invalidate_movie_caches"]

logger = logging.getLogger(__name__)


async def invalidate_movie_caches(cache: Optional[TaggedTTLCache] = None) -> int:
    """
    Evict every response cached under the `movies` tag.

    Parameters
    ----------
    cache : TaggedTTLCache | None
        Cache to evict from. Defaults to the process-wide `movies_cache`.

    Returns
    -------
    int
        Number of live entries removed.
    """
    target = cache if cache is not None else movies_cache
    try:
        removed = target.evict_by_tag(MOVIES_CACHE_TAG)
    except Exception:  # pragma: no cover
        logger.exception("Movie cache invalidation failed")
        return 0
    logger.debug("Evicted %d cached movie responses", removed)
    return removed
