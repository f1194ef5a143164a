from __future__ import annotations

import threading
import time
from typing import Any, Dict, Iterable, Mapping, Optional, Set


class TTLMap:
    """In-memory TTL map for small caches.

    - get(key) -> Optional[Any]
    - set(key, value, ttl_seconds)
    - delete(key)
    """

    def __init__(self, maxsize: int = 4096):
        self.maxsize = maxsize
        self._data: Dict[str, Any] = {}
        self._exp: Dict[str, float] = {}

    def __len__(self) -> int:
        return len(self._data)

    def get(self, key: str) -> Optional[Any]:
        exp = self._exp.get(key)
        if exp is None:
            return None
        if time.time() >= exp:
            self.delete(key)
            return None
        return self._data.get(key)

    def set(self, key: str, value: Any, ttl_seconds: int):
        if key not in self._data and len(self._data) >= self.maxsize:
            old_key = next(iter(self._data), None)
            if old_key is not None:
                self.delete(old_key)
        self._data[key] = value
        self._exp[key] = time.time() + ttl_seconds

    def delete(self, key: str) -> bool:
        self._exp.pop(key, None)
        return self._data.pop(key, None) is not None

    def clear(self) -> None:
        self._data.clear()
        self._exp.clear()


class TaggedTTLCache(TTLMap):
    """TTL map whose entries can be registered under tags and evicted per tag.

    Output-cached responses are stored with `tags=("movies",)` so a single
    `evict_by_tag("movies")` drops every listing and detail page at once.

    Every eviction bumps the tag's generation. A reader captures
    `generation(tag)` before it queries storage and passes it back to `set`;
    the store is skipped when an eviction happened in between, so a result
    computed before a write never outlives that write.
    """

    def __init__(self, maxsize: int = 4096):
        super().__init__(maxsize=maxsize)
        self._tags: Dict[str, Set[str]] = {}
        self._generations: Dict[str, int] = {}
        self._lock = threading.Lock()

    def generation(self, tag: str) -> int:
        with self._lock:
            return self._generations.get(tag, 0)

    def set(
        self,
        key: str,
        value: Any,
        ttl_seconds: int,
        tags: Iterable[str] = (),
        generations: Optional[Mapping[str, int]] = None,
    ) -> bool:
        """Store `value`; returns False (and stores nothing) if a tag moved past `generations`."""
        with self._lock:
            for tag, seen in (generations or {}).items():
                if self._generations.get(tag, 0) != seen:
                    return False
            super().set(key, value, ttl_seconds)
            for tag in tags:
                self._tags.setdefault(tag, set()).add(key)
            return True

    def delete(self, key: str) -> bool:
        removed = super().delete(key)
        for keys in self._tags.values():
            keys.discard(key)
        return removed

    def evict_by_tag(self, tag: str) -> int:
        """Remove every entry registered under `tag`; returns how many were live."""
        with self._lock:
            self._generations[tag] = self._generations.get(tag, 0) + 1
            keys = self._tags.pop(tag, set())
            removed = 0
            for key in keys:
                if super().delete(key):
                    removed += 1
            return removed

    def clear(self) -> None:
        with self._lock:
            super().clear()
            for tag in set(self._tags) | set(self._generations):
                self._generations[tag] = self._generations.get(tag, 0) + 1
            self._tags.clear()


def _build_movies_cache() -> TaggedTTLCache:
    from movies_api.core.config import settings

    return TaggedTTLCache(maxsize=settings.MOVIES_CACHE_MAXSIZE)


# Process-wide output cache for read endpoints
movies_cache = _build_movies_cache()

__all__ = ["TTLMap", "TaggedTTLCache", "movies_cache"]
