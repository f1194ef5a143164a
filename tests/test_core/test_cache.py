# tests/test_core/test_cache.py

import pytest

from movies_api.cache.invalidation import MOVIES_CACHE_TAG, invalidate_movie_caches
from movies_api.core import cache as cache_module
from movies_api.core.cache import TaggedTTLCache


@pytest.fixture()
def clock(monkeypatch):
    now = [1_000.0]
    monkeypatch.setattr(cache_module.time, "time", lambda: now[0])
    return now


def test_entries_expire_after_ttl(clock):
    cache = TaggedTTLCache()
    cache.set("a", {"x": 1}, 10)

    clock[0] += 9
    assert cache.get("a") == {"x": 1}
    clock[0] += 1
    assert cache.get("a") is None
    assert len(cache) == 0


def test_oldest_entry_is_dropped_at_maxsize():
    cache = TaggedTTLCache(maxsize=2)
    cache.set("a", 1, 60)
    cache.set("b", 2, 60)
    cache.set("c", 3, 60)

    assert cache.get("a") is None
    assert (cache.get("b"), cache.get("c")) == (2, 3)


def test_evict_by_tag_only_touches_tagged_entries():
    cache = TaggedTTLCache()
    cache.set("list", 1, 60, tags=("movies",))
    cache.set("detail", 2, 60, tags=("movies",))
    cache.set("other", 3, 60, tags=("profiles",))
    cache.set("untagged", 4, 60)

    assert cache.evict_by_tag("movies") == 2
    assert cache.get("list") is None
    assert cache.get("detail") is None
    assert cache.get("other") == 3
    assert cache.get("untagged") == 4
    assert cache.evict_by_tag("movies") == 0


def test_evict_counts_only_live_entries():
    cache = TaggedTTLCache()
    cache.set("a", 1, 60, tags=("movies",))
    cache.delete("a")
    assert cache.evict_by_tag("movies") == 0


@pytest.mark.anyio
async def test_invalidate_movie_caches_uses_the_movies_tag():
    cache = TaggedTTLCache()
    cache.set("GET:/api/v1/movies?#anonymous", {"payload": []}, 60, tags=(MOVIES_CACHE_TAG,))

    assert await invalidate_movie_caches(cache) == 1
    assert cache.get("GET:/api/v1/movies?#anonymous") is None


def test_store_is_skipped_when_tag_was_evicted_since_capture():
    cache = TaggedTTLCache()
    seen = cache.generation("movies")

    cache.evict_by_tag("movies")

    assert cache.set("list", {"total": 0}, 60, tags=("movies",), generations={"movies": seen}) is False
    assert cache.get("list") is None

    current = cache.generation("movies")
    assert current == seen + 1
    assert cache.set("list", {"total": 1}, 60, tags=("movies",), generations={"movies": current}) is True
    assert cache.get("list") == {"total": 1}


def test_clear_moves_generations_forward():
    cache = TaggedTTLCache()
    cache.set("list", 1, 60, tags=("movies",))
    seen = cache.generation("movies")

    cache.clear()

    assert cache.generation("movies") > seen
