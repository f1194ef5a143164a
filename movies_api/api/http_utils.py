from __future__ import annotations

"""
Movies API · HTTP Utilities
===========================

Shared helpers for API routers:

- Output cache keys (method, path, sorted query, acting user)
- Strong ETag + `If-None-Match` → 304
- RFC 5988 pagination headers (`Link`) + `X-Total-Count`

Cached responses are registered under the `movies` tag so
`movies_api.cache.invalidation.invalidate_movie_caches` drops them all after
a write.
"""

import hashlib
import json
import uuid
from typing import Any, Dict, List, Optional
from urllib.parse import urlencode

from fastapi import Request, status
from fastapi.responses import JSONResponse, Response

from movies_api.cache.invalidation import MOVIES_CACHE_TAG
from movies_api.core.cache import TaggedTTLCache, movies_cache

__all__ = [
    "compute_etag",
    "parse_if_none_match",
    "cache_key",
    "cache_generation",
    "pagination_headers",
    "get_cached_response",
    "cached_json_response",
]


def compute_etag(data: Any) -> str:
    """Compute a **strong** ETag (quoted SHA-256 of canonical JSON)."""
    raw = json.dumps(data, sort_keys=True, separators=(",", ":")).encode("utf-8")
    return f"\"{hashlib.sha256(raw).hexdigest()}\""


def parse_if_none_match(header_val: Optional[str]) -> List[str]:
    """Parse `If-None-Match`, which may contain a comma-delimited list of ETags."""
    if not header_val:
        return []
    return [part.strip() for part in header_val.split(",") if part.strip()]


def cache_key(request: Request, user_id: Optional[uuid.UUID] = None) -> str:
    """Stable cache key from method, path, **sorted** query params and the acting user."""
    query = "&".join(sorted(f"{k}={v}" for k, v in request.query_params.multi_items()))
    who = str(user_id) if user_id else "anonymous"
    return f"{request.method}:{request.url.path}?{query}#{who}"


def cache_generation(cache: Optional[TaggedTTLCache] = None) -> int:
    """Current generation of the `movies` tag. Capture it before querying storage."""
    store = cache if cache is not None else movies_cache
    return store.generation(MOVIES_CACHE_TAG)


def pagination_headers(request: Request, *, page: int, page_size: int, total: int) -> Dict[str, str]:
    """Return RFC 5988 `Link` and `X-Total-Count` headers for pagination."""
    headers: Dict[str, str] = {"X-Total-Count": str(total)}

    def _q(p: int) -> str:
        qd = dict(request.query_params)
        qd["page"] = str(p)
        qd["page_size"] = str(page_size)
        return urlencode(qd)

    base_url = str(request.url).split("?")[0]
    last_page = max(1, (total + page_size - 1) // page_size)
    links: List[str] = []
    if page > 1:
        links.append(f'<{base_url}?{_q(1)}>; rel="first"')
        links.append(f'<{base_url}?{_q(page - 1)}>; rel="prev"')
    if page < last_page:
        links.append(f'<{base_url}?{_q(page + 1)}>; rel="next"')
        links.append(f'<{base_url}?{_q(last_page)}>; rel="last"')
    if links:
        headers["Link"] = ", ".join(links)
    return headers


def _cache_control(ttl: int, personalized: bool) -> str:
    scope = "private" if personalized else "public"
    return f"{scope}, max-age={ttl}"


def get_cached_response(
    request: Request,
    user_id: Optional[uuid.UUID] = None,
    *,
    ttl: int,
    cache: Optional[TaggedTTLCache] = None,
) -> Optional[Response]:
    """Replay a cached snapshot for this request, or `None` on a miss."""
    if ttl <= 0:
        return None
    store = cache if cache is not None else movies_cache
    cached = store.get(cache_key(request, user_id))
    if not cached:
        return None
    return cached_json_response(
        request,
        cached["payload"],
        ttl=ttl,
        user_id=user_id,
        extra_headers=cached.get("headers"),
        cache=store,
        store=False,
    )


def cached_json_response(
    request: Request,
    payload: Any,
    *,
    ttl: int,
    user_id: Optional[uuid.UUID] = None,
    extra_headers: Optional[Dict[str, str]] = None,
    cache: Optional[TaggedTTLCache] = None,
    store: bool = True,
    generation: Optional[int] = None,
) -> Response:
    """
    Return a JSONResponse with a **strong ETag**, honoring conditional requests.

    Steps
    -----
    1) Compute ETag from payload.
    2) If client's `If-None-Match` matches → 304 with cache headers.
    3) Else → 200 JSON with ETag + `Cache-Control`.
    4) Store a snapshot under the `movies` tag (when `ttl` > 0), unless the
       tag was evicted after `generation` was captured.
    """
    etag = compute_etag(payload)
    headers: Dict[str, str] = {
        "ETag": etag,
        "Cache-Control": _cache_control(ttl, personalized=user_id is not None),
        "Vary": "Accept, Authorization, If-None-Match",
    }
    headers.update(extra_headers or {})

    if store and ttl > 0:
        target = cache if cache is not None else movies_cache
        target.set(
            cache_key(request, user_id),
            {"payload": payload, "headers": dict(extra_headers or {})},
            ttl,
            tags=(MOVIES_CACHE_TAG,),
            generations=None if generation is None else {MOVIES_CACHE_TAG: generation},
        )

    inm_values = parse_if_none_match(request.headers.get("If-None-Match"))
    if etag in inm_values or "*" in inm_values:
        return Response(status_code=status.HTTP_304_NOT_MODIFIED, headers=headers)

    return JSONResponse(content=payload, headers=headers)
