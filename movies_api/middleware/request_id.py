# movies_api/middleware/request_id.py
from __future__ import annotations

"""
# Movies API · Request ID Middleware (pure ASGI)

- Reuses a client-supplied `X-Request-ID` / `X-Correlation-ID` when it is a UUIDv4.
- Generates a UUIDv4 otherwise.
- Stores it on `request.state.request_id` and echoes it on the response.
- Binds `request_id` into the loguru context for the whole request.

## Env
- `REQUEST_ID_HEADER_NAME` (default: `X-Request-ID`)
- `REQUEST_ID_TRUST_CLIENT_IDS` ("true"/"false"; default: "true")

## Usage
    app.add_middleware(RequestIDMiddleware)
    rid = get_request_id(request)
"""

import os
import uuid
from typing import Optional

from loguru import logger
from starlette.datastructures import Headers
from starlette.types import ASGIApp, Message, Receive, Scope, Send

HEADER_NAME = os.getenv("REQUEST_ID_HEADER_NAME", "X-Request-ID")
TRUST_CLIENT_IDS = os.getenv("REQUEST_ID_TRUST_CLIENT_IDS", "true").lower() == "true"
MAX_ID_LENGTH = 64


class RequestIDMiddleware:
    """Per-request correlation id, visible to handlers, logs and clients."""

    def __init__(self, app: ASGIApp, header_name: str = HEADER_NAME) -> None:
        self.app = app
        self.header_name = header_name

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope.get("type") != "http":
            return await self.app(scope, receive, send)

        req_id = self._choose_request_id(Headers(scope=scope))
        scope.setdefault("state", {})["request_id"] = req_id
        name_bytes = self.header_name.encode("latin-1")

        async def _send_wrapper(message: Message) -> None:
            if message.get("type") == "http.response.start":
                headers = [(k, v) for (k, v) in message.get("headers", []) if k.lower() != name_bytes.lower()]
                headers.append((name_bytes, req_id.encode("latin-1")))
                message["headers"] = headers
            await send(message)

        with logger.contextualize(request_id=req_id):
            await self.app(scope, receive, _send_wrapper)

    def _choose_request_id(self, headers: Headers) -> str:
        if TRUST_CLIENT_IDS:
            incoming = headers.get(self.header_name) or headers.get("X-Correlation-ID")
            parsed = _parse_uuid4(incoming)
            if parsed:
                return parsed
        return str(uuid.uuid4())


def _parse_uuid4(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    candidate = value.strip()
    if not 0 < len(candidate) <= MAX_ID_LENGTH:
        return None
    try:
        parsed = uuid.UUID(candidate)
    except ValueError:
        return None
    return str(parsed) if parsed.version == 4 else None


def get_request_id(request) -> str:
    """Current request id from `request.state` ("" when the middleware is not installed)."""
    return getattr(getattr(request, "state", object()), "request_id", "") or ""


__all__ = ["RequestIDMiddleware", "get_request_id"]
