from __future__ import annotations

"""
Problem+JSON exception handlers.

Installed by `movies_api.main.create_app`. `AppException` subclasses render
their canonical body (`to_problem`); plain HTTP errors and request validation
errors render an RFC 7807 style body. Unexpected exceptions are logged with
their traceback and rendered as an opaque 500.
"""

import logging

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from movies_api.core.exceptions import AppException
from movies_api.middleware.request_id import get_request_id

logger = logging.getLogger(__name__)


def _problem(title: str, detail: str, status_code: int, request: Request) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "type": "about:blank",
            "title": title,
            "detail": detail,
            "status": status_code,
            "instance": str(request.url),
            "request_id": get_request_id(request) or "N/A",
        },
        media_type="application/problem+json",
    )


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:  # type: ignore
    if exc.status_code >= 500:
        logger.error("%s on %s %s", exc.__class__.__name__, request.method, request.url.path)
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_problem(fallback_request_id=get_request_id(request) or None),
        headers=getattr(exc, "headers", None),
        media_type="application/problem+json",
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:  # type: ignore
    title = exc.__class__.__name__.replace("Exception", "").strip() or "Error"
    detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    response = _problem(title, detail, exc.status_code, request)
    for k, v in (getattr(exc, "headers", None) or {}).items():
        response.headers[k] = v
    return response


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:  # type: ignore
    detail = "Validation error"
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "type": "about:blank",
            "title": detail,
            "detail": detail,
            "status": status.HTTP_400_BAD_REQUEST,
            "instance": str(request.url),
            "details": {
                "errors": [
                    {
                        "property_name": ".".join(str(p) for p in err.get("loc", ())[1:]) or "body",
                        "message": err.get("msg", ""),
                    }
                    for err in exc.errors()
                ],
            },
        },
        media_type="application/problem+json",
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:  # type: ignore
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _problem("Internal Server Error", "An unexpected error occurred.", status.HTTP_500_INTERNAL_SERVER_ERROR, request)


__all__ = [
    "app_exception_handler",
    "http_exception_handler",
    "validation_exception_handler",
    "global_exception_handler",
]
