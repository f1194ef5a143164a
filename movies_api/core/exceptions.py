# movies_api/core/exceptions.py
from __future__ import annotations

"""
Movies API · Application Exceptions
===================================
A small, consistent layer on top of FastAPI/Starlette's `HTTPException` that
lets us attach structured metadata and integrate cleanly with the JSON error
shape rendered by `movies_api.core.exception_handlers`.

Key ideas
---------
- One base `AppException` that carries `code`, `request_id`, `details`, `extra`.
- Domain exceptions inherit from it and set sane defaults.
- "Not found" is never an exception in the service layer: services return
  `None`/`False` and routers turn that into a 404.
- Task cancellation (`asyncio.CancelledError`) is never wrapped here.

Usage
-----
    raise ValidationFailedException(errors=[ValidationError("page", "Page must be >= 1")])

    raise StorageFailureException()  # opaque 500
"""

from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterable, List, Optional

from fastapi import HTTPException, status

__all__ = [
    "AppException",
    "ValidationError",
    "ValidationFailedException",
    "StorageFailureException",
    "AuthenticationRequiredException",
    "PermissionDeniedException",
]


# ──────────────────────────────────────────────────────────────
# 📦 Core: AppException
# ──────────────────────────────────────────────────────────────
class AppException(HTTPException):
    """Base application-level exception with optional metadata.

    Attributes
    -----------
    status_code : int
        HTTP status code (e.g., 400/401/403/404/500).
    message : str
        Human-readable error message (serialized as `detail` as well).
    code : int
        Optional internal/typed error code. Defaults to `status_code`.
    request_id : str | None
        Optional request correlation id (handlers fill it from request state).
    details : dict | list | str | None
        Machine-readable details (e.g., validation errors).
    extra : dict | None
        Additional non-sensitive metadata to surface to clients.
    headers : dict | None
        Optional headers (e.g., `{"WWW-Authenticate": "Bearer"}`).
    """

    def __init__(
        self,
        *,
        status_code: int,
        message: str,
        code: Optional[int] = None,
        request_id: Optional[str] = None,
        details: Optional[Any] = None,
        extra: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        super().__init__(status_code=status_code, detail=message, headers=headers)
        self.code: int = int(code or status_code)
        self.message: str = message
        self.request_id: Optional[str] = request_id
        self.details: Optional[Any] = details
        self.extra: Dict[str, Any] = extra or {}

    # ── [Helper] Canonical body used by handlers ───────────────────────────
    def to_problem(self, *, fallback_request_id: Optional[str] = None) -> Dict[str, Any]:
        """Return a dict matching our problem-like JSON shape."""
        body: Dict[str, Any] = {
            "error": True,
            "message": self.message,
            "code": self.code,
            "request_id": self.request_id or fallback_request_id or "N/A",
        }
        if self.details is not None:
            body["details"] = self.details
        # Avoid leaking obvious secrets if someone passed them in `extra`.
        extra_sanitized = dict(self.extra) if self.extra else {}
        for k in ("token", "authorization", "password", "secret", "api_key"):
            extra_sanitized.pop(k, None)
        body.update(extra_sanitized)
        return body


# ──────────────────────────────────────────────────────────────
# ✅ Validation
# ──────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class ValidationError:
    """One field-level validation failure."""

    property_name: str
    message: str


class ValidationFailedException(AppException):
    """Raised when request parameters or a movie payload fail validation (400).

    Always raised before any storage call is attempted.
    """

    def __init__(self, *, errors: Iterable[ValidationError], request_id: Optional[str] = None) -> None:
        self.errors: List[ValidationError] = list(errors)
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            message="Validation failed",
            code=status.HTTP_400_BAD_REQUEST,
            request_id=request_id,
            details={"errors": [asdict(e) for e in self.errors]},
        )

    def __str__(self) -> str:
        return "; ".join(f"{e.property_name}: {e.message}" for e in self.errors) or self.message


# ──────────────────────────────────────────────────────────────
# 🗄️ Storage
# ──────────────────────────────────────────────────────────────
class StorageFailureException(AppException):
    """Connectivity, constraint or timeout failure in the storage layer.

    The message is opaque; the underlying error is chained as
    `__cause__` and logged where it is caught.
    """

    def __init__(self, *, operation: Optional[str] = None, request_id: Optional[str] = None) -> None:
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            message="A storage error occurred",
            code=50001,
            request_id=request_id,
        )
        self.operation = operation


# ──────────────────────────────────────────────────────────────
# 🔐 Authentication / authorization
# ──────────────────────────────────────────────────────────────
class AuthenticationRequiredException(AppException):
    """Raised when a capability needs an identity and none (or an invalid one) was supplied."""

    def __init__(self, *, detail: str = "Not authenticated", request_id: Optional[str] = None) -> None:
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            message=detail,
            code=status.HTTP_401_UNAUTHORIZED,
            request_id=request_id,
            headers={"WWW-Authenticate": "Bearer"},
        )


class PermissionDeniedException(AppException):
    """Raised when an authenticated caller lacks a required capability."""

    def __init__(self, *, capability: str, request_id: Optional[str] = None) -> None:
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            message=f"Capability '{capability}' required",
            code=status.HTTP_403_FORBIDDEN,
            request_id=request_id,
            details={"capability": capability},
        )
