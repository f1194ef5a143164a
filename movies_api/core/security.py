# movies_api/core/security.py
from __future__ import annotations

"""
Movies API · Authentication Helpers
===================================
- Signed access tokens (python-jose) carrying `userid`, `admin`, `trusted_member`
- Hardened decode with optional issuer/audience enforcement
- Case-insensitive Bearer extraction
- `X-Api-Key` admin path that acts as a fixed service user

Capabilities are derived once per request into a `Principal`; the FastAPI
guards in `movies_api.dependencies.auth` only inspect that object.
"""

import hmac
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
from uuid import UUID

from fastapi import Request
from jose import ExpiredSignatureError, JWTError, jwt

from movies_api.core.config import settings
from movies_api.core.exceptions import AuthenticationRequiredException

logger = logging.getLogger(__name__)


# ───────────────────────────────────────────────
# 🪪 Principal
# ───────────────────────────────────────────────
@dataclass(frozen=True)
class Principal:
    """Authenticated caller. Admin implies trusted member."""

    user_id: UUID
    admin: bool = False
    trusted_member: bool = False
    via_api_key: bool = False

    @property
    def is_admin(self) -> bool:
        return self.admin

    @property
    def is_trusted_member(self) -> bool:
        return self.admin or self.trusted_member


def _claim_flag(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return False


# ───────────────────────────────────────────────
# 🎟️ Token creation
# ───────────────────────────────────────────────
def create_access_token(
    user_id: UUID,
    *,
    admin: bool = False,
    trusted_member: bool = False,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Create a signed access token for `user_id` with capability claims."""
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    payload: Dict[str, Any] = {
        "sub": str(user_id),
        "userid": str(user_id),
        "admin": "true" if admin else "false",
        "trusted_member": "true" if trusted_member else "false",
        "exp": expire,
        "iat": now,
        "nbf": now,
    }
    if settings.JWT_ISSUER:
        payload["iss"] = settings.JWT_ISSUER
    if settings.JWT_AUDIENCE:
        payload["aud"] = settings.JWT_AUDIENCE
    return jwt.encode(payload, settings.JWT_SECRET_KEY.get_secret_value(), algorithm=settings.JWT_ALGORITHM)


# ───────────────────────────────────────────────
# 🔓 Decoding
# ───────────────────────────────────────────────
def decode_access_token(token: str) -> Principal:
    """Decode and validate an access token into a `Principal`.

    Raises
    ------
    AuthenticationRequiredException
        Expired, malformed or unsigned tokens and tokens without a UUID `userid`.
    """
    options = {"verify_aud": bool(settings.JWT_AUDIENCE)}
    kwargs: Dict[str, Any] = {}
    if settings.JWT_ISSUER:
        kwargs["issuer"] = settings.JWT_ISSUER
    if settings.JWT_AUDIENCE:
        kwargs["audience"] = settings.JWT_AUDIENCE

    try:
        claims = jwt.decode(
            token,
            settings.JWT_SECRET_KEY.get_secret_value(),
            algorithms=[settings.JWT_ALGORITHM],
            options=options,
            **kwargs,
        )
    except ExpiredSignatureError:
        raise AuthenticationRequiredException(detail="Token has expired")
    except JWTError:
        logger.info("Rejected invalid access token")
        raise AuthenticationRequiredException(detail="Invalid token")

    try:
        user_id = UUID(str(claims.get("userid")))
    except ValueError:
        raise AuthenticationRequiredException(detail="Token is missing a valid userid claim")

    return Principal(
        user_id=user_id,
        admin=_claim_flag(claims.get("admin")),
        trusted_member=_claim_flag(claims.get("trusted_member")),
    )


def get_bearer_token(request: Request) -> Optional[str]:
    """Return the Bearer token from the Authorization header (case-insensitive scheme)."""
    auth = request.headers.get("Authorization") or ""
    scheme, _, token = auth.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def api_key_matches(candidate: Optional[str]) -> bool:
    expected = settings.api_key_value
    if not expected or not candidate:
        return False
    return hmac.compare_digest(candidate.encode("utf-8"), expected.encode("utf-8"))


def principal_from_request(request: Request) -> Optional[Principal]:
    """Resolve the caller from the API key header or a Bearer token.

    Returns `None` for anonymous callers. A present-but-invalid credential
    raises `AuthenticationRequiredException`.
    """
    api_key = request.headers.get(settings.API_KEY_HEADER_NAME)
    if api_key is not None:
        if not api_key_matches(api_key):
            raise AuthenticationRequiredException(detail="Invalid API key")
        return Principal(user_id=settings.API_KEY_USER_ID, admin=True, trusted_member=True, via_api_key=True)

    token = get_bearer_token(request)
    if token is None:
        return None
    return decode_access_token(token)


__all__ = [
    "Principal",
    "create_access_token",
    "decode_access_token",
    "get_bearer_token",
    "api_key_matches",
    "principal_from_request",
]
