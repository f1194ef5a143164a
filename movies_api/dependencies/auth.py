from __future__ import annotations

"""
Capability guards
-----------------
FastAPI dependencies that resolve the caller once and enforce the three
capabilities used by the routers. Admin implies trusted member, which implies
authenticated.

Exports
- get_principal: Optional principal (anonymous → None)
- get_optional_user_id: acting user id for personalized reads
- require_user / require_trusted_member / require_admin
"""

from typing import Optional
from uuid import UUID

from fastapi import Depends, Request

from movies_api.core.exceptions import AuthenticationRequiredException, PermissionDeniedException
from movies_api.core.security import Principal, principal_from_request


async def get_principal(request: Request) -> Optional[Principal]:
    principal = principal_from_request(request)
    request.state.principal = principal
    return principal


async def get_optional_user_id(principal: Optional[Principal] = Depends(get_principal)) -> Optional[UUID]:
    return principal.user_id if principal else None


async def require_user(principal: Optional[Principal] = Depends(get_principal)) -> Principal:
    if principal is None:
        raise AuthenticationRequiredException()
    return principal


async def require_trusted_member(principal: Principal = Depends(require_user)) -> Principal:
    if not principal.is_trusted_member:
        raise PermissionDeniedException(capability="trusted_member")
    return principal


async def require_admin(principal: Principal = Depends(require_user)) -> Principal:
    if not principal.is_admin:
        raise PermissionDeniedException(capability="admin")
    return principal


__all__ = [
    "get_principal",
    "get_optional_user_id",
    "require_user",
    "require_trusted_member",
    "require_admin",
]
