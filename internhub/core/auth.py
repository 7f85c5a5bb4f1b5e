"""
Authentication dependencies for protected routes.

Tokens carry the user id (sub), email and role. The user behind a token
is resolved with a dual lookup by email, so accounts living only in the
document store authenticate the same way.
"""

from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from internhub.core.security import decode_token
from internhub.services.status_rules import is_admin, is_student, is_superadmin
from internhub.services.user_service import get_user_service

# auto_error=False so a missing header is a 401, not FastAPI's 403
bearer_scheme = HTTPBearer(auto_error=False)


def _credentials_exception() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Unauthorized",
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_token_payload(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)
) -> dict:
    """Decoded token claims; 401 when the token is missing or invalid."""
    if credentials is None:
        raise _credentials_exception()
    payload = decode_token(credentials.credentials)
    if not payload or not payload.get("email"):
        raise _credentials_exception()
    return payload


async def get_current_user(payload: dict = Depends(get_token_payload)) -> dict:
    """
    FastAPI dependency - Get current authenticated user.

    Usage:
        @router.get("/protected")
        async def route(user: dict = Depends(get_current_user)):
            return user
    """
    user = get_user_service().find_by_email(payload["email"])
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)
) -> Optional[dict]:
    """The caller when a valid token is sent; None for anonymous requests."""
    if credentials is None:
        return None
    payload = decode_token(credentials.credentials)
    if not payload or not payload.get("email"):
        return None
    return get_user_service().find_by_email(payload["email"])


async def get_current_student(user: dict = Depends(get_current_user)) -> dict:
    """Dependency - Require student role."""
    if not is_student(user):
        raise HTTPException(status_code=403, detail="Students only")
    return user


async def get_current_admin(user: dict = Depends(get_current_user)) -> dict:
    """Dependency - Require a company admin or a superadmin."""
    if not (is_admin(user) or is_superadmin(user)):
        raise HTTPException(status_code=403, detail="Company admins only")
    return user


async def get_current_superadmin(user: dict = Depends(get_current_user)) -> dict:
    """Dependency - Require superadmin role."""
    if not is_superadmin(user):
        raise HTTPException(status_code=403, detail="Superadmins only")
    return user
