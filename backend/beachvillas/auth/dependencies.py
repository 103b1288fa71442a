"""FastAPI authentication dependencies for route protection."""

import uuid

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from beachvillas.auth.jwt import decode_token
from beachvillas.database import get_db
from beachvillas.models.user import HOST_ROLES, User

# Missing credentials are turned into a 401 by get_current_user, not a 403.
_bearer_scheme = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def _user_from_token(token: str, db: AsyncSession) -> User | None:
    """Resolve an access token to its user, or ``None`` if anything is off."""
    try:
        payload = decode_token(token)
    except JWTError:
        return None

    # Only accept access tokens, not refresh or reset tokens
    if payload.get("type") != "access":
        return None

    sub: str | None = payload.get("sub")
    if sub is None:
        return None

    try:
        user_id = uuid.UUID(sub)
    except ValueError:
        return None

    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Extract and validate the Bearer token, then return the authenticated user.

    Raises:
        HTTPException 401: If the token is missing, invalid, expired, of the
            wrong type, or the user no longer exists or is inactive.
    """
    if credentials is None:
        raise _unauthorized("Missing bearer token")

    user = await _user_from_token(credentials.credentials, db)
    if user is None:
        raise _unauthorized("Invalid or expired token")

    if not user.is_active:
        raise _unauthorized("User account is inactive")

    return user


async def get_optional_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User | None:
    """Optionally authenticate a user from a Bearer token.

    Returns ``None`` instead of raising when no usable token is provided.
    Used by public endpoints (villa detail) that show extra data to owners.
    """
    if credentials is None:
        return None

    user = await _user_from_token(credentials.credentials, db)
    if user is None or not user.is_active:
        return None
    return user


def require_roles(*roles: str):
    """Dependency factory restricting a route to the given roles.

    Usage::

        current_user: User = Depends(require_roles("admin"))
    """

    async def _check_role(user: User = Depends(get_current_user)) -> User:
        if user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Forbidden",
            )
        return user

    return _check_role


require_admin = require_roles("admin")
require_host = require_roles(*HOST_ROLES)
