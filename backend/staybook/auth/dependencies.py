"""FastAPI dependencies that resolve the calling user from a bearer token."""

import uuid

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from staybook.auth.jwt import ACCESS, decode_token
from staybook.database import get_db
from staybook.models.user import User
from staybook.services import repository

# Raises 403 automatically if no token is provided
_bearer_scheme = HTTPBearer()


def _unauthorized(detail: str = "Could not validate credentials") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(_bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Validate the access token and load the user it names.

    Raises:
        HTTPException 401: Invalid, expired or refresh token; unknown user.
    """
    try:
        payload = decode_token(credentials.credentials, expected_type=ACCESS)
        user_id = uuid.UUID(payload["sub"])
    except (JWTError, ValueError):
        raise _unauthorized() from None

    user = await repository.get_user(db, user_id)
    if user is None:
        raise _unauthorized()
    return user


async def get_current_active_user(user: User = Depends(get_current_user)) -> User:
    """Reject deactivated accounts with 401."""
    if not user.is_active:
        raise _unauthorized("User account is inactive")
    return user


async def require_admin(user: User = Depends(get_current_active_user)) -> User:
    """Allow only administrators through.

    Raises:
        HTTPException 403: The user is not an administrator.
    """
    if not user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access only")
    return user
