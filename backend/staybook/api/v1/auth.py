"""Auth API router — register, login, refresh, me."""

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from staybook.api.deps import get_current_active_user, get_db
from staybook.auth.jwt import REFRESH, create_token_pair, decode_token
from staybook.auth.passwords import hash_password, verify_password
from staybook.models.user import ROLE_USER, User
from staybook.schemas.auth import (
    AuthData,
    LoginRequest,
    RefreshRequest,
    RegisterRequest,
    TokenResponse,
    UserResponse,
)
from staybook.schemas.common import ApiResponse
from staybook.services import repository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


def _auth_data(user: User) -> AuthData:
    tokens = create_token_pair(str(user.id), user.role)
    return AuthData(user=UserResponse.model_validate(user), tokens=TokenResponse(**tokens))


# ---------------------------------------------------------------------------
# POST /register
# ---------------------------------------------------------------------------


@router.post("/register", response_model=ApiResponse[AuthData], status_code=status.HTTP_201_CREATED)
async def register(body: RegisterRequest, db: AsyncSession = Depends(get_db)) -> ApiResponse[AuthData]:
    """Register a new user with email and password."""
    email = body.email.lower()
    if await repository.get_user_by_email(db, email) is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email already registered",
        )

    user = User(
        email=email,
        hashed_password=hash_password(body.password),
        first_name=body.first_name,
        last_name=body.last_name,
        avatar_url=body.avatar_url,
        role=ROLE_USER,
    )
    db.add(user)
    await db.flush()
    await db.refresh(user)
    logger.info("Registered user %s", user.id)

    return ApiResponse(message="User registered successfully", data=_auth_data(user))


# ---------------------------------------------------------------------------
# POST /login
# ---------------------------------------------------------------------------


@router.post("/login", response_model=ApiResponse[AuthData])
async def login(body: LoginRequest, db: AsyncSession = Depends(get_db)) -> ApiResponse[AuthData]:
    """Authenticate with email and password."""
    user = await repository.get_user_by_email(db, body.email.lower())

    if user is None or not verify_password(body.password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is inactive",
        )

    return ApiResponse(message="Login successful", data=_auth_data(user))


# ---------------------------------------------------------------------------
# POST /refresh
# ---------------------------------------------------------------------------


@router.post("/refresh", response_model=ApiResponse[TokenResponse])
async def refresh(body: RefreshRequest, db: AsyncSession = Depends(get_db)) -> ApiResponse[TokenResponse]:
    """Exchange a valid refresh token for a new token pair."""
    try:
        payload = decode_token(body.refresh_token, expected_type=REFRESH)
        user_id = uuid.UUID(payload["sub"])
    except (JWTError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired refresh token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from None

    user = await repository.get_user(db, user_id)
    if user is None or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found or inactive",
            headers={"WWW-Authenticate": "Bearer"},
        )

    tokens = create_token_pair(str(user.id), user.role)
    return ApiResponse(message="Token refreshed", data=TokenResponse(**tokens))


# ---------------------------------------------------------------------------
# GET /me
# ---------------------------------------------------------------------------


@router.get("/me", response_model=ApiResponse[UserResponse])
async def me(current_user: User = Depends(get_current_active_user)) -> ApiResponse[UserResponse]:
    """Return the currently authenticated user's profile."""
    return ApiResponse(message="Profile retrieved successfully", data=UserResponse.model_validate(current_user))
