"""Auth API router: signup, login, refresh, logout and password reset."""

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from jose import JWTError
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from beachvillas.api.deps import get_current_user, get_db
from beachvillas.auth.jwt import (
    create_password_reset_token,
    create_token_pair,
    decode_password_reset_token,
    decode_token,
)
from beachvillas.auth.passwords import hash_password, verify_password
from beachvillas.config import settings
from beachvillas.models.user import User
from beachvillas.schemas.auth import (
    AuthResponse,
    ForgotPasswordRequest,
    LoginRequest,
    RefreshRequest,
    ResetPasswordRequest,
    ResetPasswordResponse,
    SignupRequest,
    TokenResponse,
    UserResponse,
)
from beachvillas.services.mailer import send_email

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    """Case-insensitive email lookup."""
    result = await db.execute(select(User).where(func.lower(User.email) == email.lower()))
    return result.scalar_one_or_none()


def _tokens(user: User) -> dict:
    tokens = create_token_pair(str(user.id), role=user.role)
    return {
        "token": tokens["access_token"],
        "refresh_token": tokens["refresh_token"],
        "token_type": tokens["token_type"],
        "expires_at": tokens["expires_at"],
    }


def _auth_response(user: User) -> AuthResponse:
    return AuthResponse(user=UserResponse.model_validate(user), **_tokens(user))


# ---------------------------------------------------------------------------
# POST /signup
# ---------------------------------------------------------------------------


@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def signup(body: SignupRequest, db: AsyncSession = Depends(get_db)) -> AuthResponse:
    """Register a new guest, host or guest_host account."""
    if await get_user_by_email(db, body.email) is not None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already in use",
        )

    user = User(
        email=body.email.lower(),
        hashed_password=hash_password(body.password),
        name=body.name.strip(),
        role=body.role,
    )
    db.add(user)
    await db.flush()
    await db.refresh(user)

    logger.info("New %s account %s", user.role, user.id)
    send_email(user.email, "welcome", name=user.name)
    return _auth_response(user)


# ---------------------------------------------------------------------------
# POST /login
# ---------------------------------------------------------------------------


@router.post("/login", response_model=AuthResponse)
async def login(body: LoginRequest, db: AsyncSession = Depends(get_db)) -> AuthResponse:
    """Authenticate with email and password."""
    user = await get_user_by_email(db, body.email)

    if user is None or not verify_password(body.password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid email or password",
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is inactive",
        )

    return _auth_response(user)


# ---------------------------------------------------------------------------
# POST /refresh
# ---------------------------------------------------------------------------


@router.post("/refresh", response_model=TokenResponse)
async def refresh(body: RefreshRequest, db: AsyncSession = Depends(get_db)) -> TokenResponse:
    """Exchange a valid refresh token for a new token pair."""
    try:
        payload = decode_token(body.refresh_token)
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired refresh token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from None

    if payload.get("type") != "refresh":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token type",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        user_id = uuid.UUID(payload.get("sub") or "")
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
            headers={"WWW-Authenticate": "Bearer"},
        ) from None

    user = await db.get(User, user_id)
    if user is None or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found or inactive",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return TokenResponse(**_tokens(user))


# ---------------------------------------------------------------------------
# POST /logout
# ---------------------------------------------------------------------------


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT, response_model=None)
async def logout(current_user: User = Depends(get_current_user)) -> None:
    """Tokens are stateless; clients drop them. Logged for the audit trail."""
    logger.info("User %s logged out", current_user.id)


# ---------------------------------------------------------------------------
# Password reset
# ---------------------------------------------------------------------------


@router.post("/forgot-password", status_code=status.HTTP_204_NO_CONTENT, response_model=None)
async def forgot_password(body: ForgotPasswordRequest, db: AsyncSession = Depends(get_db)) -> None:
    """Email a reset link. Always 204 so account existence is not revealed."""
    user = await get_user_by_email(db, body.email)
    if user is None or not user.is_active:
        logger.info("Password reset requested for unknown or inactive account")
        return

    token = create_password_reset_token(str(user.id), user.email)
    send_email(
        user.email,
        "password_reset",
        name=user.name,
        email=user.email,
        token=token,
        expire_minutes=settings.password_reset_expire_minutes,
    )


@router.post("/reset-password", response_model=ResetPasswordResponse)
async def reset_password(body: ResetPasswordRequest, db: AsyncSession = Depends(get_db)) -> ResetPasswordResponse:
    """Set a new password using an emailed reset token, then sign the user in."""
    invalid = HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail="Invalid or expired reset token",
    )
    try:
        payload = decode_password_reset_token(body.token, body.email)
    except JWTError:
        raise invalid from None

    user = await get_user_by_email(db, body.email)
    if user is None or str(user.id) != payload.get("sub"):
        raise invalid

    user.hashed_password = hash_password(body.new_password)
    await db.flush()
    logger.info("Password reset for user %s", user.id)
    send_email(user.email, "password_changed", name=user.name, email=user.email)

    tokens = _tokens(user)
    return ResetPasswordResponse(token=tokens["token"], expires_at=tokens["expires_at"])
