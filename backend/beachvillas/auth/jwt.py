"""JWT token creation and verification for access, refresh and password-reset tokens."""

from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from beachvillas.config import settings


def _encode(data: dict, token_type: str, expires_delta: timedelta) -> str:
    to_encode = data.copy()
    now = datetime.now(timezone.utc)
    to_encode.update({"exp": now + expires_delta, "iat": now, "type": token_type})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    """Create an access token.

    Args:
        data: Payload data. Must include ``sub`` (user UUID as string).
        expires_delta: Custom expiration duration. Defaults to
            ``settings.jwt_access_token_expire_minutes`` minutes.

    Returns:
        Encoded JWT string.
    """
    return _encode(
        data,
        "access",
        expires_delta or timedelta(minutes=settings.jwt_access_token_expire_minutes),
    )


def create_refresh_token(data: dict, expires_delta: timedelta | None = None) -> str:
    """Create a long-lived refresh token.

    Args:
        data: Payload data. Must include ``sub`` (user UUID as string).
        expires_delta: Custom expiration duration. Defaults to
            ``settings.jwt_refresh_token_expire_days`` days.

    Returns:
        Encoded JWT string.
    """
    return _encode(
        data,
        "refresh",
        expires_delta or timedelta(days=settings.jwt_refresh_token_expire_days),
    )


def create_password_reset_token(user_id: str, email: str, expires_delta: timedelta | None = None) -> str:
    """Create a short-lived token that authorises one password reset for ``email``."""
    return _encode(
        {"sub": user_id, "email": email.lower()},
        "reset",
        expires_delta or timedelta(minutes=settings.password_reset_expire_minutes),
    )


def decode_token(token: str) -> dict:
    """Decode and verify a JWT token.

    Args:
        token: Encoded JWT string.

    Returns:
        Decoded payload dictionary.

    Raises:
        jose.JWTError: If the token is invalid, expired, or malformed.
    """
    return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])


def decode_password_reset_token(token: str, email: str) -> dict:
    """Decode a reset token and check it was issued for ``email``.

    Raises:
        jose.JWTError: If the token is invalid, of the wrong type or for another email.
    """
    payload = decode_token(token)
    if payload.get("type") != "reset" or payload.get("email") != email.lower():
        raise JWTError("Token is not a password reset token for this account")
    return payload


def create_token_pair(user_id: str, role: str | None = None) -> dict:
    """Create both access and refresh tokens for a user.

    Args:
        user_id: The user's UUID as a string.
        role: Optional role claim, informational only. Authorization always
            re-reads the role from the database.

    Returns:
        Dictionary with ``access_token``, ``refresh_token``, ``token_type`` and
        ``expires_at`` (access token expiry as a UTC datetime).
    """
    payload: dict = {"sub": user_id}
    if role is not None:
        payload["role"] = role
    expires_at = datetime.now(timezone.utc) + timedelta(minutes=settings.jwt_access_token_expire_minutes)
    return {
        "access_token": create_access_token(payload),
        "refresh_token": create_refresh_token(payload),
        "token_type": "bearer",
        "expires_at": expires_at,
    }
