"""Pydantic v2 request/response schemas for authentication and profile endpoints."""

import uuid
from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from beachvillas.schemas.common import ORMModel, id_field

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class SignupRequest(BaseModel):
    """Schema for user registration. Admin accounts cannot self-register."""

    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)
    role: Literal["guest", "host", "guest_host"] = "guest"


class LoginRequest(BaseModel):
    """Schema for email/password login."""

    email: EmailStr
    password: str = Field(..., min_length=1)


class RefreshRequest(BaseModel):
    """Schema for token refresh."""

    refresh_token: str


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    email: EmailStr
    token: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=8, max_length=128)


class ProfileUpdate(BaseModel):
    """Fields a user may change on their own account. Anything else is rejected."""

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(None, min_length=1, max_length=255)
    profile_photo_url: str | None = Field(None, max_length=512)
    phone: str | None = Field(None, max_length=50)
    notification_settings: dict[str, Any] | None = None
    payout_method_details: str | None = Field(None, max_length=255)
    about: str | None = None
    locale: str | None = Field(None, max_length=20)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class UserResponse(ORMModel):
    """Public user information returned with tokens and in admin lists."""

    user_id: uuid.UUID = id_field("user_id")
    name: str
    email: str
    profile_photo_url: str | None = None
    role: str
    is_active: bool
    is_verified_host: bool
    notification_settings: dict[str, Any] = Field(default_factory=dict)
    payout_method_details: str | None = None
    created_at: datetime


class ProfileResponse(UserResponse):
    """The caller's own account plus profile details."""

    phone: str | None = None
    about: str | None = None
    locale: str | None = None
    updated_at: datetime


class TokenResponse(BaseModel):
    """JWT token pair returned on login, signup and refresh."""

    token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_at: datetime


class AuthResponse(TokenResponse):
    """Tokens plus the authenticated user."""

    user: UserResponse


class ResetPasswordResponse(BaseModel):
    token: str
    expires_at: datetime
