"""Unit tests for JWT token creation, decoding, and validation."""

from datetime import datetime, timedelta

import pytest
from jose import JWTError

from beachvillas.auth.jwt import (
    create_access_token,
    create_password_reset_token,
    create_refresh_token,
    create_token_pair,
    decode_password_reset_token,
    decode_token,
)


class TestCreateAccessToken:
    """Test access token creation."""

    def test_contains_standard_claims(self):
        token = create_access_token({"sub": "user-abc"})
        payload = decode_token(token)
        assert payload["type"] == "access"
        assert payload["sub"] == "user-abc"
        assert "iat" in payload
        assert "exp" in payload

    def test_custom_expiry_delta(self):
        token = create_access_token({"sub": "user-123"}, expires_delta=timedelta(hours=1))
        payload = decode_token(token)
        assert payload["exp"] - payload["iat"] == 3600


class TestCreateRefreshToken:
    def test_contains_type_refresh(self):
        token = create_refresh_token({"sub": "user-xyz"})
        payload = decode_token(token)
        assert payload["type"] == "refresh"
        assert payload["sub"] == "user-xyz"


class TestDecodeToken:
    """Test token decoding and validation."""

    def test_decode_expired_token_raises(self):
        token = create_access_token({"sub": "user-123"}, expires_delta=timedelta(seconds=-1))
        with pytest.raises(JWTError):
            decode_token(token)

    def test_decode_invalid_token_raises(self):
        with pytest.raises(JWTError):
            decode_token("not.a.valid.token")

    def test_decode_empty_string_raises(self):
        with pytest.raises(JWTError):
            decode_token("")


class TestCreateTokenPair:
    """Test token pair creation."""

    def test_returns_both_tokens_and_expiry(self):
        pair = create_token_pair("user-123")
        assert pair["token_type"] == "bearer"
        assert decode_token(pair["access_token"])["type"] == "access"
        assert decode_token(pair["refresh_token"])["type"] == "refresh"
        assert isinstance(pair["expires_at"], datetime)

    def test_role_claim_is_optional(self):
        assert "role" not in decode_token(create_token_pair("user-123")["access_token"])
        pair = create_token_pair("user-123", role="host")
        assert decode_token(pair["access_token"])["role"] == "host"


class TestPasswordResetToken:
    def test_round_trip_for_same_email(self):
        token = create_password_reset_token("user-1", "Guest@Example.com")
        payload = decode_password_reset_token(token, "guest@example.com")
        assert payload["sub"] == "user-1"
        assert payload["type"] == "reset"

    def test_other_email_rejected(self):
        token = create_password_reset_token("user-1", "guest@example.com")
        with pytest.raises(JWTError):
            decode_password_reset_token(token, "someone@example.com")

    def test_access_token_is_not_a_reset_token(self):
        token = create_access_token({"sub": "user-1", "email": "guest@example.com"})
        with pytest.raises(JWTError):
            decode_password_reset_token(token, "guest@example.com")

    def test_expired_reset_token_rejected(self):
        token = create_password_reset_token("user-1", "guest@example.com", expires_delta=timedelta(seconds=-1))
        with pytest.raises(JWTError):
            decode_password_reset_token(token, "guest@example.com")
