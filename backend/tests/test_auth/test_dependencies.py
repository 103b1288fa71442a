"""Tests for auth dependencies: get_current_user and role checks."""

import uuid
from datetime import timedelta

from httpx import AsyncClient

from beachvillas.auth.jwt import create_access_token, create_token_pair
from beachvillas.models.user import User


class TestGetCurrentUser:
    """Test get_current_user dependency via the /me endpoint."""

    async def test_missing_token_rejected(self, client: AsyncClient):
        response = await client.get("/me")
        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"
        assert response.json() == {"message": "Missing bearer token"}

    async def test_expired_token_rejected(self, client: AsyncClient, guest_user: User):
        token = create_access_token({"sub": str(guest_user.id)}, expires_delta=timedelta(seconds=-1))
        response = await client.get("/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    async def test_invalid_token_format(self, client: AsyncClient):
        response = await client.get("/me", headers={"Authorization": "Bearer not.a.valid.jwt"})
        assert response.status_code == 401

    async def test_refresh_token_type_rejected(self, client: AsyncClient, guest_user: User):
        tokens = create_token_pair(str(guest_user.id))
        response = await client.get("/me", headers={"Authorization": f"Bearer {tokens['refresh_token']}"})
        assert response.status_code == 401

    async def test_nonexistent_user_id_rejected(self, client: AsyncClient):
        token = create_access_token({"sub": str(uuid.uuid4())})
        response = await client.get("/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    async def test_inactive_user_rejected(self, client: AsyncClient, create_user, auth_for):
        user = await create_user("guest", is_active=False)
        response = await client.get("/me", headers=auth_for(user))
        assert response.status_code == 401
        assert response.json()["message"] == "User account is inactive"


class TestRoleChecks:
    async def test_guest_cannot_create_villa(self, client: AsyncClient, guest_headers: dict):
        response = await client.post("/villa", json={}, headers=guest_headers)
        assert response.status_code == 403
        assert response.json() == {"message": "Forbidden"}

    async def test_non_admin_rejected_from_admin_routes(
        self, client: AsyncClient, guest_headers: dict, host_headers: dict
    ):
        for headers in (guest_headers, host_headers):
            response = await client.get("/admin/dashboard", headers=headers)
            assert response.status_code == 403

    async def test_admin_allowed(self, client: AsyncClient, admin_headers: dict):
        response = await client.get("/admin/dashboard", headers=admin_headers)
        assert response.status_code == 200
