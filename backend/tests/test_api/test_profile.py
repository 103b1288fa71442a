"""Tests for the caller's own profile: GET/PATCH /me."""

from httpx import AsyncClient

from beachvillas.models.user import User


class TestProfile:
    async def test_get_me(self, client: AsyncClient, guest_user: User, guest_headers: dict):
        response = await client.get("/me", headers=guest_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["user_id"] == str(guest_user.id)
        assert data["email"] == guest_user.email
        assert data["about"] is None
        assert "hashed_password" not in data

    async def test_update_account_and_profile_fields(self, client: AsyncClient, guest_headers: dict):
        response = await client.patch(
            "/me",
            json={
                "name": "Jane Traveller",
                "phone": "+15550199",
                "notification_settings": {"email": False},
                "about": "Surfer, early riser.",
                "locale": "es-MX",
            },
            headers=guest_headers,
        )
        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Jane Traveller"
        assert data["phone"] == "+15550199"
        assert data["notification_settings"] == {"email": False}
        assert data["about"] == "Surfer, early riser."
        assert data["locale"] == "es-MX"

        again = await client.get("/me", headers=guest_headers)
        assert again.json()["locale"] == "es-MX"

    async def test_second_update_reuses_profile(self, client: AsyncClient, guest_headers: dict):
        await client.patch("/me", json={"about": "First"}, headers=guest_headers)
        response = await client.patch("/me", json={"about": "Second"}, headers=guest_headers)
        assert response.status_code == 200
        assert response.json()["about"] == "Second"

    async def test_null_name_is_ignored(self, client: AsyncClient, guest_user: User, guest_headers: dict):
        response = await client.patch("/me", json={"name": None}, headers=guest_headers)
        assert response.status_code == 200
        assert response.json()["name"] == "Test Guest"

    async def test_role_cannot_be_changed(self, client: AsyncClient, guest_headers: dict):
        response = await client.patch("/me", json={"role": "admin"}, headers=guest_headers)
        assert response.status_code == 400
        assert "role" in response.json()["message"]

    async def test_requires_auth(self, client: AsyncClient):
        response = await client.get("/me")
        assert response.status_code == 401
