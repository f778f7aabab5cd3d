"""Tests for auth dependencies: get_current_user edge cases and the admin gate."""

import uuid
from datetime import timedelta

from httpx import AsyncClient

from staybook.auth.jwt import create_access_token, create_token_pair
from staybook.models.user import User


class TestGetCurrentUser:
    """Test get_current_user dependency via the /me endpoint."""

    async def test_valid_token_accepted(self, client: AsyncClient, test_user: User, auth_headers: dict):
        response = await client.get("/api/v1/auth/me", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["data"]["id"] == str(test_user.id)

    async def test_expired_token_rejected(self, client: AsyncClient, test_user: User):
        token = create_access_token(str(test_user.id), expires_delta=timedelta(seconds=-1))
        response = await client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"
        assert response.json() == {"success": False, "error": "Could not validate credentials"}

    async def test_invalid_token_format(self, client: AsyncClient):
        response = await client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not.a.valid.jwt"})
        assert response.status_code == 401

    async def test_refresh_token_type_rejected(self, client: AsyncClient, test_user: User):
        tokens = create_token_pair(str(test_user.id))
        response = await client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {tokens['refresh_token']}"})
        assert response.status_code == 401

    async def test_non_uuid_subject_rejected(self, client: AsyncClient):
        token = create_access_token("not-a-uuid")
        response = await client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    async def test_nonexistent_user_id_rejected(self, client: AsyncClient):
        token = create_access_token(str(uuid.uuid4()))
        response = await client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    async def test_missing_token(self, client: AsyncClient):
        response = await client.get("/api/v1/auth/me")
        assert response.status_code in (401, 403)

    async def test_inactive_user_rejected(self, client: AsyncClient, user_factory):
        user = await user_factory(is_active=False)
        token = create_access_token(str(user.id))
        response = await client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401
        assert response.json()["error"] == "User account is inactive"


class TestRequireAdmin:
    async def test_role_is_read_from_the_stored_user(self, client: AsyncClient, test_user: User):
        """A forged ``role`` claim does not grant admin access."""
        token = create_access_token(str(test_user.id), role="admin")
        response = await client.get("/api/v1/bookings", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 403

    async def test_admin_passes(self, client: AsyncClient, admin_headers: dict):
        response = await client.get("/api/v1/bookings", headers=admin_headers)
        assert response.status_code == 200
