"""Tests for authentication endpoints — register, login, me, refresh."""

import uuid

from httpx import AsyncClient

from staybook.auth.jwt import create_refresh_token
from staybook.models.user import User


def _register_payload(**overrides) -> dict:
    unique = uuid.uuid4().hex[:8]
    payload = {
        "first_name": "New",
        "last_name": "Guest",
        "email": f"newuser-{unique}@test.com",
        "password": "securepass123",
    }
    payload.update(overrides)
    return payload


# ---------------------------------------------------------------------------
# POST /api/v1/auth/register
# ---------------------------------------------------------------------------


class TestRegister:
    """Tests for user registration."""

    async def test_register_success(self, client: AsyncClient) -> None:
        payload = _register_payload()
        response = await client.post("/api/v1/auth/register", json=payload)

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "User registered successfully"
        user = body["data"]["user"]
        assert user["email"] == payload["email"]
        assert user["first_name"] == "New"
        assert user["last_name"] == "Guest"
        assert user["role"] == "user"
        assert user["is_active"] is True
        assert "hashed_password" not in user
        tokens = body["data"]["tokens"]
        assert tokens["access_token"]
        assert tokens["refresh_token"]
        assert tokens["token_type"] == "bearer"

    async def test_email_is_lowercased(self, client: AsyncClient) -> None:
        payload = _register_payload()
        payload["email"] = payload["email"].upper().replace("@TEST.COM", "@test.com")
        response = await client.post("/api/v1/auth/register", json=payload)
        assert response.json()["data"]["user"]["email"] == payload["email"].lower()

    async def test_register_duplicate_email(self, client: AsyncClient) -> None:
        payload = _register_payload()
        first = await client.post("/api/v1/auth/register", json=payload)
        assert first.status_code == 201

        second = await client.post("/api/v1/auth/register", json=payload)
        assert second.status_code == 409
        assert second.json() == {"success": False, "error": "Email already registered"}

    async def test_register_short_password(self, client: AsyncClient) -> None:
        response = await client.post("/api/v1/auth/register", json=_register_payload(password="short"))
        assert response.status_code == 422
        assert response.json()["details"][0]["field"] == "password"

    async def test_register_invalid_email(self, client: AsyncClient) -> None:
        response = await client.post("/api/v1/auth/register", json=_register_payload(email="not-an-email"))
        assert response.status_code == 422

    async def test_register_short_name(self, client: AsyncClient) -> None:
        response = await client.post("/api/v1/auth/register", json=_register_payload(first_name="A"))
        assert response.status_code == 422


# ---------------------------------------------------------------------------
# POST /api/v1/auth/login
# ---------------------------------------------------------------------------


class TestLogin:
    async def test_login_success(self, client: AsyncClient, test_user: User) -> None:
        response = await client.post(
            "/api/v1/auth/login", json={"email": test_user.email, "password": "testpass123"}
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["user"]["id"] == str(test_user.id)
        assert data["tokens"]["access_token"]

    async def test_login_is_case_insensitive_on_email(self, client: AsyncClient, test_user: User) -> None:
        response = await client.post(
            "/api/v1/auth/login", json={"email": test_user.email.upper(), "password": "testpass123"}
        )
        assert response.status_code == 200

    async def test_wrong_password(self, client: AsyncClient, test_user: User) -> None:
        response = await client.post("/api/v1/auth/login", json={"email": test_user.email, "password": "nope-nope"})
        assert response.status_code == 401
        assert response.json()["error"] == "Invalid email or password"

    async def test_unknown_email(self, client: AsyncClient) -> None:
        response = await client.post(
            "/api/v1/auth/login", json={"email": "nobody@test.com", "password": "testpass123"}
        )
        assert response.status_code == 401

    async def test_inactive_account(self, client: AsyncClient, user_factory) -> None:
        user = await user_factory(is_active=False)
        response = await client.post("/api/v1/auth/login", json={"email": user.email, "password": "testpass123"})
        assert response.status_code == 403


# ---------------------------------------------------------------------------
# GET /api/v1/auth/me and POST /api/v1/auth/refresh
# ---------------------------------------------------------------------------


class TestMe:
    async def test_me(self, client: AsyncClient, test_user: User, auth_headers: dict) -> None:
        response = await client.get("/api/v1/auth/me", headers=auth_headers)
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["email"] == test_user.email
        assert data["first_name"] == "Jane"

    async def test_admin_role_is_reported(self, client: AsyncClient, admin_headers: dict) -> None:
        response = await client.get("/api/v1/auth/me", headers=admin_headers)
        assert response.json()["data"]["role"] == "admin"


class TestRefresh:
    async def test_refresh_success(self, client: AsyncClient, test_user: User) -> None:
        token = create_refresh_token(str(test_user.id))
        response = await client.post("/api/v1/auth/refresh", json={"refresh_token": token})
        assert response.status_code == 200
        tokens = response.json()["data"]
        assert tokens["access_token"]
        assert tokens["refresh_token"]

    async def test_access_token_cannot_refresh(self, client: AsyncClient, test_user: User, auth_headers: dict):
        access = auth_headers["Authorization"].removeprefix("Bearer ")
        response = await client.post("/api/v1/auth/refresh", json={"refresh_token": access})
        assert response.status_code == 401

    async def test_garbage_token(self, client: AsyncClient) -> None:
        response = await client.post("/api/v1/auth/refresh", json={"refresh_token": "garbage"})
        assert response.status_code == 401

    async def test_unknown_user(self, client: AsyncClient) -> None:
        token = create_refresh_token(str(uuid.uuid4()))
        response = await client.post("/api/v1/auth/refresh", json={"refresh_token": token})
        assert response.status_code == 401
        assert response.json()["error"] == "User not found or inactive"
