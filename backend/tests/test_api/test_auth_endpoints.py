"""Tests for auth API endpoints: register, login, me."""

import uuid

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.security import decode_token, hash_password
from app.models.user import User


class TestRegister:
    """POST /api/v1/auth/register."""

    async def test_register_guest_by_default(self, client: AsyncClient):
        unique = uuid.uuid4().hex[:8]
        response = await client.post(
            "/api/v1/auth/register",
            json={
                "email": f"register-{unique}@test.com",
                "password": "securepass123",
                "name": "New User",
            },
        )
        assert response.status_code == 201
        data = response.json()
        assert data["user"]["email"] == f"register-{unique}@test.com"
        assert data["user"]["role"] == "guest"
        assert data["token"]["token_type"] == "bearer"

        payload = decode_token(data["token"]["access_token"])
        assert payload["sub"] == data["user"]["id"]
        assert payload["role"] == "guest"

    async def test_register_host(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/auth/register",
            json={
                "email": f"host-{uuid.uuid4().hex[:8]}@test.com",
                "password": "securepass123",
                "name": "Venue Owner",
                "role": "host",
            },
        )
        assert response.status_code == 201
        assert response.json()["user"]["role"] == "host"

    async def test_register_unknown_role(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/auth/register",
            json={"email": "admin@test.com", "password": "securepass123", "name": "X", "role": "admin"},
        )
        assert response.status_code == 422

    async def test_register_duplicate_email(self, client: AsyncClient, db_session: AsyncSession):
        email = f"dup-{uuid.uuid4().hex[:8]}@test.com"
        db_session.add(User(email=email, hashed_password=hash_password("testpass"), name="Existing"))
        await db_session.flush()

        response = await client.post(
            "/api/v1/auth/register",
            json={"email": email, "password": "newpass123", "name": "New"},
        )
        assert response.status_code == 409
        assert "already registered" in response.json()["detail"].lower()

    async def test_register_short_password(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/auth/register",
            json={"email": "short@test.com", "password": "short", "name": "X"},
        )
        assert response.status_code == 422


class TestLogin:
    """POST /api/v1/auth/login."""

    async def test_login_success(self, client: AsyncClient, db_session: AsyncSession):
        email = f"login-{uuid.uuid4().hex[:8]}@test.com"
        db_session.add(User(email=email, hashed_password=hash_password("correct_pass"), name="Login User"))
        await db_session.flush()

        response = await client.post("/api/v1/auth/login", json={"email": email, "password": "correct_pass"})
        assert response.status_code == 200
        assert response.json()["user"]["email"] == email

    async def test_login_wrong_password(self, client: AsyncClient, guest_user: User):
        response = await client.post(
            "/api/v1/auth/login", json={"email": guest_user.email, "password": "wrong_pass"}
        )
        assert response.status_code == 401

    async def test_login_unknown_email(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/auth/login", json={"email": "nobody@test.com", "password": "whatever1"}
        )
        assert response.status_code == 401

    async def test_login_inactive(self, client: AsyncClient, db_session: AsyncSession, guest_user: User):
        guest_user.is_active = False
        await db_session.flush()
        response = await client.post(
            "/api/v1/auth/login", json={"email": guest_user.email, "password": "testpass123"}
        )
        assert response.status_code == 403


class TestMe:
    """GET /api/v1/auth/me."""

    async def test_me(self, client: AsyncClient, host_user: User, host_headers: dict):
        response = await client.get("/api/v1/auth/me", headers=host_headers)
        assert response.status_code == 200
        assert response.json()["id"] == str(host_user.id)
        assert response.json()["role"] == "host"

    async def test_me_without_token(self, client: AsyncClient):
        response = await client.get("/api/v1/auth/me")
        assert response.status_code in (401, 403)
