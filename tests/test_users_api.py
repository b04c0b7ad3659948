"""Session handling and the /users/me endpoints."""

from datetime import timedelta

import pytest
from httpx import AsyncClient

from conftest import auth_headers
from pinory.auth.jwt import create_access_token


class TestAuthentication:
    @pytest.mark.asyncio
    async def test_missing_token(self, client: AsyncClient) -> None:
        response = await client.get("/api/v1/users/me")
        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized"}

    @pytest.mark.asyncio
    async def test_bad_token(self, client: AsyncClient) -> None:
        response = await client.get("/api/v1/users/me", headers={"Authorization": "Bearer nonsense"})
        assert response.status_code == 401
        assert "error" in response.json()

    @pytest.mark.asyncio
    async def test_expired_token(self, client: AsyncClient) -> None:
        token = create_access_token("late@example.com", expires_in=timedelta(seconds=-5))
        response = await client.get("/api/v1/users/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_first_request_provisions_user(self, client: AsyncClient) -> None:
        headers = auth_headers("New.User@Example.com", name="New User")
        first = await client.get("/api/v1/users/me", headers=headers)
        second = await client.get("/api/v1/users/me", headers=headers)
        assert first.status_code == 200
        assert first.json()["email"] == "new.user@example.com"
        assert first.json()["name"] == "New User"
        assert second.json()["id"] == first.json()["id"]


class TestProfile:
    @pytest.mark.asyncio
    async def test_update_profile(self, client: AsyncClient, make_user, headers_for) -> None:
        alice = await make_user("Alice")
        response = await client.patch(
            "/api/v1/users/me",
            json={"name": "Alice B", "avatar_url": "https://cdn.test/alice.png"},
            headers=headers_for(alice),
        )
        assert response.status_code == 200
        assert response.json()["name"] == "Alice B"
        assert response.json()["avatar_url"] == "https://cdn.test/alice.png"
