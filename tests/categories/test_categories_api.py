"""Categories endpoint tests."""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_requires_auth(client: AsyncClient) -> None:
    assert (await client.get("/api/v1/categories")).status_code == 401


@pytest.mark.asyncio
async def test_create_and_list(client: AsyncClient, make_user, headers_for) -> None:
    alice = await make_user("Alice")
    created = await client.post(
        "/api/v1/categories",
        json={"name": "Cafe", "slug": "cafe", "icon": "☕", "color": "#8B4513"},
        headers=headers_for(alice),
    )
    assert created.status_code == 201
    assert created.json()["icon"] == "☕"

    await client.post("/api/v1/categories", json={"name": "Bar", "slug": "bar"}, headers=headers_for(alice))

    listed = await client.get("/api/v1/categories", headers=headers_for(alice))
    categories = listed.json()["categories"]
    assert [c["slug"] for c in categories] == ["bar", "cafe"]
    assert categories[0]["color"] == "#3B82F6"


@pytest.mark.asyncio
async def test_duplicate_slug(client: AsyncClient, make_user, headers_for) -> None:
    alice = await make_user("Alice")
    payload = {"name": "Cafe", "slug": "cafe"}
    await client.post("/api/v1/categories", json=payload, headers=headers_for(alice))
    response = await client.post("/api/v1/categories", json=payload, headers=headers_for(alice))
    assert response.status_code == 409
    assert response.json()["error"] == "Category with this name already exists"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [{"name": "Cafe"}, {"name": "Cafe", "slug": "Not A Slug"}, {"name": "Cafe", "slug": "cafe", "color": "blue"}],
)
async def test_invalid_payload(client: AsyncClient, make_user, headers_for, payload) -> None:
    alice = await make_user("Alice")
    response = await client.post("/api/v1/categories", json=payload, headers=headers_for(alice))
    assert response.status_code == 400
