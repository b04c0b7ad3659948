"""Favorites endpoint tests."""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_requires_auth(client: AsyncClient) -> None:
    assert (await client.get("/api/v1/favorites")).status_code == 401


@pytest.mark.asyncio
async def test_favorite_lifecycle(
    client: AsyncClient, make_user, make_friendship, make_place, headers_for,
) -> None:
    alice, bob = await make_user("Alice"), await make_user("Bob")
    await make_friendship(alice, bob)
    place = await make_place(bob, name="Rooftop bar")

    created = await client.post(
        "/api/v1/favorites",
        json={"place_id": place.id, "rating": 4, "comment": "sunset"},
        headers=headers_for(alice),
    )
    assert created.status_code == 201
    body = created.json()
    assert body["place_id"] == place.id
    assert body["place"]["name"] == "Rooftop bar"
    assert body["place"]["user"]["id"] == bob.id

    duplicate = await client.post("/api/v1/favorites", json={"place_id": place.id}, headers=headers_for(alice))
    assert duplicate.status_code == 409
    assert duplicate.json()["error"] == "Place already in favorites"

    updated = await client.patch(
        f"/api/v1/favorites/{place.id}", json={"rating": 5}, headers=headers_for(alice),
    )
    assert (updated.json()["rating"], updated.json()["comment"]) == (5, "sunset")

    listed = await client.get("/api/v1/favorites", headers=headers_for(alice))
    assert [f["place_id"] for f in listed.json()["favorites"]] == [place.id]

    deleted = await client.delete(f"/api/v1/favorites/{place.id}", headers=headers_for(alice))
    assert deleted.json() == {"success": True}
    missing = await client.delete(f"/api/v1/favorites/{place.id}", headers=headers_for(alice))
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_cannot_favorite_hidden_place(client: AsyncClient, make_user, make_place, headers_for) -> None:
    alice, bob = await make_user("Alice"), await make_user("Bob")
    hidden = await make_place(bob, visibility="private")
    response = await client.post("/api/v1/favorites", json={"place_id": hidden.id}, headers=headers_for(alice))
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_rating_out_of_range(client: AsyncClient, make_user, make_place, headers_for) -> None:
    alice = await make_user("Alice")
    place = await make_place(alice)
    response = await client.post(
        "/api/v1/favorites", json={"place_id": place.id, "rating": 9}, headers=headers_for(alice),
    )
    assert response.status_code == 400
