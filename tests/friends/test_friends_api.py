"""Friends and invitation endpoint tests."""

import pytest
from httpx import AsyncClient


class TestFriendRequests:
    @pytest.mark.asyncio
    async def test_requires_auth(self, client: AsyncClient) -> None:
        response = await client.get("/api/v1/friends")
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_send_accept_and_list(self, client: AsyncClient, make_user, headers_for) -> None:
        alice, bob = await make_user("Alice"), await make_user("Bob")

        sent = await client.post(
            "/api/v1/friends", json={"target_user_id": bob.id}, headers=headers_for(alice),
        )
        assert sent.status_code == 201
        friendship = sent.json()["friendship"]
        assert friendship["status"] == "pending"
        assert friendship["requester_id"] == alice.id

        received = await client.get("/api/v1/friends/requests", headers=headers_for(bob))
        assert [r["id"] for r in received.json()["requests"]] == [friendship["id"]]
        assert received.json()["requests"][0]["requester"]["name"] == "Alice"

        outgoing = await client.get(
            "/api/v1/friends/requests", params={"type": "sent"}, headers=headers_for(alice),
        )
        assert len(outgoing.json()["requests"]) == 1

        accepted = await client.post(f"/api/v1/friends/accept/{friendship['id']}", headers=headers_for(bob))
        assert accepted.status_code == 200
        assert accepted.json()["friendship"]["status"] == "accepted"

        for me, other in ((alice, bob), (bob, alice)):
            friends = (await client.get("/api/v1/friends", headers=headers_for(me))).json()["friends"]
            assert [f["id"] for f in friends] == [other.id]
            assert friends[0]["friendship_status"] == "accepted"
            assert friends[0]["location_notes_count"] == 0

    @pytest.mark.asyncio
    async def test_duplicate_request_conflicts(self, client: AsyncClient, make_user, headers_for) -> None:
        alice, bob = await make_user("Alice"), await make_user("Bob")
        await client.post("/api/v1/friends", json={"target_user_id": bob.id}, headers=headers_for(alice))

        again = await client.post("/api/v1/friends", json={"target_user_id": alice.id}, headers=headers_for(bob))
        assert again.status_code == 409
        assert again.json() == {"error": "Friend request already sent"}

    @pytest.mark.asyncio
    async def test_send_errors(self, client: AsyncClient, make_user, headers_for) -> None:
        alice = await make_user("Alice")
        to_self = await client.post("/api/v1/friends", json={"target_user_id": alice.id}, headers=headers_for(alice))
        assert to_self.status_code == 400
        missing = await client.post("/api/v1/friends", json={"target_user_id": "nobody"}, headers=headers_for(alice))
        assert missing.status_code == 404
        assert missing.json() == {"error": "Target user not found"}

    @pytest.mark.asyncio
    async def test_only_addressee_can_accept(
        self, client: AsyncClient, make_user, make_friendship, headers_for,
    ) -> None:
        alice, bob = await make_user("Alice"), await make_user("Bob")
        friendship = await make_friendship(alice, bob, status="pending")

        response = await client.post(f"/api/v1/friends/accept/{friendship.id}", headers=headers_for(alice))
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_reject_and_remove(self, client: AsyncClient, make_user, make_friendship, headers_for) -> None:
        alice, bob, carol = await make_user("Alice"), await make_user("Bob"), await make_user("Carol")
        pending = await make_friendship(alice, bob, status="pending")
        accepted = await make_friendship(alice, carol)

        rejected = await client.post(f"/api/v1/friends/reject/{pending.id}", headers=headers_for(bob))
        assert rejected.json() == {"success": True}
        assert (await client.get("/api/v1/friends/requests", headers=headers_for(bob))).json()["requests"] == []

        outsider = await client.delete(f"/api/v1/friends/{accepted.id}", headers=headers_for(bob))
        assert outsider.status_code == 403
        removed = await client.delete(f"/api/v1/friends/{accepted.id}", headers=headers_for(carol))
        assert removed.status_code == 200
        assert (await client.get("/api/v1/friends", headers=headers_for(alice))).json()["friends"] == []

        gone = await client.delete(f"/api/v1/friends/{accepted.id}", headers=headers_for(carol))
        assert gone.status_code == 404

    @pytest.mark.asyncio
    async def test_search_reports_relationship(
        self, client: AsyncClient, make_user, make_friendship, headers_for,
    ) -> None:
        alice = await make_user("Alice")
        await make_user("Bob")
        bobby = await make_user("Bobby")
        await make_friendship(alice, bobby, status="pending")

        response = await client.get("/api/v1/friends/search", params={"q": "bob"}, headers=headers_for(alice))
        users = {u["name"]: u for u in response.json()["users"]}
        assert set(users) == {"Bob", "Bobby"}
        assert users["Bob"]["friendship_status"] is None
        assert users["Bobby"]["friendship_status"] == "pending"
        assert users["Bobby"]["is_sent_by_me"] is True


class TestInvitations:
    @pytest.mark.asyncio
    async def test_invite_link_is_stable(self, client: AsyncClient, make_user, headers_for) -> None:
        alice = await make_user("Alice")
        first = await client.get("/api/v1/friends/invite", headers=headers_for(alice))
        second = await client.get("/api/v1/friends/invite", headers=headers_for(alice))

        assert first.status_code == 200
        data = first.json()
        assert len(data["invite_code"]) == 8
        assert data["invite_url"].endswith(f"/invite/{data['invite_code']}")
        assert data["usage_count"] == 0
        assert data["accepted_count"] == 0
        assert second.json()["invite_code"] == data["invite_code"]

    @pytest.mark.asyncio
    async def test_info_is_public(self, client: AsyncClient, make_user, headers_for) -> None:
        alice = await make_user("Alice")
        code = (await client.get("/api/v1/friends/invite", headers=headers_for(alice))).json()["invite_code"]

        info = await client.get("/api/v1/friends/invite/info", params={"code": code.lower()})
        assert info.status_code == 200
        assert info.json()["inviter_name"] == "Alice"
        assert info.json()["invite_code"] == code

        unknown = await client.get("/api/v1/friends/invite/info", params={"code": "ZZZZZZZZ"})
        assert unknown.status_code == 404

    @pytest.mark.asyncio
    async def test_accept_makes_friends(self, client: AsyncClient, make_user, headers_for) -> None:
        alice, bob = await make_user("Alice"), await make_user("Bob")
        code = (await client.get("/api/v1/friends/invite", headers=headers_for(alice))).json()["invite_code"]

        accepted = await client.post(
            "/api/v1/friends/invite/accept", json={"invite_code": code}, headers=headers_for(bob),
        )
        assert accepted.status_code == 200
        body = accepted.json()
        assert body["success"] is True
        assert body["friendship"]["status"] == "accepted"
        assert body["friend"]["id"] == alice.id

        again = await client.post(
            "/api/v1/friends/invite/accept", json={"invite_code": code}, headers=headers_for(bob),
        )
        assert again.status_code == 400
        assert again.json() == {"error": "You are already friends"}

        stats = (await client.get("/api/v1/friends/invite", headers=headers_for(alice))).json()
        assert stats["usage_count"] == 1
        assert stats["accepted_count"] == 1

    @pytest.mark.asyncio
    async def test_own_code_rejected(self, client: AsyncClient, make_user, headers_for) -> None:
        alice = await make_user("Alice")
        code = (await client.get("/api/v1/friends/invite", headers=headers_for(alice))).json()["invite_code"]
        response = await client.post(
            "/api/v1/friends/invite/accept", json={"invite_code": code}, headers=headers_for(alice),
        )
        assert response.status_code == 400
        assert response.json() == {"error": "Cannot accept your own invitation"}

    @pytest.mark.asyncio
    async def test_deactivated_code_is_gone(self, client: AsyncClient, make_user, headers_for) -> None:
        alice, bob = await make_user("Alice"), await make_user("Bob")
        code = (await client.get("/api/v1/friends/invite", headers=headers_for(alice))).json()["invite_code"]

        deactivated = await client.delete("/api/v1/friends/invite", headers=headers_for(alice))
        assert deactivated.json() == {"success": True}

        response = await client.post(
            "/api/v1/friends/invite/accept", json={"invite_code": code}, headers=headers_for(bob),
        )
        assert response.status_code == 410

        fresh = (await client.get("/api/v1/friends/invite", headers=headers_for(alice))).json()["invite_code"]
        assert fresh != code
