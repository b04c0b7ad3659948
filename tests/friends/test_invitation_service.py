"""Invitation service tests."""

from datetime import timedelta

import pytest
from sqlalchemy import select

from pinory.db.models import FriendInvitationAcceptance
from pinory.errors import (
    AlreadyFriendsError,
    ExpiredError,
    NotFoundError,
    SelfInviteError,
    UsageExceededError,
)
from pinory.friends.invitation_service import (
    accept_invitation,
    count_acceptances,
    deactivate_invitations,
    get_invitation_info,
    get_or_create_invitation,
)
from pinory.friends.invite_codes import INVITE_CHARSET
from pinory.friends.service import get_friend_ids
from pinory.time_utils import utcnow

BASE_URL = "https://pinory.test"


@pytest.fixture
def make_invitation(db_session):
    async def _make(user, **fields):
        invitation = await get_or_create_invitation(db_session, user.id, BASE_URL)
        for key, value in fields.items():
            setattr(invitation, key, value)
        await db_session.commit()
        return invitation

    return _make


class TestGetOrCreate:
    @pytest.mark.asyncio
    async def test_creates_code_and_url(self, db_session, make_user, make_invitation):
        alice = await make_user("Alice")
        invitation = await make_invitation(alice)
        assert len(invitation.invite_code) == 8
        assert set(invitation.invite_code) <= set(INVITE_CHARSET)
        assert invitation.invite_url == f"{BASE_URL}/invite/{invitation.invite_code}"
        assert invitation.usage_count == 0

    @pytest.mark.asyncio
    async def test_reuses_active_invitation(self, db_session, make_user, make_invitation):
        alice = await make_user("Alice")
        first = await make_invitation(alice)
        second = await get_or_create_invitation(db_session, alice.id, BASE_URL)
        assert second.id == first.id

    @pytest.mark.asyncio
    async def test_deactivate_then_new_code(self, db_session, make_user, make_invitation):
        alice = await make_user("Alice")
        first = await make_invitation(alice)
        assert await deactivate_invitations(db_session, alice.id) == 1
        await db_session.commit()

        second = await get_or_create_invitation(db_session, alice.id, BASE_URL)
        assert second.id != first.id
        assert second.is_active


class TestAccept:
    @pytest.mark.asyncio
    async def test_creates_accepted_friendship_and_receipt(self, db_session, make_user, make_invitation):
        alice, bob = await make_user("Alice"), await make_user("Bob")
        invitation = await make_invitation(alice)

        friendship, inv = await accept_invitation(db_session, invitation.invite_code, bob.id)

        assert friendship.status == "accepted"
        assert friendship.requester_id == alice.id
        assert friendship.addressee_id == bob.id
        assert inv.usage_count == 1
        assert inv.user.id == alice.id
        assert await count_acceptances(db_session, invitation.id) == 1
        assert await get_friend_ids(db_session, bob.id) == [alice.id]

        receipt = (await db_session.execute(select(FriendInvitationAcceptance))).scalar_one()
        assert receipt.accepted_by_id == bob.id
        assert receipt.friendship_id == friendship.id

    @pytest.mark.asyncio
    async def test_code_is_case_insensitive(self, db_session, make_user, make_invitation):
        alice, bob = await make_user("Alice"), await make_user("Bob")
        invitation = await make_invitation(alice)
        friendship, _ = await accept_invitation(db_session, f" {invitation.invite_code.lower()} ", bob.id)
        assert friendship.status == "accepted"

    @pytest.mark.asyncio
    async def test_reusable_by_several_users(self, db_session, make_user, make_invitation):
        alice, bob, carol = await make_user("Alice"), await make_user("Bob"), await make_user("Carol")
        invitation = await make_invitation(alice)
        await accept_invitation(db_session, invitation.invite_code, bob.id)
        _, inv = await accept_invitation(db_session, invitation.invite_code, carol.id)
        assert inv.usage_count == 2
        assert sorted(await get_friend_ids(db_session, alice.id)) == sorted([bob.id, carol.id])

    @pytest.mark.asyncio
    async def test_self_invite(self, db_session, make_user, make_invitation):
        alice = await make_user("Alice")
        invitation = await make_invitation(alice)
        with pytest.raises(SelfInviteError):
            await accept_invitation(db_session, invitation.invite_code, alice.id)

    @pytest.mark.asyncio
    async def test_already_friends(self, db_session, make_user, make_friendship, make_invitation):
        alice, bob = await make_user("Alice"), await make_user("Bob")
        await make_friendship(bob, alice)
        invitation = await make_invitation(alice)
        with pytest.raises(AlreadyFriendsError):
            await accept_invitation(db_session, invitation.invite_code, bob.id)

    @pytest.mark.asyncio
    async def test_pending_request_is_promoted_without_receipt(
        self, db_session, make_user, make_friendship, make_invitation
    ):
        alice, bob = await make_user("Alice"), await make_user("Bob")
        pending = await make_friendship(bob, alice, status="pending")
        invitation = await make_invitation(alice)

        friendship, inv = await accept_invitation(db_session, invitation.invite_code, bob.id)

        assert friendship.id == pending.id
        assert friendship.status == "accepted"
        assert inv.usage_count == 0
        assert await count_acceptances(db_session, invitation.id) == 0

    @pytest.mark.asyncio
    async def test_unknown_code(self, db_session, make_user):
        bob = await make_user("Bob")
        with pytest.raises(NotFoundError):
            await accept_invitation(db_session, "ZZZZZZZZ", bob.id)

    @pytest.mark.asyncio
    async def test_expired(self, db_session, make_user, make_invitation):
        alice, bob = await make_user("Alice"), await make_user("Bob")
        invitation = await make_invitation(alice, expires_at=utcnow() - timedelta(minutes=1))
        with pytest.raises(ExpiredError, match="expired"):
            await accept_invitation(db_session, invitation.invite_code, bob.id)

    @pytest.mark.asyncio
    async def test_not_yet_expired(self, db_session, make_user, make_invitation):
        alice, bob = await make_user("Alice"), await make_user("Bob")
        invitation = await make_invitation(alice, expires_at=utcnow() + timedelta(days=1))
        friendship, _ = await accept_invitation(db_session, invitation.invite_code, bob.id)
        assert friendship.status == "accepted"

    @pytest.mark.asyncio
    async def test_deactivated(self, db_session, make_user, make_invitation):
        alice, bob = await make_user("Alice"), await make_user("Bob")
        invitation = await make_invitation(alice, is_active=False)
        with pytest.raises(ExpiredError, match="deactivated"):
            await accept_invitation(db_session, invitation.invite_code, bob.id)

    @pytest.mark.asyncio
    async def test_usage_exceeded(self, db_session, make_user, make_invitation):
        alice, bob, carol = await make_user("Alice"), await make_user("Bob"), await make_user("Carol")
        invitation = await make_invitation(alice, max_usage=1)
        await accept_invitation(db_session, invitation.invite_code, bob.id)
        with pytest.raises(UsageExceededError):
            await accept_invitation(db_session, invitation.invite_code, carol.id)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("max_usage", [None, 0])
    async def test_zero_or_missing_max_usage_is_unlimited(self, db_session, make_user, make_invitation, max_usage):
        alice, bob, carol = await make_user("Alice"), await make_user("Bob"), await make_user("Carol")
        invitation = await make_invitation(alice, max_usage=max_usage)
        await accept_invitation(db_session, invitation.invite_code, bob.id)
        await accept_invitation(db_session, invitation.invite_code, carol.id)
        assert invitation.usage_count == 2


class TestInfo:
    @pytest.mark.asyncio
    async def test_preview(self, db_session, make_user, make_invitation):
        alice = await make_user("Alice")
        invitation = await make_invitation(alice)
        info = await get_invitation_info(db_session, invitation.invite_code.lower())
        assert info == {
            "inviter_name": "Alice",
            "inviter_email": "alice@example.com",
            "inviter_image": None,
            "invite_code": invitation.invite_code,
        }

    @pytest.mark.asyncio
    async def test_nameless_inviter(self, db_session, make_user, make_invitation):
        alice = await make_user("Alice")
        alice.name = None
        await db_session.commit()
        invitation = await make_invitation(alice)
        assert (await get_invitation_info(db_session, invitation.invite_code))["inviter_name"] == "User"
