"""Friends API endpoints.

Friendships (7), Invitations (4). Domain errors raised by the services are
rendered by the global error handler.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from pinory.auth.dependencies import get_current_user
from pinory.config import get_settings
from pinory.database import get_session
from pinory.db.models import Friendship, User
from pinory.friends.invitation_service import (
    accept_invitation,
    count_acceptances,
    deactivate_invitations,
    get_invitation_info,
    get_or_create_invitation,
)
from pinory.friends.schemas import (
    AcceptInvitationRequest,
    AcceptInvitationResponse,
    FriendListResponse,
    FriendRequestListResponse,
    FriendRequestResponse,
    FriendResponse,
    FriendshipEnvelope,
    FriendshipResponse,
    InvitationInfoResponse,
    InvitationResponse,
    SendFriendRequest,
    SuccessResponse,
    UserSearchResponse,
    UserSearchResult,
)
from pinory.friends.service import (
    accept_request,
    list_friends,
    list_requests,
    reject_request,
    remove_friendship,
    search_users,
    send_request,
)
from pinory.users.schemas import UserSummary

router = APIRouter(prefix="/api/v1/friends", tags=["Friends"])


# ── Helpers ──


def _friendship_response(f: Friendship) -> FriendshipResponse:
    return FriendshipResponse(
        id=f.id,
        requester_id=f.requester_id,
        addressee_id=f.addressee_id,
        status=f.status,
        created_at=f.created_at,
        updated_at=f.updated_at,
    )


# ── Invitations (4) ──


@router.get("/invite", response_model=InvitationResponse)
async def get_invitation_endpoint(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Get the caller's active invite link, creating one if needed."""
    settings = get_settings()
    invitation = await get_or_create_invitation(
        db, user.id, settings.app_base_url, settings.invite_code_max_attempts,
    )
    await db.commit()
    accepted = await count_acceptances(db, invitation.id)
    return InvitationResponse(
        invite_code=invitation.invite_code,
        invite_url=invitation.invite_url,
        usage_count=invitation.usage_count,
        accepted_count=accepted,
        created_at=invitation.created_at,
    )


@router.delete("/invite", response_model=SuccessResponse)
async def deactivate_invitation_endpoint(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Deactivate the caller's invite link."""
    await deactivate_invitations(db, user.id)
    await db.commit()
    return SuccessResponse()


@router.post("/invite/accept", response_model=AcceptInvitationResponse)
async def accept_invitation_endpoint(
    body: AcceptInvitationRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Become friends with the owner of an invite code."""
    friendship, invitation = await accept_invitation(db, body.invite_code, user.id)
    await db.commit()
    return AcceptInvitationResponse(
        friendship=_friendship_response(friendship),
        friend=UserSummary.from_user(invitation.user),
    )


@router.get("/invite/info", response_model=InvitationInfoResponse)
async def invitation_info_endpoint(
    code: str = Query(..., min_length=1, max_length=32),
    db: AsyncSession = Depends(get_session),
):
    """Public preview of an invitation (no auth)."""
    return InvitationInfoResponse(**await get_invitation_info(db, code))


# ── Friendships (7) ──


@router.get("", response_model=FriendListResponse)
async def list_friends_endpoint(
    search: str | None = Query(None, max_length=128),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """List accepted friends with their shared content counts."""
    rows = await list_friends(db, user.id, search)
    return FriendListResponse(
        friends=[
            FriendResponse(
                **UserSummary.from_user(row["user"]).model_dump(),
                friendship_id=row["friendship_id"],
                friendship_status=row["friendship_status"],
                friends_since=row["friends_since"],
                location_notes_count=row["location_notes_count"],
                journeys_count=row["journeys_count"],
            )
            for row in rows
        ]
    )


@router.post("", response_model=FriendshipEnvelope, status_code=201)
async def send_request_endpoint(
    body: SendFriendRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Send a friend request."""
    friendship = await send_request(db, user.id, body.target_user_id)
    await db.commit()
    return FriendshipEnvelope(friendship=_friendship_response(friendship))


@router.get("/requests", response_model=FriendRequestListResponse)
async def list_requests_endpoint(
    type: str = Query("received", pattern="^(received|sent)$"),  # noqa: A002
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Pending friend requests received by or sent by the caller."""
    requests = await list_requests(db, user.id, type)
    return FriendRequestListResponse(
        requests=[
            FriendRequestResponse(
                **_friendship_response(f).model_dump(),
                requester=UserSummary.from_user(f.requester),
                addressee=UserSummary.from_user(f.addressee),
            )
            for f in requests
        ]
    )


@router.get("/search", response_model=UserSearchResponse)
async def search_users_endpoint(
    q: str = Query("", max_length=128),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Search users to befriend."""
    rows = await search_users(db, user.id, q)
    return UserSearchResponse(
        users=[
            UserSearchResult(
                **UserSummary.from_user(row["user"]).model_dump(),
                friendship_status=row["friendship_status"],
                friendship_id=row["friendship_id"],
                is_sent_by_me=row["is_sent_by_me"],
                pinories_count=row["pinories_count"],
            )
            for row in rows
        ]
    )


@router.post("/accept/{friendship_id}", response_model=FriendshipEnvelope)
async def accept_request_endpoint(
    friendship_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Accept a pending request sent to the caller."""
    friendship = await accept_request(db, friendship_id, user.id)
    await db.commit()
    return FriendshipEnvelope(friendship=_friendship_response(friendship))


@router.post("/reject/{friendship_id}", response_model=SuccessResponse)
async def reject_request_endpoint(
    friendship_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Reject (delete) a pending request sent to the caller."""
    await reject_request(db, friendship_id, user.id)
    await db.commit()
    return SuccessResponse()


@router.delete("/{friendship_id}", response_model=SuccessResponse)
async def remove_friendship_endpoint(
    friendship_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Unfriend, or cancel a request the caller sent."""
    await remove_friendship(db, friendship_id, user.id)
    await db.commit()
    return SuccessResponse()
