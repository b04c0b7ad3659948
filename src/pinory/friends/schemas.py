"""Pydantic schemas for friends and invitations."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from pinory.users.schemas import UserSummary

# --- Friendships ---


class SendFriendRequest(BaseModel):
    target_user_id: str = Field(..., min_length=1)


class FriendshipResponse(BaseModel):
    id: str
    requester_id: str
    addressee_id: str
    status: str
    created_at: datetime
    updated_at: datetime


class FriendshipEnvelope(BaseModel):
    friendship: FriendshipResponse


class FriendRequestResponse(FriendshipResponse):
    requester: UserSummary
    addressee: UserSummary


class FriendRequestListResponse(BaseModel):
    requests: list[FriendRequestResponse]


class FriendResponse(UserSummary):
    friendship_id: str
    friendship_status: str
    friends_since: datetime
    location_notes_count: int
    journeys_count: int


class FriendListResponse(BaseModel):
    friends: list[FriendResponse]


class UserSearchResult(UserSummary):
    friendship_status: str | None = None
    friendship_id: str | None = None
    is_sent_by_me: bool = False
    pinories_count: int = 0


class UserSearchResponse(BaseModel):
    users: list[UserSearchResult]


class SuccessResponse(BaseModel):
    success: bool = True


# --- Invitations ---


class InvitationResponse(BaseModel):
    invite_code: str
    invite_url: str
    usage_count: int
    accepted_count: int
    created_at: datetime


class InvitationInfoResponse(BaseModel):
    inviter_name: str
    inviter_email: str | None = None
    inviter_image: str | None = None
    invite_code: str


class AcceptInvitationRequest(BaseModel):
    invite_code: str = Field(..., min_length=1, max_length=32)


class AcceptInvitationResponse(BaseModel):
    success: bool = True
    friendship: FriendshipResponse
    friend: UserSummary
