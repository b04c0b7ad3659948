"""Pydantic schemas for reactions."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from pinory.users.schemas import UserSummary

ContentType = Literal["location_note", "journey"]
ReactionType = Literal["love", "like", "wow", "smile", "fire"]


class ReactionRequest(BaseModel):
    content_id: str = Field(..., min_length=1, max_length=36)
    content_type: ContentType
    type: ReactionType


class ReactionResponse(BaseModel):
    id: str
    type: str
    content_id: str
    content_type: str
    user: UserSummary
    created_at: datetime


class ReactionEnvelope(BaseModel):
    reaction: ReactionResponse


class ReactionListResponse(BaseModel):
    reactions: list[ReactionResponse]
    reaction_counts: dict[str, int]


def reaction_response(reaction) -> ReactionResponse:
    return ReactionResponse(
        id=reaction.id,
        type=reaction.type,
        content_id=reaction.content_id,
        content_type=reaction.content_type,
        user=UserSummary.from_user(reaction.user, include_email=False),
        created_at=reaction.created_at,
    )
