"""Pydantic schemas for the friends feed."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel

from pinory.content.schemas import JourneyResponse, PlaceResponse
from pinory.reactions.schemas import ReactionResponse
from pinory.users.schemas import UserSummary


class FeedEntry(BaseModel):
    id: str
    type: Literal["location_note", "journey"]
    user: UserSummary
    content: PlaceResponse | JourneyResponse
    created_at: datetime
    reactions: list[ReactionResponse] = []


class FeedResponse(BaseModel):
    feed: list[FeedEntry]
