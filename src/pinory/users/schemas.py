"""Pydantic schemas for user profiles."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class UserSummary(BaseModel):
    """Public identity embedded in friends, feed and reaction payloads."""

    id: str
    name: str | None = None
    email: str | None = None
    avatar_url: str | None = None

    @classmethod
    def from_user(cls, user, include_email: bool = True) -> UserSummary:
        return cls(
            id=user.id,
            name=user.name,
            email=user.email if include_email else None,
            avatar_url=user.avatar_url,
        )


class UserResponse(BaseModel):
    id: str
    email: str
    name: str | None = None
    avatar_url: str | None = None
    created_at: datetime


class ProfileUpdateRequest(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=128)
    avatar_url: str | None = Field(None, max_length=2048)
