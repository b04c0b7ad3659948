"""Pydantic schemas for favorites."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from pinory.content.schemas import PlaceResponse, place_response

FAVORITE_MEDIA_PREVIEW = 3


class FavoriteCreateRequest(BaseModel):
    place_id: str = Field(..., min_length=1, max_length=36)
    rating: int | None = Field(None, ge=1, le=5)
    comment: str | None = Field(None, max_length=2000)


class FavoriteUpdateRequest(BaseModel):
    rating: int | None = Field(None, ge=1, le=5)
    comment: str | None = Field(None, max_length=2000)


class FavoriteResponse(BaseModel):
    id: str
    place_id: str
    rating: int | None = None
    comment: str | None = None
    place: PlaceResponse
    created_at: datetime
    updated_at: datetime


class FavoriteListResponse(BaseModel):
    favorites: list[FavoriteResponse]


def favorite_response(favorite) -> FavoriteResponse:
    return FavoriteResponse(
        id=favorite.id,
        place_id=favorite.place_id,
        rating=favorite.rating,
        comment=favorite.comment,
        place=place_response(favorite.place, media_limit=FAVORITE_MEDIA_PREVIEW),
        created_at=favorite.created_at,
        updated_at=favorite.updated_at,
    )
