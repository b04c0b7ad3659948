"""Pydantic schemas for share links."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from pinory.content.schemas import PlaceResponse, Visibility
from pinory.sharing.slugs import build_share_url


class ShareCreateRequest(BaseModel):
    place_id: str = Field(..., min_length=1, max_length=36)
    # Unknown values fall back to "friends" rather than failing validation
    visibility: str | None = Field(None, max_length=24)
    expires_at: datetime | None = None


class SharePlaceSummary(BaseModel):
    id: str
    name: str
    address: str | None = None
    lat: float
    lng: float


class ShareResponse(BaseModel):
    id: str
    share_slug: str
    share_url: str
    visibility: Visibility
    expires_at: datetime | None = None
    view_count: int
    is_active: bool
    created_at: datetime
    place: SharePlaceSummary | None = None


class ShareListResponse(BaseModel):
    shares: list[ShareResponse]


class ShareInfo(BaseModel):
    share_slug: str
    visibility: str
    view_count: int
    created_at: datetime
    expires_at: datetime | None = None


class SharedPlaceResponse(BaseModel):
    can_view: bool = True
    view_type: str
    pinory: PlaceResponse
    share_info: ShareInfo


def share_response(share, base_url: str, include_place: bool = False) -> ShareResponse:
    place = None
    if include_place:
        place = SharePlaceSummary(
            id=share.place.id,
            name=share.place.name,
            address=share.place.address,
            lat=share.place.lat,
            lng=share.place.lng,
        )
    return ShareResponse(
        id=share.id,
        share_slug=share.share_slug,
        share_url=build_share_url(base_url, share.share_slug),
        visibility=share.visibility,
        expires_at=share.expires_at,
        view_count=share.view_count,
        is_active=share.is_active,
        created_at=share.created_at,
        place=place,
    )
