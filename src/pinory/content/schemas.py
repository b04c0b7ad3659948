"""Pydantic schemas for places (location notes), media and journeys."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from pinory.users.schemas import UserSummary

Visibility = Literal["private", "friends", "selected_friends", "public"]


class NoteAttributes(BaseModel):
    """Optional note payload attached to a pin, stored as JSON on the place."""

    model_config = ConfigDict(extra="ignore")

    content: str | None = Field(None, max_length=5000)
    mood: str | None = Field(None, max_length=16)
    timestamp: datetime | None = None

    @classmethod
    def from_stored(cls, raw: dict | None) -> NoteAttributes:
        return cls.model_validate(raw or {})

    def to_stored(self) -> dict:
        return self.model_dump(mode="json", exclude_none=True)


# --- Places ---


class PlaceCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=256)
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)
    address: str | None = Field(None, max_length=512)
    category: str = Field("other", min_length=1, max_length=64)
    visibility: Visibility = "private"
    note: NoteAttributes | None = None
    visit_date: datetime | None = None


class PlaceUpdateRequest(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=256)
    address: str | None = Field(None, max_length=512)
    category: str | None = Field(None, min_length=1, max_length=64)
    visibility: Visibility | None = None
    note: NoteAttributes | None = None
    visit_date: datetime | None = None


class MediaCreateRequest(BaseModel):
    url: str = Field(..., min_length=1, max_length=2048)
    type: Literal["image"] = "image"


class MediaResponse(BaseModel):
    id: str
    url: str
    type: str
    created_at: datetime


class PlaceResponse(BaseModel):
    id: str
    name: str
    lat: float
    lng: float
    address: str | None = None
    category: str
    visibility: str
    note: NoteAttributes
    visit_date: datetime | None = None
    images: list[str] = []
    media: list[MediaResponse] = []
    user: UserSummary
    created_at: datetime
    updated_at: datetime


class PlaceListResponse(BaseModel):
    places: list[PlaceResponse]


# --- Journeys ---


class JourneyCreateRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=256)
    description: str | None = Field(None, max_length=5000)
    start_date: datetime | None = None
    end_date: datetime | None = None
    cover_image: str | None = Field(None, max_length=2048)
    visibility: Visibility = "private"
    place_ids: list[str] = Field(..., min_length=1, max_length=100)


class JourneyUpdateRequest(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=256)
    description: str | None = Field(None, max_length=5000)
    start_date: datetime | None = None
    end_date: datetime | None = None
    cover_image: str | None = Field(None, max_length=2048)
    visibility: Visibility | None = None
    place_ids: list[str] | None = Field(None, min_length=1, max_length=100)


class JourneyStopResponse(BaseModel):
    sequence: int
    place_id: str
    name: str
    lat: float
    lng: float
    address: str | None = None
    cover_image: str | None = None


class JourneyResponse(BaseModel):
    id: str
    title: str
    description: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    cover_image: str | None = None
    visibility: str
    stops: list[JourneyStopResponse]
    user: UserSummary
    created_at: datetime
    updated_at: datetime


class JourneyListResponse(BaseModel):
    journeys: list[JourneyResponse]


# --- Builders ---


def place_response(place, media_limit: int | None = None) -> PlaceResponse:
    """Build a PlaceResponse from a Place with creator and media loaded."""
    media = [m for m in place.media if m.is_active][:media_limit]
    return PlaceResponse(
        id=place.id,
        name=place.name,
        lat=place.lat,
        lng=place.lng,
        address=place.address,
        category=place.category,
        visibility=place.visibility,
        note=NoteAttributes.from_stored(place.attributes),
        visit_date=place.visit_date,
        images=[m.url for m in media],
        media=[MediaResponse(id=m.id, url=m.url, type=m.type, created_at=m.created_at) for m in media],
        user=UserSummary.from_user(place.creator),
        created_at=place.created_at,
        updated_at=place.updated_at,
    )


def journey_response(journey, visible_place_ids: set[str] | None = None) -> JourneyResponse:
    """Build a JourneyResponse; each stop carries its place's newest active image.

    When ``visible_place_ids`` is given, stops whose place is not in it are left out.
    """
    stops = []
    for stop in journey.stops:
        if visible_place_ids is not None and stop.place_id not in visible_place_ids:
            continue
        images = [m.url for m in stop.place.media if m.is_active]
        stops.append(JourneyStopResponse(
            sequence=stop.sequence,
            place_id=stop.place_id,
            name=stop.place.name,
            lat=stop.place.lat,
            lng=stop.place.lng,
            address=stop.place.address,
            cover_image=images[0] if images else None,
        ))
    return JourneyResponse(
        id=journey.id,
        title=journey.title,
        description=journey.description,
        start_date=journey.start_date,
        end_date=journey.end_date,
        cover_image=journey.cover_image,
        visibility=journey.visibility,
        stops=stops,
        user=UserSummary.from_user(journey.user),
        created_at=journey.created_at,
        updated_at=journey.updated_at,
    )
