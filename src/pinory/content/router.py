"""Content API endpoints for places (location notes), media and journeys."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from pinory.auth.dependencies import get_current_user, get_optional_user
from pinory.content.schemas import (
    JourneyCreateRequest,
    JourneyListResponse,
    JourneyResponse,
    JourneyUpdateRequest,
    MediaCreateRequest,
    PlaceCreateRequest,
    PlaceListResponse,
    PlaceResponse,
    PlaceUpdateRequest,
    journey_response,
    place_response,
)
from pinory.content.service import (
    attach_media,
    create_journey,
    create_place,
    delete_journey,
    delete_place,
    get_place_for_viewer,
    list_journeys,
    list_places,
    update_journey,
    update_place,
    visible_stop_place_ids,
)
from pinory.database import get_session
from pinory.db.models import User
from pinory.friends.schemas import SuccessResponse

router = APIRouter(prefix="/api/v1", tags=["Content"])


# ── Places ──


@router.get("/places", response_model=PlaceListResponse)
async def list_places_endpoint(
    scope: str = Query("mine", pattern="^(mine|friends|public)$"),
    friend_id: str | None = Query(None),
    limit: int = Query(100, ge=1, le=500),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """List own, friends' or public places."""
    places = await list_places(db, user.id, scope, friend_id, limit)
    return PlaceListResponse(places=[place_response(p) for p in places])


@router.post("/places", response_model=PlaceResponse, status_code=201)
async def create_place_endpoint(
    body: PlaceCreateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Drop a pin with an optional note."""
    place = await create_place(
        db,
        user.id,
        name=body.name,
        lat=body.lat,
        lng=body.lng,
        address=body.address,
        category=body.category,
        visibility=body.visibility,
        note=body.note,
        visit_date=body.visit_date,
    )
    await db.commit()
    return place_response(place)


@router.get("/places/{place_id}", response_model=PlaceResponse)
async def get_place_endpoint(
    place_id: str,
    viewer: User | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_session),
):
    """Get a single place if its visibility allows the caller to see it."""
    place = await get_place_for_viewer(db, place_id, viewer.id if viewer else None)
    return place_response(place)


@router.patch("/places/{place_id}", response_model=PlaceResponse)
async def update_place_endpoint(
    place_id: str,
    body: PlaceUpdateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Update an own place."""
    place = await update_place(
        db,
        place_id,
        user.id,
        name=body.name,
        address=body.address,
        category=body.category,
        visibility=body.visibility,
        note=body.note,
        visit_date=body.visit_date,
    )
    await db.commit()
    return place_response(place)


@router.delete("/places/{place_id}", response_model=SuccessResponse)
async def delete_place_endpoint(
    place_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    await delete_place(db, place_id, user.id)
    await db.commit()
    return SuccessResponse()


@router.post("/places/{place_id}/media", response_model=PlaceResponse, status_code=201)
async def attach_media_endpoint(
    place_id: str,
    body: MediaCreateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Attach an uploaded image URL to an own place."""
    place = await attach_media(db, place_id, user.id, body.url, body.type)
    await db.commit()
    return place_response(place)


# ── Journeys ──


@router.get("/journeys", response_model=JourneyListResponse)
async def list_journeys_endpoint(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """List own journeys."""
    journeys = await list_journeys(db, user.id)
    visible = await visible_stop_place_ids(db, user.id, journeys)
    return JourneyListResponse(journeys=[journey_response(j, visible) for j in journeys])


@router.post("/journeys", response_model=JourneyResponse, status_code=201)
async def create_journey_endpoint(
    body: JourneyCreateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Create a journey from an ordered list of places."""
    journey = await create_journey(
        db,
        user.id,
        title=body.title,
        place_ids=body.place_ids,
        description=body.description,
        start_date=body.start_date,
        end_date=body.end_date,
        cover_image=body.cover_image,
        visibility=body.visibility,
    )
    await db.commit()
    return journey_response(journey, await visible_stop_place_ids(db, user.id, [journey]))


@router.patch("/journeys/{journey_id}", response_model=JourneyResponse)
async def update_journey_endpoint(
    journey_id: str,
    body: JourneyUpdateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Update an own journey; supplying place_ids replaces its stops."""
    journey = await update_journey(
        db,
        journey_id,
        user.id,
        title=body.title,
        description=body.description,
        start_date=body.start_date,
        end_date=body.end_date,
        cover_image=body.cover_image,
        visibility=body.visibility,
        place_ids=body.place_ids,
    )
    await db.commit()
    return journey_response(journey, await visible_stop_place_ids(db, user.id, [journey]))


@router.delete("/journeys/{journey_id}", response_model=SuccessResponse)
async def delete_journey_endpoint(
    journey_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    await delete_journey(db, journey_id, user.id)
    await db.commit()
    return SuccessResponse()
