"""Places (location notes), media and journeys.

Every piece of content belongs to exactly one user. Reads by other users go
through the share access resolver, the same one that guards share links, with
``is_expired`` fixed to False.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import datetime

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pinory.content.schemas import NoteAttributes
from pinory.db.models import Journey, JourneyStop, Media, Place
from pinory.errors import ForbiddenError, NotFoundError, UnauthorizedError, ValidationError
from pinory.friends.service import get_friend_ids, get_friendship_status
from pinory.sharing.access import (
    FRIEND_VISIBLE,
    FRIENDSHIP_ACCEPTED,
    REASON_SIGN_IN,
    VISIBILITY_PUBLIC,
    ShareAccess,
    determine_share_access,
)
from pinory.time_utils import utcnow

logger = structlog.get_logger()

PLACE_SCOPES = ("mine", "friends", "public")
DEFAULT_LIST_LIMIT = 100


# ---------------------------------------------------------------------------
# Access
# ---------------------------------------------------------------------------


async def resolve_access(db: AsyncSession, visibility: str, owner_id: str, viewer_id: str | None) -> ShareAccess:
    """Look up the viewer/owner friendship and run the access resolver."""
    friendship_status = None
    if viewer_id and viewer_id != owner_id:
        friendship_status = await get_friendship_status(db, viewer_id, owner_id)
    return determine_share_access(
        share_visibility=visibility,
        viewer_user_id=viewer_id,
        owner_user_id=owner_id,
        friendship_status=friendship_status,
        is_expired=False,
    )


def _raise_denied(access: ShareAccess) -> None:
    if access.reason == REASON_SIGN_IN:
        raise UnauthorizedError(access.reason)
    raise ForbiddenError(access.reason or "Forbidden")


def viewable_place_ids(viewer_id: str, friend_ids: Iterable[str], places: Iterable[Place]) -> set[str]:
    """Ids of ``places`` the viewer may open, given the viewer's accepted friend ids."""
    friends = set(friend_ids)
    return {
        place.id
        for place in places
        if determine_share_access(
            share_visibility=place.visibility,
            viewer_user_id=viewer_id,
            owner_user_id=place.created_by,
            friendship_status=FRIENDSHIP_ACCEPTED if place.created_by in friends else None,
            is_expired=False,
        ).can_view
    }


async def visible_stop_place_ids(db: AsyncSession, viewer_id: str, journeys: Iterable[Journey]) -> set[str]:
    """Stop places across ``journeys`` that the viewer may see.

    A journey's own visibility does not extend to its stops; each stop place
    keeps its own.
    """
    places = [stop.place for journey in journeys for stop in journey.stops]
    if not places:
        return set()
    return viewable_place_ids(viewer_id, await get_friend_ids(db, viewer_id), places)


# ---------------------------------------------------------------------------
# Places
# ---------------------------------------------------------------------------


async def get_place(db: AsyncSession, place_id: str, *, refresh: bool = False) -> Place | None:
    stmt = select(Place).where(Place.id == place_id)
    if refresh:
        stmt = stmt.execution_options(populate_existing=True)
    result = await db.execute(stmt)
    return result.unique().scalar_one_or_none()


async def _get_owned_place(db: AsyncSession, place_id: str, user_id: str) -> Place:
    place = await get_place(db, place_id)
    if place is None:
        raise NotFoundError("Place not found")
    if place.created_by != user_id:
        raise ForbiddenError("You can only modify your own places")
    return place


async def create_place(
    db: AsyncSession,
    user_id: str,
    name: str,
    lat: float,
    lng: float,
    address: str | None = None,
    category: str = "other",
    visibility: str = "private",
    note: NoteAttributes | None = None,
    visit_date: datetime | None = None,
) -> Place:
    """Drop a new pin owned by ``user_id``."""
    now = utcnow()
    place = Place(
        created_by=user_id,
        name=name,
        lat=lat,
        lng=lng,
        address=address,
        category=category,
        visibility=visibility,
        attributes=(note or NoteAttributes()).to_stored(),
        visit_date=visit_date,
        created_at=now,
        updated_at=now,
    )
    db.add(place)
    await db.flush()
    logger.info("place_created", place_id=place.id, user_id=user_id, visibility=visibility)
    return await get_place(db, place.id, refresh=True)


async def update_place(
    db: AsyncSession,
    place_id: str,
    user_id: str,
    *,
    name: str | None = None,
    address: str | None = None,
    category: str | None = None,
    visibility: str | None = None,
    note: NoteAttributes | None = None,
    visit_date: datetime | None = None,
) -> Place:
    """Owner-only partial update. A supplied note replaces the stored one."""
    place = await _get_owned_place(db, place_id, user_id)
    if name is not None:
        place.name = name
    if address is not None:
        place.address = address
    if category is not None:
        place.category = category
    if visibility is not None:
        place.visibility = visibility
    if note is not None:
        place.attributes = note.to_stored()
    if visit_date is not None:
        place.visit_date = visit_date
    place.updated_at = utcnow()
    await db.flush()
    return await get_place(db, place.id, refresh=True)


async def delete_place(db: AsyncSession, place_id: str, user_id: str) -> None:
    place = await _get_owned_place(db, place_id, user_id)
    await db.delete(place)
    await db.flush()
    logger.info("place_deleted", place_id=place_id, user_id=user_id)


async def list_places(
    db: AsyncSession,
    user_id: str,
    scope: str = "mine",
    friend_id: str | None = None,
    limit: int = DEFAULT_LIST_LIMIT,
) -> list[Place]:
    """List places newest first.

    ``mine``: every place the user owns. ``friends``: friends' places that are
    friends-visible, optionally narrowed to one friend. ``public``: all public places.
    """
    if scope not in PLACE_SCOPES:
        raise ValidationError(f"scope must be one of {', '.join(PLACE_SCOPES)}")

    stmt = select(Place)
    if scope == "mine":
        stmt = stmt.where(Place.created_by == user_id)
    elif scope == "friends":
        friend_ids = await get_friend_ids(db, user_id)
        if friend_id is not None:
            if friend_id not in friend_ids:
                raise ForbiddenError("You are not friends with this user")
            friend_ids = [friend_id]
        if not friend_ids:
            return []
        stmt = stmt.where(Place.created_by.in_(friend_ids), Place.visibility.in_(FRIEND_VISIBLE))
    else:
        stmt = stmt.where(Place.visibility == VISIBILITY_PUBLIC)

    result = await db.execute(stmt.order_by(Place.created_at.desc()).limit(limit))
    return list(result.unique().scalars().all())


async def get_place_for_viewer(db: AsyncSession, place_id: str, viewer_id: str | None) -> Place:
    """Fetch a place, enforcing its visibility against the viewer."""
    place = await get_place(db, place_id)
    if place is None:
        raise NotFoundError("Place not found")
    access = await resolve_access(db, place.visibility, place.created_by, viewer_id)
    if not access.can_view:
        _raise_denied(access)
    return place


async def attach_media(db: AsyncSession, place_id: str, user_id: str, url: str, media_type: str = "image") -> Place:
    """Associate an already-uploaded image with the owner's place."""
    place = await _get_owned_place(db, place_id, user_id)
    db.add(Media(place_id=place.id, user_id=user_id, url=url, type=media_type, is_active=True, created_at=utcnow()))
    place.updated_at = utcnow()
    await db.flush()
    return await get_place(db, place.id, refresh=True)


# ---------------------------------------------------------------------------
# Journeys
# ---------------------------------------------------------------------------


async def get_journey(db: AsyncSession, journey_id: str, *, refresh: bool = False) -> Journey | None:
    stmt = select(Journey).where(Journey.id == journey_id)
    if refresh:
        stmt = stmt.execution_options(populate_existing=True)
    result = await db.execute(stmt)
    return result.unique().scalar_one_or_none()


async def _get_owned_journey(db: AsyncSession, journey_id: str, user_id: str) -> Journey:
    journey = await get_journey(db, journey_id)
    if journey is None:
        raise NotFoundError("Journey not found")
    if journey.user_id != user_id:
        raise ForbiddenError("You can only modify your own journeys")
    return journey


async def _check_stop_places(db: AsyncSession, user_id: str, place_ids: Sequence[str]) -> None:
    """Every stop must exist and be visible to the journey owner."""
    result = await db.execute(select(Place).where(Place.id.in_(set(place_ids))))
    places = {p.id: p for p in result.unique().scalars().all()}
    for place_id in place_ids:
        place = places.get(place_id)
        if place is None:
            raise NotFoundError(f"Place not found: {place_id}")
        if place.created_by == user_id:
            continue
        access = await resolve_access(db, place.visibility, place.created_by, user_id)
        if not access.can_view:
            raise ForbiddenError(f"Place is not visible to you: {place_id}")


def _build_stops(place_ids: Sequence[str]) -> list[JourneyStop]:
    return [JourneyStop(place_id=place_id, sequence=i) for i, place_id in enumerate(place_ids)]


async def create_journey(
    db: AsyncSession,
    user_id: str,
    title: str,
    place_ids: Sequence[str],
    description: str | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    cover_image: str | None = None,
    visibility: str = "private",
) -> Journey:
    """Create a journey whose stops follow ``place_ids`` in order."""
    if not place_ids:
        raise ValidationError("Title and at least one place are required")
    if start_date and end_date and end_date < start_date:
        raise ValidationError("end_date must not be before start_date")
    await _check_stop_places(db, user_id, place_ids)

    now = utcnow()
    journey = Journey(
        user_id=user_id,
        title=title,
        description=description,
        start_date=start_date,
        end_date=end_date,
        cover_image=cover_image,
        visibility=visibility,
        created_at=now,
        updated_at=now,
        stops=_build_stops(place_ids),
    )
    db.add(journey)
    await db.flush()
    logger.info("journey_created", journey_id=journey.id, user_id=user_id, stops=len(place_ids))
    return await get_journey(db, journey.id, refresh=True)


async def update_journey(
    db: AsyncSession,
    journey_id: str,
    user_id: str,
    *,
    title: str | None = None,
    description: str | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    cover_image: str | None = None,
    visibility: str | None = None,
    place_ids: Sequence[str] | None = None,
) -> Journey:
    """Owner-only partial update. Supplying ``place_ids`` rebuilds the stops."""
    journey = await _get_owned_journey(db, journey_id, user_id)

    if title is not None:
        journey.title = title
    if description is not None:
        journey.description = description
    if start_date is not None:
        journey.start_date = start_date
    if end_date is not None:
        journey.end_date = end_date
    if cover_image is not None:
        journey.cover_image = cover_image
    if visibility is not None:
        journey.visibility = visibility

    if place_ids is not None:
        if not place_ids:
            raise ValidationError("A journey needs at least one place")
        await _check_stop_places(db, user_id, place_ids)
        # Old stops must be gone before new ones reuse their sequence numbers
        journey.stops.clear()
        await db.flush()
        journey.stops.extend(_build_stops(place_ids))

    journey.updated_at = utcnow()
    await db.flush()
    return await get_journey(db, journey.id, refresh=True)


async def delete_journey(db: AsyncSession, journey_id: str, user_id: str) -> None:
    journey = await _get_owned_journey(db, journey_id, user_id)
    await db.delete(journey)
    await db.flush()
    logger.info("journey_deleted", journey_id=journey_id, user_id=user_id)


async def list_journeys(db: AsyncSession, user_id: str) -> list[Journey]:
    """The user's own journeys, newest first, stops in sequence order."""
    result = await db.execute(
        select(Journey).where(Journey.user_id == user_id).order_by(Journey.created_at.desc())
    )
    return list(result.unique().scalars().all())
