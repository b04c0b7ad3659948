"""Friends activity feed.

Merges friends' friends-visible places and journeys into one reverse
chronological stream and attaches reactions to every entry.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import structlog
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from pinory.content.service import viewable_place_ids
from pinory.db.models import Journey, Place
from pinory.errors import InternalError, ValidationError
from pinory.friends.service import get_friend_ids
from pinory.reactions.service import CONTENT_JOURNEY, CONTENT_LOCATION_NOTE, reactions_for_items
from pinory.sharing.access import FRIEND_VISIBLE
from pinory.time_utils import as_utc

logger = structlog.get_logger()

FEED_TYPE_ALL = "all"
FEED_TYPES = (FEED_TYPE_ALL, CONTENT_LOCATION_NOTE, CONTENT_JOURNEY)
DEFAULT_FEED_LIMIT = 50
MAX_FEED_LIMIT = 100


async def _fetch_places(db: AsyncSession, friend_ids: Sequence[str], limit: int) -> list[Place]:
    result = await db.execute(
        select(Place)
        .where(Place.created_by.in_(friend_ids), Place.visibility.in_(FRIEND_VISIBLE))
        .order_by(Place.created_at.desc())
        .limit(limit)
    )
    return list(result.unique().scalars().all())


async def _fetch_journeys(db: AsyncSession, friend_ids: Sequence[str], limit: int) -> list[Journey]:
    result = await db.execute(
        select(Journey)
        .where(Journey.user_id.in_(friend_ids), Journey.visibility.in_(FRIEND_VISIBLE))
        .order_by(Journey.created_at.desc())
        .limit(limit)
    )
    return list(result.unique().scalars().all())


def merge_entries(places: Sequence[Place], journeys: Sequence[Journey], limit: int) -> list[dict[str, Any]]:
    """Tag, merge and order candidates newest first, keeping at most ``limit``.

    ``created_at`` is normalised to aware UTC. The sort is stable, so entries
    with equal timestamps keep places before journeys and each list's own order.
    """
    entries: list[dict[str, Any]] = [
        {
            "id": p.id,
            "type": CONTENT_LOCATION_NOTE,
            "user": p.creator,
            "content": p,
            "created_at": as_utc(p.created_at),
        }
        for p in places
    ]
    entries.extend(
        {
            "id": j.id,
            "type": CONTENT_JOURNEY,
            "user": j.user,
            "content": j,
            "created_at": as_utc(j.created_at),
        }
        for j in journeys
    )
    entries.sort(key=lambda e: e["created_at"], reverse=True)
    return entries[:limit]


async def get_feed(
    db: AsyncSession,
    user_id: str,
    feed_type: str = FEED_TYPE_ALL,
    limit: int = DEFAULT_FEED_LIMIT,
) -> list[dict[str, Any]]:
    """Build the caller's feed.

    Returns entries ``{id, type, user, content, created_at, reactions}``;
    journey entries also carry ``visible_place_ids``, the stop places the
    caller may see.
    A caller without friends gets an empty feed without any content query.
    Any database failure is reported as a single ``InternalError``; no
    partial feed is returned.
    """
    if feed_type not in FEED_TYPES:
        raise ValidationError(f"type must be one of {', '.join(FEED_TYPES)}")
    if not 1 <= limit <= MAX_FEED_LIMIT:
        raise ValidationError(f"limit must be between 1 and {MAX_FEED_LIMIT}")

    try:
        friend_ids = await get_friend_ids(db, user_id)
        if not friend_ids:
            return []

        places: list[Place] = []
        journeys: list[Journey] = []
        if feed_type in (FEED_TYPE_ALL, CONTENT_LOCATION_NOTE):
            places = await _fetch_places(db, friend_ids, limit)
        if feed_type in (FEED_TYPE_ALL, CONTENT_JOURNEY):
            journeys = await _fetch_journeys(db, friend_ids, limit)

        entries = merge_entries(places, journeys, limit)
        stop_place_ids = viewable_place_ids(
            user_id,
            friend_ids,
            [stop.place for e in entries if e["type"] == CONTENT_JOURNEY for stop in e["content"].stops],
        )
        reactions = await reactions_for_items(db, [(e["id"], e["type"]) for e in entries])
    except SQLAlchemyError as exc:
        logger.error("feed_fetch_failed", user_id=user_id, error=str(exc))
        raise InternalError("Failed to fetch feed") from exc

    for entry in entries:
        entry["reactions"] = reactions.get((entry["id"], entry["type"]), [])
        if entry["type"] == CONTENT_JOURNEY:
            entry["visible_place_ids"] = stop_place_ids
    return entries
