"""Feed API endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from pinory.auth.dependencies import get_current_user
from pinory.config import get_settings
from pinory.content.schemas import journey_response, place_response
from pinory.database import get_session
from pinory.db.models import User
from pinory.feed.schemas import FeedEntry, FeedResponse
from pinory.feed.service import MAX_FEED_LIMIT, get_feed
from pinory.reactions.schemas import reaction_response
from pinory.reactions.service import CONTENT_LOCATION_NOTE
from pinory.users.schemas import UserSummary

router = APIRouter(prefix="/api/v1/feed", tags=["Feed"])

FEED_MEDIA_PREVIEW = 3


@router.get("", response_model=FeedResponse)
async def get_feed_endpoint(
    type: str = Query("all", pattern="^(all|location_note|journey)$"),  # noqa: A002
    limit: int | None = Query(None, ge=1, le=MAX_FEED_LIMIT),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Friends' places and journeys, newest first, with reactions."""
    settings = get_settings()
    limit = min(limit or settings.feed_default_limit, settings.feed_max_limit)
    entries = await get_feed(db, user.id, type, limit)
    return FeedResponse(
        feed=[
            FeedEntry(
                id=e["id"],
                type=e["type"],
                user=UserSummary.from_user(e["user"]),
                content=(
                    place_response(e["content"], media_limit=FEED_MEDIA_PREVIEW)
                    if e["type"] == CONTENT_LOCATION_NOTE
                    else journey_response(e["content"], e["visible_place_ids"])
                ),
                created_at=e["created_at"],
                reactions=[reaction_response(r) for r in e["reactions"]],
            )
            for e in entries
        ]
    )
