"""Share links for single places.

A share link carries its own visibility and expiry, independent of the
place's visibility. Viewing goes through ``determine_share_access``.
"""

from __future__ import annotations

from datetime import datetime

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pinory.content.service import get_place
from pinory.db.models import PinoryShare
from pinory.errors import ForbiddenError, NotFoundError, ValidationError
from pinory.friends.service import get_friendship_status
from pinory.sharing.access import VISIBILITIES, VISIBILITY_FRIENDS, ShareAccess, determine_share_access
from pinory.sharing.slugs import DEFAULT_MAX_ATTEMPTS, generate_unique_share_slug, is_valid_share_slug
from pinory.time_utils import days_from_now, is_past, utcnow

logger = structlog.get_logger()

DEFAULT_EXPIRY_DAYS = 30


async def get_share(db: AsyncSession, share_id: str) -> PinoryShare | None:
    result = await db.execute(select(PinoryShare).where(PinoryShare.id == share_id))
    return result.unique().scalar_one_or_none()


async def get_share_by_slug(db: AsyncSession, slug: str) -> PinoryShare | None:
    result = await db.execute(select(PinoryShare).where(PinoryShare.share_slug == slug))
    return result.unique().scalar_one_or_none()


async def get_active_share(db: AsyncSession, place_id: str, user_id: str) -> PinoryShare | None:
    result = await db.execute(
        select(PinoryShare)
        .where(
            PinoryShare.place_id == place_id,
            PinoryShare.created_by == user_id,
            PinoryShare.is_active.is_(True),
        )
        .order_by(PinoryShare.created_at.desc())
        .limit(1)
    )
    return result.unique().scalar_one_or_none()


async def create_share(
    db: AsyncSession,
    place_id: str,
    user_id: str,
    visibility: str | None = None,
    expires_at: datetime | None = None,
    *,
    expiry_days: int = DEFAULT_EXPIRY_DAYS,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
) -> tuple[PinoryShare, bool]:
    """Create a share link for an own place, or return the active one.

    Returns ``(share, created)``. Unknown or missing visibility falls back
    to ``friends``. An active link that has already expired is deactivated
    and replaced by a fresh one.
    """
    place = await get_place(db, place_id)
    if place is None:
        raise NotFoundError("Place not found")
    if place.created_by != user_id:
        raise ForbiddenError("You can only share your own pinories")

    existing = await get_active_share(db, place_id, user_id)
    if existing is not None:
        if not is_past(existing.expires_at):
            return existing, False
        existing.is_active = False
        logger.info("share_expired_replaced", share_id=existing.id, place_id=place_id)

    share = PinoryShare(
        place_id=place_id,
        created_by=user_id,
        share_slug=await generate_unique_share_slug(db, max_attempts),
        visibility=visibility if visibility in VISIBILITIES else VISIBILITY_FRIENDS,
        expires_at=expires_at or days_from_now(expiry_days),
        view_count=0,
        is_active=True,
        created_at=utcnow(),
    )
    db.add(share)
    await db.flush()
    logger.info("share_created", share_id=share.id, place_id=place_id, visibility=share.visibility)
    return share, True


async def list_shares(db: AsyncSession, user_id: str) -> list[PinoryShare]:
    """The user's active share links, newest first."""
    result = await db.execute(
        select(PinoryShare)
        .where(PinoryShare.created_by == user_id, PinoryShare.is_active.is_(True))
        .order_by(PinoryShare.created_at.desc())
    )
    return list(result.unique().scalars().all())


async def revoke_share(db: AsyncSession, share_id: str, user_id: str) -> PinoryShare:
    share = await get_share(db, share_id)
    if share is None:
        raise NotFoundError("Share link not found")
    if share.created_by != user_id:
        raise ForbiddenError("You can only revoke your own share links")
    share.is_active = False
    await db.flush()
    logger.info("share_revoked", share_id=share_id, user_id=user_id)
    return share


async def view_share(db: AsyncSession, slug: str, viewer_id: str | None) -> tuple[PinoryShare, ShareAccess]:
    """Resolve a share link for a viewer (who may be anonymous).

    Non-owner views increment ``view_count``. A denial raises
    ``ForbiddenError`` carrying the resolver's reason.
    """
    if not is_valid_share_slug(slug):
        raise ValidationError("Invalid share link format")

    share = await get_share_by_slug(db, slug)
    if share is None or not share.is_active:
        raise NotFoundError("Share link not found")

    owner_id = share.place.created_by
    friendship_status = None
    if viewer_id and viewer_id != owner_id:
        friendship_status = await get_friendship_status(db, viewer_id, owner_id)

    access = determine_share_access(
        share_visibility=share.visibility,
        viewer_user_id=viewer_id,
        owner_user_id=owner_id,
        friendship_status=friendship_status,
        is_expired=is_past(share.expires_at),
    )
    if not access.can_view:
        logger.info("share_view_denied", share_id=share.id, reason=access.reason)
        raise ForbiddenError("Access denied", reason=access.reason, can_view=False)

    if viewer_id != owner_id:
        share.view_count += 1
        await db.flush()
    return share, access
