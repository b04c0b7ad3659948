"""Favorites: places a user bookmarked, with an optional rating and comment.

A place can be favorited once per user, and only while the user is allowed
to see it. Favorites of places that later become hidden stay stored but are
left out of the listing.
"""

from __future__ import annotations

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from pinory.content.service import get_place_for_viewer, viewable_place_ids
from pinory.db.models import Favorite
from pinory.errors import ConflictError, NotFoundError, ValidationError
from pinory.friends.service import get_friend_ids
from pinory.time_utils import utcnow

logger = structlog.get_logger()

MIN_RATING = 1
MAX_RATING = 5


def _check_rating(rating: int | None) -> None:
    if rating is not None and not MIN_RATING <= rating <= MAX_RATING:
        raise ValidationError(f"rating must be between {MIN_RATING} and {MAX_RATING}")


async def get_favorite(db: AsyncSession, user_id: str, place_id: str, *, refresh: bool = False) -> Favorite | None:
    stmt = select(Favorite).where(Favorite.user_id == user_id, Favorite.place_id == place_id)
    if refresh:
        stmt = stmt.execution_options(populate_existing=True)
    result = await db.execute(stmt)
    return result.unique().scalar_one_or_none()


async def add_favorite(
    db: AsyncSession,
    user_id: str,
    place_id: str,
    rating: int | None = None,
    comment: str | None = None,
) -> Favorite:
    """Bookmark a place the user can see.

    Raises:
        NotFoundError: unknown place.
        ForbiddenError: the place is not visible to the user.
        ConflictError: the place is already a favorite.
    """
    _check_rating(rating)
    await get_place_for_viewer(db, place_id, user_id)
    if await get_favorite(db, user_id, place_id) is not None:
        raise ConflictError("Place already in favorites")

    now = utcnow()
    db.add(Favorite(
        user_id=user_id,
        place_id=place_id,
        rating=rating,
        comment=comment,
        created_at=now,
        updated_at=now,
    ))
    try:
        await db.flush()
    except IntegrityError as exc:
        await db.rollback()
        raise ConflictError("Place already in favorites") from exc
    logger.info("favorite_added", user_id=user_id, place_id=place_id)
    return await get_favorite(db, user_id, place_id, refresh=True)


async def update_favorite(
    db: AsyncSession,
    user_id: str,
    place_id: str,
    *,
    rating: int | None = None,
    comment: str | None = None,
) -> Favorite:
    """Change the rating and/or comment of an existing favorite."""
    _check_rating(rating)
    favorite = await get_favorite(db, user_id, place_id)
    if favorite is None:
        raise NotFoundError("Favorite not found")
    if rating is not None:
        favorite.rating = rating
    if comment is not None:
        favorite.comment = comment
    favorite.updated_at = utcnow()
    await db.flush()
    return await get_favorite(db, user_id, place_id, refresh=True)


async def remove_favorite(db: AsyncSession, user_id: str, place_id: str) -> None:
    favorite = await get_favorite(db, user_id, place_id)
    if favorite is None:
        raise NotFoundError("Favorite not found")
    await db.delete(favorite)
    await db.flush()
    logger.info("favorite_removed", user_id=user_id, place_id=place_id)


async def list_favorites(db: AsyncSession, user_id: str) -> list[Favorite]:
    """The user's favorites newest first, limited to places they can still see."""
    result = await db.execute(
        select(Favorite).where(Favorite.user_id == user_id).order_by(Favorite.created_at.desc())
    )
    favorites = list(result.unique().scalars().all())
    if not favorites:
        return []
    visible = viewable_place_ids(user_id, await get_friend_ids(db, user_id), [f.place for f in favorites])
    return [f for f in favorites if f.place_id in visible]
