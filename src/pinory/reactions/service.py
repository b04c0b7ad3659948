"""Reactions on places and journeys.

One reaction per (user, content item); reacting again overwrites the type.
"""

from __future__ import annotations

from collections import Counter, defaultdict
from collections.abc import Iterable

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from pinory.db.models import Reaction
from pinory.errors import NotFoundError, ValidationError
from pinory.time_utils import utcnow

logger = structlog.get_logger()

REACTION_TYPES = ("love", "like", "wow", "smile", "fire")
CONTENT_LOCATION_NOTE = "location_note"
CONTENT_JOURNEY = "journey"
CONTENT_TYPES = (CONTENT_LOCATION_NOTE, CONTENT_JOURNEY)


def _validate(content_type: str, reaction_type: str | None = None) -> None:
    if content_type not in CONTENT_TYPES:
        raise ValidationError("Invalid content type")
    if reaction_type is not None and reaction_type not in REACTION_TYPES:
        raise ValidationError("Invalid reaction type")


async def get_reaction(
    db: AsyncSession,
    user_id: str,
    content_id: str,
    content_type: str,
    *,
    refresh: bool = False,
) -> Reaction | None:
    stmt = select(Reaction).where(
        Reaction.user_id == user_id,
        Reaction.content_id == content_id,
        Reaction.content_type == content_type,
    )
    if refresh:
        stmt = stmt.execution_options(populate_existing=True)
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def upsert_reaction(
    db: AsyncSession,
    user_id: str,
    content_id: str,
    content_type: str,
    reaction_type: str,
) -> Reaction:
    """Create the user's reaction on an item, or change its type."""
    _validate(content_type, reaction_type)

    reaction = await get_reaction(db, user_id, content_id, content_type)
    if reaction is not None:
        reaction.type = reaction_type
        await db.flush()
        return reaction

    reaction = Reaction(
        user_id=user_id,
        content_id=content_id,
        content_type=content_type,
        type=reaction_type,
        created_at=utcnow(),
    )
    db.add(reaction)
    try:
        await db.flush()
    except IntegrityError:
        # Concurrent first reaction from the same user; fall back to update
        await db.rollback()
        reaction = await get_reaction(db, user_id, content_id, content_type)
        if reaction is None:
            raise
        reaction.type = reaction_type
        await db.flush()
    logger.info("reaction_saved", user_id=user_id, content_id=content_id, type=reaction_type)
    return await get_reaction(db, user_id, content_id, content_type, refresh=True)


async def remove_reaction(db: AsyncSession, user_id: str, content_id: str, content_type: str) -> None:
    _validate(content_type)
    reaction = await get_reaction(db, user_id, content_id, content_type)
    if reaction is None:
        raise NotFoundError("Reaction not found")
    await db.delete(reaction)
    await db.flush()


async def list_reactions(db: AsyncSession, content_id: str, content_type: str) -> tuple[list[Reaction], dict[str, int]]:
    """Reactions on one item, newest first, plus counts per reaction type."""
    _validate(content_type)
    result = await db.execute(
        select(Reaction)
        .where(Reaction.content_id == content_id, Reaction.content_type == content_type)
        .order_by(Reaction.created_at.desc())
    )
    reactions = list(result.scalars().all())
    return reactions, dict(Counter(r.type for r in reactions))


async def reactions_for_items(
    db: AsyncSession,
    items: Iterable[tuple[str, str]],
) -> dict[tuple[str, str], list[Reaction]]:
    """Batched lookup: one query for many ``(content_id, content_type)`` pairs.

    Every requested pair is present in the result, mapped to an empty list
    when it has no reactions.
    """
    wanted = list(dict.fromkeys(items))
    grouped: dict[tuple[str, str], list[Reaction]] = defaultdict(list)
    if not wanted:
        return {}

    content_ids = list({content_id for content_id, _ in wanted})
    result = await db.execute(
        select(Reaction)
        .where(Reaction.content_id.in_(content_ids))
        .order_by(Reaction.created_at.desc())
    )
    for reaction in result.scalars().all():
        grouped[(reaction.content_id, reaction.content_type)].append(reaction)
    return {key: grouped.get(key, []) for key in wanted}
