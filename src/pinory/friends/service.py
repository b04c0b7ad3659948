"""Friendship business logic.

Rules:
- One friendship row per unordered pair of users (``pair_key`` is unique)
- A request starts ``pending``; only the addressee may accept or reject it
- Rejecting deletes the row, so the requester can ask again later
- Either party may remove an existing friendship
"""

from __future__ import annotations

from typing import Any

import structlog
from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from pinory.auth.service import get_user_by_id
from pinory.db.models import Friendship, Journey, Place, User
from pinory.errors import ConflictError, ForbiddenError, InvalidStateError, NotFoundError, ValidationError
from pinory.sharing.access import FRIEND_VISIBLE, VISIBILITY_PUBLIC
from pinory.time_utils import utcnow

logger = structlog.get_logger()

STATUS_PENDING = "pending"
STATUS_ACCEPTED = "accepted"

SEARCH_MIN_LENGTH = 2
SEARCH_MAX_RESULTS = 20


def _involves(user_id: str):
    return or_(Friendship.requester_id == user_id, Friendship.addressee_id == user_id)


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


async def get_friendship(db: AsyncSession, friendship_id: str) -> Friendship | None:
    result = await db.execute(select(Friendship).where(Friendship.id == friendship_id))
    return result.scalar_one_or_none()


async def get_friendship_between(db: AsyncSession, user_a: str, user_b: str) -> Friendship | None:
    """The pair's friendship row regardless of who sent the request."""
    result = await db.execute(
        select(Friendship).where(Friendship.pair_key == Friendship.make_pair_key(user_a, user_b))
    )
    return result.scalar_one_or_none()


async def get_friendship_status(db: AsyncSession, user_a: str, user_b: str) -> str | None:
    friendship = await get_friendship_between(db, user_a, user_b)
    return friendship.status if friendship else None


async def get_friend_ids(db: AsyncSession, user_id: str) -> list[str]:
    """Ids of every user joined to ``user_id`` by an accepted friendship, either direction."""
    result = await db.execute(
        select(Friendship.requester_id, Friendship.addressee_id).where(
            _involves(user_id),
            Friendship.status == STATUS_ACCEPTED,
        )
    )
    return [addressee if requester == user_id else requester for requester, addressee in result.all()]


async def _count_by_owner(db: AsyncSession, owner_col, visibility_col, owner_ids: list[str], visibilities) -> dict[str, int]:
    if not owner_ids:
        return {}
    result = await db.execute(
        select(owner_col, func.count())
        .where(owner_col.in_(owner_ids), visibility_col.in_(visibilities))
        .group_by(owner_col)
    )
    return {owner: count for owner, count in result.all()}


async def list_friends(db: AsyncSession, user_id: str, search: str | None = None) -> list[dict[str, Any]]:
    """Accepted friends, newest friendship first, with their shared content counts."""
    result = await db.execute(
        select(Friendship)
        .where(_involves(user_id), Friendship.status == STATUS_ACCEPTED)
        .order_by(Friendship.created_at.desc())
    )
    friendships = list(result.scalars().all())

    rows = [(f, f.other_party(user_id)) for f in friendships]
    if search:
        needle = search.lower()
        rows = [
            (f, friend) for f, friend in rows
            if needle in (friend.name or "").lower() or needle in friend.email.lower()
        ]

    friend_ids = [friend.id for _, friend in rows]
    place_counts = await _count_by_owner(db, Place.created_by, Place.visibility, friend_ids, FRIEND_VISIBLE)
    journey_counts = await _count_by_owner(db, Journey.user_id, Journey.visibility, friend_ids, FRIEND_VISIBLE)

    return [
        {
            "user": friend,
            "friendship_id": f.id,
            "friendship_status": f.status,
            "friends_since": f.created_at,
            "location_notes_count": place_counts.get(friend.id, 0),
            "journeys_count": journey_counts.get(friend.id, 0),
        }
        for f, friend in rows
    ]


async def list_requests(db: AsyncSession, user_id: str, direction: str = "received") -> list[Friendship]:
    """Pending requests sent to (``received``) or by (``sent``) the user, newest first."""
    if direction not in ("received", "sent"):
        raise ValidationError("type must be 'received' or 'sent'")
    column = Friendship.addressee_id if direction == "received" else Friendship.requester_id
    result = await db.execute(
        select(Friendship)
        .where(column == user_id, Friendship.status == STATUS_PENDING)
        .order_by(Friendship.created_at.desc())
    )
    return list(result.scalars().all())


async def search_users(db: AsyncSession, caller_id: str, query: str) -> list[dict[str, Any]]:
    """Find other users by name or email, annotated with the caller's friendship state."""
    query = query.strip()
    if len(query) < SEARCH_MIN_LENGTH:
        return []

    result = await db.execute(
        select(User)
        .where(
            User.id != caller_id,
            or_(
                User.name.icontains(query, autoescape=True),
                User.email.icontains(query, autoescape=True),
            ),
        )
        .order_by(User.name)
        .limit(SEARCH_MAX_RESULTS)
    )
    users = list(result.scalars().all())
    if not users:
        return []

    keys = {Friendship.make_pair_key(caller_id, u.id): u.id for u in users}
    fs_result = await db.execute(select(Friendship).where(Friendship.pair_key.in_(list(keys))))
    by_user = {keys[f.pair_key]: f for f in fs_result.scalars().all()}

    user_ids = [u.id for u in users]
    public_counts = await _count_by_owner(db, Place.created_by, Place.visibility, user_ids, (VISIBILITY_PUBLIC,))

    out = []
    for u in users:
        friendship = by_user.get(u.id)
        out.append({
            "user": u,
            "friendship_status": friendship.status if friendship else None,
            "friendship_id": friendship.id if friendship else None,
            "is_sent_by_me": bool(friendship and friendship.requester_id == caller_id),
            "pinories_count": public_counts.get(u.id, 0),
        })
    return out


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------


async def send_request(db: AsyncSession, requester_id: str, addressee_id: str) -> Friendship:
    """Create a pending friend request from ``requester_id`` to ``addressee_id``."""
    if requester_id == addressee_id:
        raise ValidationError("Cannot send friend request to yourself")

    if await get_user_by_id(db, addressee_id) is None:
        raise NotFoundError("Target user not found")

    existing = await get_friendship_between(db, requester_id, addressee_id)
    if existing is not None:
        if existing.status == STATUS_ACCEPTED:
            raise ConflictError("Already friends")
        raise ConflictError("Friend request already sent")

    now = utcnow()
    friendship = Friendship(
        requester_id=requester_id,
        addressee_id=addressee_id,
        status=STATUS_PENDING,
        pair_key=Friendship.make_pair_key(requester_id, addressee_id),
        created_at=now,
        updated_at=now,
    )
    db.add(friendship)
    try:
        await db.flush()
    except IntegrityError as e:
        # Lost a race with a request for the same pair
        await db.rollback()
        raise ConflictError("Friend request already sent") from e

    logger.info("friend_request_sent", friendship_id=friendship.id, requester=requester_id, addressee=addressee_id)
    return friendship


async def _get_pending_for_addressee(db: AsyncSession, friendship_id: str, caller_id: str, verb: str) -> Friendship:
    friendship = await get_friendship(db, friendship_id)
    if friendship is None:
        raise NotFoundError("Friend request not found")
    if friendship.addressee_id != caller_id:
        raise ForbiddenError(f"You can only {verb} requests sent to you")
    if friendship.status != STATUS_PENDING:
        raise InvalidStateError("Request is not pending")
    return friendship


async def accept_request(db: AsyncSession, friendship_id: str, caller_id: str) -> Friendship:
    """Addressee accepts a pending request."""
    friendship = await _get_pending_for_addressee(db, friendship_id, caller_id, "accept")
    friendship.status = STATUS_ACCEPTED
    friendship.updated_at = utcnow()
    await db.flush()
    logger.info("friend_request_accepted", friendship_id=friendship.id)
    return friendship


async def reject_request(db: AsyncSession, friendship_id: str, caller_id: str) -> None:
    """Addressee rejects a pending request. The row is deleted, not archived."""
    friendship = await _get_pending_for_addressee(db, friendship_id, caller_id, "reject")
    await db.delete(friendship)
    await db.flush()
    logger.info("friend_request_rejected", friendship_id=friendship_id)


async def remove_friendship(db: AsyncSession, friendship_id: str, caller_id: str) -> None:
    """Either party removes a friendship (or cancels their own pending request)."""
    friendship = await get_friendship(db, friendship_id)
    if friendship is None:
        raise NotFoundError("Friendship not found")
    if caller_id not in (friendship.requester_id, friendship.addressee_id):
        raise ForbiddenError()
    await db.delete(friendship)
    await db.flush()
    logger.info("friendship_removed", friendship_id=friendship_id, by=caller_id)
