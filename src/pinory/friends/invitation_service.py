"""Friend invitations: shareable codes that create a friendship on acceptance.

Accepting an invitation skips the pending state. When the two users already
have a pending request between them it is promoted to accepted instead of
creating a second row.
"""

from __future__ import annotations

from typing import Any

import structlog
from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from pinory.db.models import FriendInvitation, FriendInvitationAcceptance, Friendship
from pinory.errors import (
    AlreadyFriendsError,
    ExpiredError,
    GenerationExhaustedError,
    NotFoundError,
    SelfInviteError,
    UsageExceededError,
)
from pinory.friends.invite_codes import DEFAULT_MAX_ATTEMPTS, generate_unique_invite_code, normalize_invite_code
from pinory.friends.service import STATUS_ACCEPTED, get_friendship_between
from pinory.time_utils import is_past, utcnow

logger = structlog.get_logger()


def build_invite_url(base_url: str, code: str) -> str:
    return f"{base_url.rstrip('/')}/invite/{code}"


async def get_active_invitation(db: AsyncSession, user_id: str) -> FriendInvitation | None:
    result = await db.execute(
        select(FriendInvitation)
        .where(FriendInvitation.user_id == user_id, FriendInvitation.is_active.is_(True))
        .order_by(FriendInvitation.created_at.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def get_invitation_by_code(db: AsyncSession, code: str) -> FriendInvitation | None:
    result = await db.execute(
        select(FriendInvitation).where(FriendInvitation.invite_code == normalize_invite_code(code))
    )
    return result.scalar_one_or_none()


async def count_acceptances(db: AsyncSession, invitation_id: str) -> int:
    result = await db.execute(
        select(func.count())
        .select_from(FriendInvitationAcceptance)
        .where(FriendInvitationAcceptance.invitation_id == invitation_id)
    )
    return result.scalar_one()


async def get_or_create_invitation(
    db: AsyncSession,
    user_id: str,
    base_url: str,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
) -> FriendInvitation:
    """Return the user's active invitation, creating one if there is none.

    The existence check in ``generate_unique_invite_code`` can race with another
    user's insert; the unique constraint on ``invite_code`` catches that and we
    roll back and try a fresh code.
    """
    invitation = await get_active_invitation(db, user_id)
    if invitation is not None:
        return invitation

    for attempt in range(1, max_attempts + 1):
        code = await generate_unique_invite_code(db, max_attempts)
        invitation = FriendInvitation(
            user_id=user_id,
            invite_code=code,
            invite_url=build_invite_url(base_url, code),
            is_active=True,
            usage_count=0,
            created_at=utcnow(),
        )
        db.add(invitation)
        try:
            await db.flush()
        except IntegrityError:
            await db.rollback()
            logger.warning("invite_code_collision", attempt=attempt)
            continue
        logger.info("invitation_created", user_id=user_id, invitation_id=invitation.id)
        return invitation

    msg = f"Failed to generate unique invite code after {max_attempts} attempts"
    raise GenerationExhaustedError(msg)


async def deactivate_invitations(db: AsyncSession, user_id: str) -> int:
    """Deactivate every active invitation of the user. Returns the number changed."""
    result = await db.execute(
        update(FriendInvitation)
        .where(FriendInvitation.user_id == user_id, FriendInvitation.is_active.is_(True))
        .values(is_active=False)
    )
    await db.flush()
    logger.info("invitations_deactivated", user_id=user_id, count=result.rowcount)
    return result.rowcount


def ensure_usable(invitation: FriendInvitation | None) -> FriendInvitation:
    """Raise if the invitation cannot be accepted right now.

    ``max_usage`` of None or 0 means unlimited.
    """
    if invitation is None:
        raise NotFoundError("Invite not found")
    if not invitation.is_active:
        raise ExpiredError("Invite has been deactivated")
    if is_past(invitation.expires_at):
        raise ExpiredError("Invite has expired")
    if invitation.max_usage and invitation.usage_count >= invitation.max_usage:
        raise UsageExceededError("Invite has reached usage limit")
    return invitation


async def get_invitation_info(db: AsyncSession, code: str) -> dict[str, Any]:
    """Public preview of who sent an invitation."""
    invitation = ensure_usable(await get_invitation_by_code(db, code))
    inviter = invitation.user
    return {
        "inviter_name": inviter.name or "User",
        "inviter_email": inviter.email,
        "inviter_image": inviter.avatar_url,
        "invite_code": invitation.invite_code,
    }


async def accept_invitation(db: AsyncSession, code: str, caller_id: str) -> tuple[Friendship, FriendInvitation]:
    """Accept an invitation as ``caller_id``.

    Returns:
        Tuple of (friendship, invitation); ``invitation.user`` is the new friend.
    """
    invitation = ensure_usable(await get_invitation_by_code(db, code))

    if invitation.user_id == caller_id:
        raise SelfInviteError()

    existing = await get_friendship_between(db, invitation.user_id, caller_id)
    if existing is not None:
        if existing.status == STATUS_ACCEPTED:
            raise AlreadyFriendsError()
        existing.status = STATUS_ACCEPTED
        existing.updated_at = utcnow()
        await db.flush()
        logger.info("invitation_promoted_pending", invitation_id=invitation.id, friendship_id=existing.id)
        return existing, invitation

    now = utcnow()
    friendship = Friendship(
        requester_id=invitation.user_id,
        addressee_id=caller_id,
        status=STATUS_ACCEPTED,
        pair_key=Friendship.make_pair_key(invitation.user_id, caller_id),
        created_at=now,
        updated_at=now,
    )
    db.add(friendship)
    await db.flush()

    db.add(FriendInvitationAcceptance(
        invitation_id=invitation.id,
        accepted_by_id=caller_id,
        friendship_id=friendship.id,
        accepted_at=now,
    ))
    invitation.usage_count += 1
    await db.flush()

    logger.info("invitation_accepted", invitation_id=invitation.id, friendship_id=friendship.id, by=caller_id)
    return friendship, invitation
