"""User lookup and first-login provisioning."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from sqlalchemy import func, select

from pinory.db.models import User

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


async def get_user_by_id(db: AsyncSession, user_id: str) -> User | None:
    """Fetch a user by ID."""
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    """Fetch a user by email (case-insensitive)."""
    result = await db.execute(select(User).where(func.lower(User.email) == email.lower()))
    return result.scalar_one_or_none()


async def get_or_create_user(
    db: AsyncSession,
    email: str,
    name: str | None = None,
    avatar_url: str | None = None,
) -> tuple[User, bool]:
    """
    Return the user for ``email``, creating it on first sight.

    Returns:
        Tuple of (user, created).
    """
    user = await get_user_by_email(db, email)
    if user is not None:
        return user, False

    user = User(email=email.lower(), name=name, avatar_url=avatar_url)
    db.add(user)
    await db.flush()
    logger.info("user_created", user_id=user.id)
    return user, True
