"""Per-user place categories."""

from __future__ import annotations

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from pinory.db.models import Category
from pinory.errors import ConflictError
from pinory.time_utils import utcnow

logger = structlog.get_logger()

DEFAULT_ICON = "📍"
DEFAULT_COLOR = "#3B82F6"


async def list_categories(db: AsyncSession, user_id: str) -> list[Category]:
    """The user's active categories ordered by name."""
    result = await db.execute(
        select(Category)
        .where(Category.user_id == user_id, Category.is_active.is_(True))
        .order_by(Category.name)
    )
    return list(result.scalars().all())


async def get_category_by_slug(db: AsyncSession, user_id: str, slug: str) -> Category | None:
    result = await db.execute(select(Category).where(Category.user_id == user_id, Category.slug == slug))
    return result.scalar_one_or_none()


async def create_category(
    db: AsyncSession,
    user_id: str,
    name: str,
    slug: str,
    icon: str | None = None,
    color: str | None = None,
) -> Category:
    """Create a category; the slug must be new for this user, deactivated ones included."""
    if await get_category_by_slug(db, user_id, slug) is not None:
        raise ConflictError("Category with this name already exists")

    category = Category(
        user_id=user_id,
        name=name,
        slug=slug,
        icon=icon or DEFAULT_ICON,
        color=color or DEFAULT_COLOR,
        is_active=True,
        is_default=False,
        created_at=utcnow(),
    )
    db.add(category)
    try:
        await db.flush()
    except IntegrityError as exc:
        await db.rollback()
        raise ConflictError("Category with this name already exists") from exc
    logger.info("category_created", user_id=user_id, category_id=category.id, slug=slug)
    return category
