"""Share link slugs (10 URL-safe characters) and share URLs."""

from __future__ import annotations

import re
import secrets
import string

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pinory.db.models import PinoryShare
from pinory.errors import GenerationExhaustedError

SLUG_ALPHABET = string.ascii_letters + string.digits + "_-"
SLUG_LENGTH = 10
DEFAULT_MAX_ATTEMPTS = 5

_SLUG_RE = re.compile(rf"[A-Za-z0-9_-]{{{SLUG_LENGTH}}}")


def generate_share_slug() -> str:
    return "".join(secrets.choice(SLUG_ALPHABET) for _ in range(SLUG_LENGTH))


def build_share_url(base_url: str, slug: str) -> str:
    return f"{base_url.rstrip('/')}/p/{slug}"


def is_valid_share_slug(slug: str | None) -> bool:
    return bool(slug) and _SLUG_RE.fullmatch(slug) is not None


async def slug_exists(db: AsyncSession, slug: str) -> bool:
    result = await db.execute(select(PinoryShare.id).where(PinoryShare.share_slug == slug))
    return result.scalar_one_or_none() is not None


async def generate_unique_share_slug(db: AsyncSession, max_attempts: int = DEFAULT_MAX_ATTEMPTS) -> str:
    for _ in range(max_attempts):
        slug = generate_share_slug()
        if not await slug_exists(db, slug):
            return slug
    raise GenerationExhaustedError("Failed to generate unique share link. Please try again.")
