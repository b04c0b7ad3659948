"""Invite code generation for friend invitations.

Codes are 8 characters drawn from uppercase letters and digits, minus the
look-alikes 0/O and 1/I, generated server-side with a cryptographic random
source. Users cannot choose their own codes.
"""

from __future__ import annotations

import secrets
import string

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pinory.db.models import FriendInvitation
from pinory.errors import GenerationExhaustedError

AMBIGUOUS_CHARS = frozenset("0O1I")
INVITE_CHARSET = "".join(c for c in string.ascii_uppercase + string.digits if c not in AMBIGUOUS_CHARS)
INVITE_LENGTH = 8
DEFAULT_MAX_ATTEMPTS = 10


def generate_invite_code() -> str:
    """Generate a cryptographically random 8-character invite code."""
    return "".join(secrets.choice(INVITE_CHARSET) for _ in range(INVITE_LENGTH))


def normalize_invite_code(code: str) -> str:
    """Normalize an invite code to uppercase for case-insensitive lookup."""
    return code.strip().upper()


async def invite_code_exists(db: AsyncSession, code: str) -> bool:
    result = await db.execute(select(FriendInvitation.id).where(FriendInvitation.invite_code == code))
    return result.scalar_one_or_none() is not None


async def generate_unique_invite_code(db: AsyncSession, max_attempts: int = DEFAULT_MAX_ATTEMPTS) -> str:
    """Generate an invite code that doesn't already exist in the database.

    Raises:
        GenerationExhaustedError: every one of ``max_attempts`` candidates collided.
    """
    for _ in range(max_attempts):
        code = generate_invite_code()
        if not await invite_code_exists(db, code):
            return code
    msg = f"Failed to generate unique invite code after {max_attempts} attempts"
    raise GenerationExhaustedError(msg)
