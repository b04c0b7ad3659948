"""
Session token handling.

Tokens are minted by the external identity provider and shared with this
service through ``PINORY_JWT_SECRET``. The subject is the user's email; the
``name`` and ``picture`` claims seed the profile on first sight.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from pinory.config import get_settings


def create_access_token(
    email: str,
    name: str | None = None,
    picture: str | None = None,
    *,
    expires_in: timedelta | None = None,
) -> str:
    """
    Create a signed session token.

    Only used by tooling and tests; production tokens come from the
    identity provider.

    Args:
        email: The user's email (token subject).
        name: Optional display name claim.
        picture: Optional avatar URL claim.
        expires_in: Override the configured lifetime.

    Returns:
        Encoded JWT string.
    """
    settings = get_settings()
    now = datetime.now(timezone.utc)
    lifetime = expires_in if expires_in is not None else timedelta(minutes=settings.jwt_access_token_expire_minutes)
    payload: dict[str, Any] = {
        "sub": email,
        "iat": now,
        "exp": now + lifetime,
        "iss": settings.jwt_issuer,
    }
    if name is not None:
        payload["name"] = name
    if picture is not None:
        payload["picture"] = picture
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_token(token: str) -> dict[str, Any]:
    """
    Decode and verify a session token.

    Raises:
        jwt.InvalidTokenError: On bad signature, expiry, wrong issuer or missing subject.
    """
    settings = get_settings()
    payload: dict[str, Any] = jwt.decode(
        token,
        settings.jwt_secret,
        algorithms=[settings.jwt_algorithm],
        issuer=settings.jwt_issuer,
        options={"require": ["exp", "sub"]},
    )
    return payload
