"""FastAPI authentication dependencies."""

from __future__ import annotations

import jwt
from fastapi import Depends, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from pinory.auth.jwt import verify_token
from pinory.auth.service import get_or_create_user
from pinory.database import get_session
from pinory.db.models import User
from pinory.errors import UnauthorizedError

_bearer = HTTPBearer(auto_error=False)


async def _resolve_user(credentials: HTTPAuthorizationCredentials, db: AsyncSession) -> User:
    try:
        payload = verify_token(credentials.credentials)
    except jwt.InvalidTokenError as e:
        raise UnauthorizedError(str(e)) from e

    user, created = await get_or_create_user(
        db,
        payload["sub"],
        name=payload.get("name"),
        avatar_url=payload.get("picture"),
    )
    if created:
        await db.commit()
    return user


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Security(_bearer),
    db: AsyncSession = Depends(get_session),
) -> User:
    """
    Verify the bearer token and return the User, creating it on first login.

    Raises 401 when the token is missing or invalid.
    """
    if credentials is None:
        raise UnauthorizedError()
    return await _resolve_user(credentials, db)


async def get_optional_user(
    credentials: HTTPAuthorizationCredentials | None = Security(_bearer),
    db: AsyncSession = Depends(get_session),
) -> User | None:
    """Like get_current_user, but anonymous callers get None instead of a 401."""
    if credentials is None:
        return None
    return await _resolve_user(credentials, db)
