"""Shared test fixtures.

Tests run against an in-memory SQLite database built from the ORM metadata.
Redis is never initialised, so rate limiting is bypassed.
"""

from __future__ import annotations

import os
from collections.abc import AsyncGenerator, Awaitable, Callable
from datetime import datetime, timedelta

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

os.environ["PINORY_DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ.setdefault("PINORY_JWT_SECRET", "test-secret-do-not-use")
os.environ.setdefault("PINORY_LOG_FORMAT", "console")

from pinory.auth.jwt import create_access_token  # noqa: E402
from pinory.config import get_settings  # noqa: E402
from pinory.database import close_db, get_engine, get_session_factory, init_db  # noqa: E402
from pinory.db.base import Base  # noqa: E402
from pinory.db.models import Friendship, Journey, JourneyStop, Place, User  # noqa: E402
from pinory.main import create_app  # noqa: E402
from pinory.time_utils import utcnow  # noqa: E402

get_settings.cache_clear()


@pytest_asyncio.fixture
async def database() -> AsyncGenerator[None, None]:
    """Fresh schema per test."""
    await init_db(get_settings().database_url)
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    await close_db()


@pytest_asyncio.fixture
async def db_session(database) -> AsyncGenerator[AsyncSession, None]:
    """Direct database session for seeding and assertions."""
    async with get_session_factory()() as session:
        yield session


@pytest_asyncio.fixture
async def client(database) -> AsyncGenerator[AsyncClient, None]:
    app = create_app()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


def auth_headers(email: str, name: str | None = None) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(email, name=name)}"}


@pytest.fixture
def headers_for() -> Callable[[User], dict[str, str]]:
    """Bearer headers for a seeded user."""

    def _headers(user: User) -> dict[str, str]:
        return auth_headers(user.email, user.name)

    return _headers


# ---------------------------------------------------------------------------
# Factories (each commits, so API calls made afterwards see the rows)
# ---------------------------------------------------------------------------


@pytest.fixture
def make_user(db_session: AsyncSession) -> Callable[..., Awaitable[User]]:
    async def _make(name: str = "Alice", email: str | None = None) -> User:
        user = User(email=email or f"{name.lower()}@example.com", name=name)
        db_session.add(user)
        await db_session.commit()
        return user

    return _make


@pytest.fixture
def make_friendship(db_session: AsyncSession) -> Callable[..., Awaitable[Friendship]]:
    async def _make(requester: User, addressee: User, status: str = "accepted") -> Friendship:
        now = utcnow()
        friendship = Friendship(
            requester_id=requester.id,
            addressee_id=addressee.id,
            status=status,
            pair_key=Friendship.make_pair_key(requester.id, addressee.id),
            created_at=now,
            updated_at=now,
        )
        db_session.add(friendship)
        await db_session.commit()
        return friendship

    return _make


@pytest.fixture
def make_place(db_session: AsyncSession) -> Callable[..., Awaitable[Place]]:
    async def _make(
        owner: User,
        name: str = "Cafe",
        visibility: str = "friends",
        created_at: datetime | None = None,
        note: dict | None = None,
    ) -> Place:
        ts = created_at or utcnow()
        place = Place(
            created_by=owner.id,
            name=name,
            lat=21.0285,
            lng=105.8542,
            visibility=visibility,
            attributes=note or {},
            created_at=ts,
            updated_at=ts,
        )
        db_session.add(place)
        await db_session.commit()
        return place

    return _make


@pytest.fixture
def make_journey(db_session: AsyncSession) -> Callable[..., Awaitable[Journey]]:
    async def _make(
        owner: User,
        places: list[Place],
        title: str = "Trip",
        visibility: str = "friends",
        created_at: datetime | None = None,
    ) -> Journey:
        ts = created_at or utcnow()
        journey = Journey(
            user_id=owner.id,
            title=title,
            visibility=visibility,
            created_at=ts,
            updated_at=ts,
            stops=[JourneyStop(place_id=p.id, sequence=i) for i, p in enumerate(places)],
        )
        db_session.add(journey)
        await db_session.commit()
        return journey

    return _make


@pytest.fixture
def minutes_ago() -> Callable[[int], datetime]:
    base = utcnow()

    def _at(minutes: int) -> datetime:
        return base - timedelta(minutes=minutes)

    return _at
