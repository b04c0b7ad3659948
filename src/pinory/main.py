"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from pinory.categories.router import router as categories_router
from pinory.config import get_settings
from pinory.content.router import router as content_router
from pinory.database import close_db, init_db
from pinory.favorites.router import router as favorites_router
from pinory.feed.router import router as feed_router
from pinory.friends.router import router as friends_router
from pinory.health.router import router as health_router
from pinory.middleware import setup_middleware
from pinory.reactions.router import router as reactions_router
from pinory.redis_client import close_redis, init_redis
from pinory.sharing.router import router as sharing_router
from pinory.users.router import router as users_router

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    settings = get_settings()
    await init_db(settings.database_url)
    await init_redis(settings.redis_url)
    logger.info("startup", environment=settings.environment, version=settings.app_version)

    yield

    await close_db()
    await close_redis()


def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title="Pinory API",
        description="Backend API for Pinory: map pins, journeys and friends",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(users_router)
    app.include_router(friends_router)
    app.include_router(content_router)
    app.include_router(reactions_router)
    app.include_router(feed_router)
    app.include_router(sharing_router)
    app.include_router(favorites_router)
    app.include_router(categories_router)

    return app


app = create_app()
