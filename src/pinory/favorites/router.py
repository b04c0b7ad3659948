"""Favorites API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from pinory.auth.dependencies import get_current_user
from pinory.database import get_session
from pinory.db.models import User
from pinory.favorites.schemas import (
    FavoriteCreateRequest,
    FavoriteListResponse,
    FavoriteResponse,
    FavoriteUpdateRequest,
    favorite_response,
)
from pinory.favorites.service import add_favorite, list_favorites, remove_favorite, update_favorite
from pinory.friends.schemas import SuccessResponse

router = APIRouter(prefix="/api/v1/favorites", tags=["Favorites"])


@router.get("", response_model=FavoriteListResponse)
async def list_favorites_endpoint(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """The caller's favorites, newest first."""
    favorites = await list_favorites(db, user.id)
    return FavoriteListResponse(favorites=[favorite_response(f) for f in favorites])


@router.post("", response_model=FavoriteResponse, status_code=201)
async def add_favorite_endpoint(
    body: FavoriteCreateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    favorite = await add_favorite(db, user.id, body.place_id, body.rating, body.comment)
    await db.commit()
    return favorite_response(favorite)


@router.patch("/{place_id}", response_model=FavoriteResponse)
async def update_favorite_endpoint(
    place_id: str,
    body: FavoriteUpdateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    favorite = await update_favorite(db, user.id, place_id, rating=body.rating, comment=body.comment)
    await db.commit()
    return favorite_response(favorite)


@router.delete("/{place_id}", response_model=SuccessResponse)
async def remove_favorite_endpoint(
    place_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    await remove_favorite(db, user.id, place_id)
    await db.commit()
    return SuccessResponse()
