"""Categories API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from pinory.auth.dependencies import get_current_user
from pinory.categories.schemas import (
    CategoryCreateRequest,
    CategoryListResponse,
    CategoryResponse,
    category_response,
)
from pinory.categories.service import create_category, list_categories
from pinory.database import get_session
from pinory.db.models import User

router = APIRouter(prefix="/api/v1/categories", tags=["Categories"])


@router.get("", response_model=CategoryListResponse)
async def list_categories_endpoint(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    categories = await list_categories(db, user.id)
    return CategoryListResponse(categories=[category_response(c) for c in categories])


@router.post("", response_model=CategoryResponse, status_code=201)
async def create_category_endpoint(
    body: CategoryCreateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    category = await create_category(db, user.id, body.name, body.slug, body.icon, body.color)
    await db.commit()
    return category_response(category)
