"""Pydantic schemas for categories."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class CategoryCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=64)
    slug: str = Field(..., min_length=1, max_length=64, pattern=r"^[a-z0-9-]+$")
    icon: str | None = Field(None, min_length=1, max_length=16)
    color: str | None = Field(None, pattern=r"^#[0-9A-Fa-f]{6}$")


class CategoryResponse(BaseModel):
    id: str
    name: str
    slug: str
    icon: str
    color: str
    is_default: bool
    created_at: datetime


class CategoryListResponse(BaseModel):
    categories: list[CategoryResponse]


def category_response(category) -> CategoryResponse:
    return CategoryResponse(
        id=category.id,
        name=category.name,
        slug=category.slug,
        icon=category.icon,
        color=category.color,
        is_default=category.is_default,
        created_at=category.created_at,
    )
