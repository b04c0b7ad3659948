"""Share link API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from pinory.auth.dependencies import get_current_user, get_optional_user
from pinory.config import get_settings
from pinory.content.schemas import place_response
from pinory.database import get_session
from pinory.db.models import User
from pinory.friends.schemas import SuccessResponse
from pinory.sharing.schemas import (
    ShareCreateRequest,
    SharedPlaceResponse,
    ShareInfo,
    ShareListResponse,
    ShareResponse,
    share_response,
)
from pinory.sharing.service import create_share, list_shares, revoke_share, view_share

router = APIRouter(prefix="/api/v1/shares", tags=["Shares"])


@router.post("", response_model=ShareResponse)
async def create_share_endpoint(
    body: ShareCreateRequest,
    response: Response,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Create a share link for an own place, or return its active link."""
    settings = get_settings()
    share, created = await create_share(
        db,
        body.place_id,
        user.id,
        body.visibility,
        body.expires_at,
        expiry_days=settings.share_default_expiry_days,
        max_attempts=settings.share_slug_max_attempts,
    )
    await db.commit()
    if created:
        response.status_code = 201
    return share_response(share, settings.app_base_url)


@router.get("", response_model=ShareListResponse)
async def list_shares_endpoint(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """The caller's active share links."""
    base_url = get_settings().app_base_url
    shares = await list_shares(db, user.id)
    return ShareListResponse(shares=[share_response(s, base_url, include_place=True) for s in shares])


@router.delete("/{share_id}", response_model=SuccessResponse)
async def revoke_share_endpoint(
    share_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    await revoke_share(db, share_id, user.id)
    await db.commit()
    return SuccessResponse()


@router.get("/{slug}/view", response_model=SharedPlaceResponse)
async def view_share_endpoint(
    slug: str,
    viewer: User | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_session),
):
    """Open a share link. Anonymous viewers only see public links."""
    share, access = await view_share(db, slug, viewer.id if viewer else None)
    await db.commit()
    return SharedPlaceResponse(
        view_type=access.view_type,
        pinory=place_response(share.place),
        share_info=ShareInfo(
            share_slug=share.share_slug,
            visibility=share.visibility,
            view_count=share.view_count,
            created_at=share.created_at,
            expires_at=share.expires_at,
        ),
    )
