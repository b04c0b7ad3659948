"""Reactions API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from pinory.auth.dependencies import get_current_user
from pinory.database import get_session
from pinory.db.models import User
from pinory.friends.schemas import SuccessResponse
from pinory.reactions.schemas import (
    ReactionEnvelope,
    ReactionListResponse,
    ReactionRequest,
    reaction_response,
)
from pinory.reactions.service import list_reactions, remove_reaction, upsert_reaction

router = APIRouter(prefix="/api/v1/reactions", tags=["Reactions"])

_CONTENT_TYPE_PATTERN = "^(location_note|journey)$"


@router.get("", response_model=ReactionListResponse)
async def list_reactions_endpoint(
    content_id: str = Query(..., min_length=1, max_length=36),
    content_type: str = Query(..., pattern=_CONTENT_TYPE_PATTERN),
    db: AsyncSession = Depends(get_session),
):
    """Reactions on one item with per-type counts (no auth)."""
    reactions, counts = await list_reactions(db, content_id, content_type)
    return ReactionListResponse(
        reactions=[reaction_response(r) for r in reactions],
        reaction_counts=counts,
    )


@router.post("", response_model=ReactionEnvelope, status_code=201)
async def upsert_reaction_endpoint(
    body: ReactionRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """React to an item, or change the caller's existing reaction."""
    reaction = await upsert_reaction(db, user.id, body.content_id, body.content_type, body.type)
    await db.commit()
    return ReactionEnvelope(reaction=reaction_response(reaction))


@router.delete("", response_model=SuccessResponse)
async def remove_reaction_endpoint(
    content_id: str = Query(..., min_length=1, max_length=36),
    content_type: str = Query(..., pattern=_CONTENT_TYPE_PATTERN),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    await remove_reaction(db, user.id, content_id, content_type)
    await db.commit()
    return SuccessResponse()
