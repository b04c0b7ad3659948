"""ORM models for the Pinory schema.

Ids are UUID strings. Enumerated columns (visibility, friendship status,
reaction type) are plain strings; the allowed values live next to the code
that validates them.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import (
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pinory.db.base import Base, JSONType
from pinory.time_utils import utcnow


def _uuid() -> str:
    return str(uuid.uuid4())


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


class User(Base):
    """Identity created on the first authenticated request."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False)
    name: Mapped[str | None] = mapped_column(String(128), nullable=True)
    avatar_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)


# ---------------------------------------------------------------------------
# Relationships: friendships and invitations
# ---------------------------------------------------------------------------


class Friendship(Base):
    """Directed friendship edge. ``pair_key`` makes the unordered pair unique."""

    __tablename__ = "friendships"
    __table_args__ = (
        Index("ix_friendships_requester_status", "requester_id", "status"),
        Index("ix_friendships_addressee_status", "addressee_id", "status"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    requester_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    addressee_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="pending", server_default="pending")
    pair_key: Mapped[str] = mapped_column(String(80), unique=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    requester: Mapped[User] = relationship("User", foreign_keys=[requester_id], lazy="joined")
    addressee: Mapped[User] = relationship("User", foreign_keys=[addressee_id], lazy="joined")

    @staticmethod
    def make_pair_key(user_a: str, user_b: str) -> str:
        low, high = sorted((user_a, user_b))
        return f"{low}:{high}"

    def other_party(self, user_id: str) -> User:
        return self.addressee if self.requester_id == user_id else self.requester


class FriendInvitation(Base):
    """Reusable invite link. One active invitation per user by convention."""

    __tablename__ = "friend_invitations"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    user_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    invite_code: Mapped[str] = mapped_column(String(8), unique=True, nullable=False)
    invite_url: Mapped[str] = mapped_column(String(512), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default="true")
    expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    max_usage: Mapped[int | None] = mapped_column(Integer, nullable=True)
    usage_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    user: Mapped[User] = relationship("User", lazy="joined")


class FriendInvitationAcceptance(Base):
    """Receipt for a friendship created through an invitation."""

    __tablename__ = "friend_invitation_acceptances"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    invitation_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("friend_invitations.id", ondelete="CASCADE"), nullable=False
    )
    accepted_by_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    friendship_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("friendships.id", ondelete="SET NULL"), nullable=True
    )
    accepted_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)


# ---------------------------------------------------------------------------
# Content: places, media, journeys
# ---------------------------------------------------------------------------


class Place(Base):
    """A pin on the map. The note payload lives in ``attributes``."""

    __tablename__ = "places"
    __table_args__ = (
        Index("ix_places_created_by_visibility", "created_by", "visibility"),
        Index("ix_places_created_at", "created_at"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    created_by: Mapped[str] = mapped_column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    lat: Mapped[float] = mapped_column(Float, nullable=False)
    lng: Mapped[float] = mapped_column(Float, nullable=False)
    address: Mapped[str | None] = mapped_column(String(512), nullable=True)
    category: Mapped[str] = mapped_column(String(64), nullable=False, default="other", server_default="other")
    visibility: Mapped[str] = mapped_column(String(24), nullable=False, default="private", server_default="private")
    attributes: Mapped[dict[str, Any]] = mapped_column(JSONType, nullable=False, default=dict)
    visit_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    creator: Mapped[User] = relationship("User", lazy="joined")
    media: Mapped[list[Media]] = relationship(
        "Media",
        lazy="selectin",
        cascade="all, delete-orphan",
        order_by="Media.created_at.desc()",
    )


class Media(Base):
    """Image associated with a place by URL (upload itself happens elsewhere)."""

    __tablename__ = "media"
    __table_args__ = (Index("ix_media_place_id", "place_id"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    place_id: Mapped[str] = mapped_column(String(36), ForeignKey("places.id", ondelete="CASCADE"), nullable=False)
    user_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    url: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[str] = mapped_column(String(16), nullable=False, default="image", server_default="image")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default="true")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)


class Journey(Base):
    """Ordered sequence of places."""

    __tablename__ = "journeys"
    __table_args__ = (Index("ix_journeys_user_visibility", "user_id", "visibility"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    user_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    title: Mapped[str] = mapped_column(String(256), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    start_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    end_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    cover_image: Mapped[str | None] = mapped_column(Text, nullable=True)
    visibility: Mapped[str] = mapped_column(String(24), nullable=False, default="private", server_default="private")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    user: Mapped[User] = relationship("User", lazy="joined")
    stops: Mapped[list[JourneyStop]] = relationship(
        "JourneyStop",
        lazy="selectin",
        cascade="all, delete-orphan",
        order_by="JourneyStop.sequence",
    )


class JourneyStop(Base):
    __tablename__ = "journey_stops"
    __table_args__ = (UniqueConstraint("journey_id", "sequence", name="uq_journey_stops_journey_sequence"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    journey_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("journeys.id", ondelete="CASCADE"), nullable=False
    )
    place_id: Mapped[str] = mapped_column(String(36), ForeignKey("places.id", ondelete="CASCADE"), nullable=False)
    sequence: Mapped[int] = mapped_column(Integer, nullable=False)

    place: Mapped[Place] = relationship("Place", lazy="joined")


# ---------------------------------------------------------------------------
# Social: reactions and share links
# ---------------------------------------------------------------------------


class Reaction(Base):
    """One reaction per user per content item."""

    __tablename__ = "reactions"
    __table_args__ = (
        UniqueConstraint("user_id", "content_id", "content_type", name="uq_reactions_user_content"),
        Index("ix_reactions_content", "content_id", "content_type"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    user_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    content_id: Mapped[str] = mapped_column(String(36), nullable=False)
    content_type: Mapped[str] = mapped_column(String(24), nullable=False)
    type: Mapped[str] = mapped_column(String(16), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    user: Mapped[User] = relationship("User", lazy="joined")


class PinoryShare(Base):
    """Shareable link to a single place."""

    __tablename__ = "pinory_shares"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    place_id: Mapped[str] = mapped_column(String(36), ForeignKey("places.id", ondelete="CASCADE"), nullable=False)
    created_by: Mapped[str] = mapped_column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    share_slug: Mapped[str] = mapped_column(String(16), unique=True, nullable=False)
    visibility: Mapped[str] = mapped_column(String(24), nullable=False, default="friends", server_default="friends")
    expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    view_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default="true")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    place: Mapped[Place] = relationship("Place", lazy="joined")


# ---------------------------------------------------------------------------
# Personal: favorites and categories
# ---------------------------------------------------------------------------


class Favorite(Base):
    """A place the user bookmarked, with an optional rating and comment."""

    __tablename__ = "favorites"
    __table_args__ = (UniqueConstraint("user_id", "place_id", name="uq_favorites_user_place"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    user_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    place_id: Mapped[str] = mapped_column(String(36), ForeignKey("places.id", ondelete="CASCADE"), nullable=False)
    rating: Mapped[int | None] = mapped_column(Integer, nullable=True)
    comment: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    place: Mapped[Place] = relationship("Place", lazy="joined")


class Category(Base):
    """User-defined label for places. Slugs are unique per user."""

    __tablename__ = "categories"
    __table_args__ = (UniqueConstraint("user_id", "slug", name="uq_categories_user_slug"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    user_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    name: Mapped[str] = mapped_column(String(64), nullable=False)
    slug: Mapped[str] = mapped_column(String(64), nullable=False)
    icon: Mapped[str] = mapped_column(String(16), nullable=False, default="📍", server_default="📍")
    color: Mapped[str] = mapped_column(String(7), nullable=False, default="#3B82F6", server_default="#3B82F6")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default="true")
    is_default: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="false")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
