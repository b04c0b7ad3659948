"""Initial Pinory schema.

Creates users, friendships, friend_invitations, friend_invitation_acceptances,
places, media, journeys, journey_stops, reactions and pinory_shares.

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-19
"""

from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

revision: str = "001_initial_schema"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _id() -> sa.Column:
    return sa.Column("id", sa.String(36), primary_key=True)


def _user_fk(name: str, nullable: bool = False) -> sa.Column:
    return sa.Column(name, sa.String(36), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=nullable)


def _created_at() -> sa.Column:
    return sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False)


def _updated_at() -> sa.Column:
    return sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False)


def upgrade() -> None:
    """Create all tables."""
    json_type = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")

    # --- Users ---
    op.create_table(
        "users",
        _id(),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("name", sa.String(128), nullable=True),
        sa.Column("avatar_url", sa.Text(), nullable=True),
        _created_at(),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )

    # --- Friendships ---
    op.create_table(
        "friendships",
        _id(),
        _user_fk("requester_id"),
        _user_fk("addressee_id"),
        sa.Column("status", sa.String(16), server_default="pending", nullable=False),
        sa.Column("pair_key", sa.String(80), nullable=False),
        _created_at(),
        _updated_at(),
        sa.UniqueConstraint("pair_key", name="uq_friendships_pair_key"),
    )
    op.create_index("ix_friendships_requester_status", "friendships", ["requester_id", "status"])
    op.create_index("ix_friendships_addressee_status", "friendships", ["addressee_id", "status"])

    # --- Invitations ---
    op.create_table(
        "friend_invitations",
        _id(),
        _user_fk("user_id"),
        sa.Column("invite_code", sa.String(8), nullable=False),
        sa.Column("invite_url", sa.String(512), nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("max_usage", sa.Integer(), nullable=True),
        sa.Column("usage_count", sa.Integer(), server_default="0", nullable=False),
        _created_at(),
        sa.UniqueConstraint("invite_code", name="uq_friend_invitations_invite_code"),
    )
    op.create_table(
        "friend_invitation_acceptances",
        _id(),
        sa.Column(
            "invitation_id",
            sa.String(36),
            sa.ForeignKey("friend_invitations.id", ondelete="CASCADE"),
            nullable=False,
        ),
        _user_fk("accepted_by_id"),
        sa.Column(
            "friendship_id",
            sa.String(36),
            sa.ForeignKey("friendships.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("accepted_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    # --- Places & media ---
    op.create_table(
        "places",
        _id(),
        _user_fk("created_by"),
        sa.Column("name", sa.String(256), nullable=False),
        sa.Column("lat", sa.Float(), nullable=False),
        sa.Column("lng", sa.Float(), nullable=False),
        sa.Column("address", sa.String(512), nullable=True),
        sa.Column("category", sa.String(64), server_default="other", nullable=False),
        sa.Column("visibility", sa.String(24), server_default="private", nullable=False),
        sa.Column("attributes", json_type, nullable=False),
        sa.Column("visit_date", sa.DateTime(timezone=True), nullable=True),
        _created_at(),
        _updated_at(),
    )
    op.create_index("ix_places_created_by_visibility", "places", ["created_by", "visibility"])
    op.create_index("ix_places_created_at", "places", ["created_at"])

    op.create_table(
        "media",
        _id(),
        sa.Column("place_id", sa.String(36), sa.ForeignKey("places.id", ondelete="CASCADE"), nullable=False),
        _user_fk("user_id"),
        sa.Column("url", sa.Text(), nullable=False),
        sa.Column("type", sa.String(16), server_default="image", nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true(), nullable=False),
        _created_at(),
    )
    op.create_index("ix_media_place_id", "media", ["place_id"])

    # --- Journeys ---
    op.create_table(
        "journeys",
        _id(),
        _user_fk("user_id"),
        sa.Column("title", sa.String(256), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cover_image", sa.Text(), nullable=True),
        sa.Column("visibility", sa.String(24), server_default="private", nullable=False),
        _created_at(),
        _updated_at(),
    )
    op.create_index("ix_journeys_user_visibility", "journeys", ["user_id", "visibility"])

    op.create_table(
        "journey_stops",
        _id(),
        sa.Column("journey_id", sa.String(36), sa.ForeignKey("journeys.id", ondelete="CASCADE"), nullable=False),
        sa.Column("place_id", sa.String(36), sa.ForeignKey("places.id", ondelete="CASCADE"), nullable=False),
        sa.Column("sequence", sa.Integer(), nullable=False),
        sa.UniqueConstraint("journey_id", "sequence", name="uq_journey_stops_journey_sequence"),
    )

    # --- Reactions ---
    op.create_table(
        "reactions",
        _id(),
        _user_fk("user_id"),
        sa.Column("content_id", sa.String(36), nullable=False),
        sa.Column("content_type", sa.String(24), nullable=False),
        sa.Column("type", sa.String(16), nullable=False),
        _created_at(),
        sa.UniqueConstraint("user_id", "content_id", "content_type", name="uq_reactions_user_content"),
    )
    op.create_index("ix_reactions_content", "reactions", ["content_id", "content_type"])

    # --- Share links ---
    op.create_table(
        "pinory_shares",
        _id(),
        sa.Column("place_id", sa.String(36), sa.ForeignKey("places.id", ondelete="CASCADE"), nullable=False),
        _user_fk("created_by"),
        sa.Column("share_slug", sa.String(16), nullable=False),
        sa.Column("visibility", sa.String(24), server_default="friends", nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("view_count", sa.Integer(), server_default="0", nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true(), nullable=False),
        _created_at(),
        sa.UniqueConstraint("share_slug", name="uq_pinory_shares_share_slug"),
    )


def downgrade() -> None:
    for table in (
        "pinory_shares",
        "reactions",
        "journey_stops",
        "journeys",
        "media",
        "places",
        "friend_invitation_acceptances",
        "friend_invitations",
        "friendships",
        "users",
    ):
        op.drop_table(table)
