"""initial feed schema

Revision ID: 3c1f8a2d9b41
Revises:
Create Date: 2026-10-17 09:12:44.518203

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "3c1f8a2d9b41"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _visibility() -> sa.Enum:
    return sa.Enum("PUBLISH", "HIDDEN", "DELETED", name="entityvisibility", native_enum=False, length=16)


def upgrade() -> None:
    """Create accounts, users, contents, edges, engagements and feed rows."""
    op.create_table(
        "account",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("country_code", sa.String(length=8), nullable=True),
        sa.Column("preferred_languages", sa.JSON(), nullable=False),
        sa.Column("is_guest", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "user",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("owner_account_id", sa.Integer(), nullable=False),
        sa.Column(
            "type",
            sa.Enum("PEOPLE", "PAGE", name="usertype", native_enum=False, length=16),
            nullable=False,
        ),
        sa.Column("cast_id", sa.String(length=64), nullable=False),
        sa.Column("display_name", sa.Text(), nullable=False),
        sa.Column("avatar_url", sa.Text(), nullable=True),
        sa.Column("verified", sa.Boolean(), nullable=False),
        sa.Column("visibility", _visibility(), nullable=False),
        sa.Column("follower_count", sa.Integer(), nullable=False),
        sa.Column("following_count", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["owner_account_id"], ["account.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("cast_id"),
    )
    op.create_index("ix_user_owner_account_id", "user", ["owner_account_id"])

    op.create_table(
        "content",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("author_id", sa.Integer(), nullable=False),
        sa.Column("original_post_id", sa.Integer(), nullable=True),
        sa.Column(
            "type",
            sa.Enum(
                "SHORT", "LONG", "IMAGE", "VIDEO", "RECAST", "QUOTE",
                name="contenttype",
                native_enum=False,
                length=16,
            ),
            nullable=False,
        ),
        sa.Column("visibility", _visibility(), nullable=False),
        sa.Column("message", sa.Text(), nullable=True),
        sa.Column("photo_urls", sa.JSON(), nullable=False),
        sa.Column("hashtags", sa.JSON(), nullable=False),
        sa.Column("language", sa.String(length=8), nullable=True),
        sa.Column("country_code", sa.String(length=8), nullable=True),
        sa.Column("like_count", sa.Integer(), nullable=False),
        sa.Column("comment_count", sa.Integer(), nullable=False),
        sa.Column("recast_count", sa.Integer(), nullable=False),
        sa.Column("quote_count", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["author_id"], ["user.id"]),
        sa.ForeignKeyConstraint(["original_post_id"], ["content.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_content_author_id", "content", ["author_id"])

    op.create_table(
        "relationship",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("followed_user_id", sa.Integer(), nullable=False),
        sa.Column("following", sa.Boolean(), nullable=False),
        sa.Column("blocking", sa.Boolean(), nullable=False),
        sa.Column("blocked", sa.Boolean(), nullable=False),
        sa.Column("visibility", _visibility(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["user.id"]),
        sa.ForeignKeyConstraint(["followed_user_id"], ["user.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "followed_user_id", name="uq_relationship_pair"),
    )
    op.create_index("ix_relationship_user_id", "relationship", ["user_id"])
    op.create_index("ix_relationship_followed_user_id", "relationship", ["followed_user_id"])

    op.create_table(
        "engagement",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column(
            "target_type",
            sa.Enum("CONTENT", "COMMENT", name="engagementtargettype", native_enum=False, length=16),
            nullable=False,
        ),
        sa.Column("target_id", sa.Integer(), nullable=False),
        sa.Column(
            "type",
            sa.Enum(
                "LIKE", "RECAST", "QUOTE", "COMMENT", "REPORT",
                name="engagementtype",
                native_enum=False,
                length=16,
            ),
            nullable=False,
        ),
        sa.Column("visibility", _visibility(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["user.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "user_id", "target_type", "target_id", "type",
            name="uq_engagement_user_target_type",
        ),
    )
    op.create_index("ix_engagement_target", "engagement", ["target_type", "target_id"])

    op.create_table(
        "feed_item",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("viewer_id", sa.Integer(), nullable=False),
        sa.Column("content_id", sa.Integer(), nullable=False),
        sa.Column("generation", sa.Integer(), nullable=False),
        sa.Column("score", sa.Float(), nullable=True),
        sa.Column("called_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("seen_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("seen_credential", sa.String(length=64), nullable=True),
        sa.Column("off_screen_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("aggregator_created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["viewer_id"], ["account.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["content_id"], ["content.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "viewer_id", "content_id", "generation",
            name="uq_feed_item_viewer_content_generation",
        ),
    )
    op.create_index("ix_feed_item_viewer_id", "feed_item", ["viewer_id"])
    op.create_index("ix_feed_item_viewer_seen", "feed_item", ["viewer_id", "seen_at"])

    op.create_table(
        "guest_feed_item",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("country_code", sa.String(length=8), nullable=False),
        sa.Column("content_id", sa.Integer(), nullable=False),
        sa.Column("score", sa.Float(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["content_id"], ["content.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_guest_feed_item_country_score", "guest_feed_item", ["country_code", "score"]
    )

    op.create_table(
        "default_content",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("index", sa.Integer(), nullable=False),
        sa.Column("content_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["content_id"], ["content.id"]),
        sa.PrimaryKeyConstraint("id"),
    )


def downgrade() -> None:
    """Drop every feed table."""
    op.drop_table("default_content")
    op.drop_index("ix_guest_feed_item_country_score", table_name="guest_feed_item")
    op.drop_table("guest_feed_item")
    op.drop_index("ix_feed_item_viewer_seen", table_name="feed_item")
    op.drop_index("ix_feed_item_viewer_id", table_name="feed_item")
    op.drop_table("feed_item")
    op.drop_index("ix_engagement_target", table_name="engagement")
    op.drop_table("engagement")
    op.drop_index("ix_relationship_followed_user_id", table_name="relationship")
    op.drop_index("ix_relationship_user_id", table_name="relationship")
    op.drop_table("relationship")
    op.drop_index("ix_content_author_id", table_name="content")
    op.drop_table("content")
    op.drop_index("ix_user_owner_account_id", table_name="user")
    op.drop_table("user")
    op.drop_table("account")
