# src/castcle_feed/models/content.py
"""SQLAlchemy model for casts (content) and reposts."""

from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import JSON, DateTime, Enum, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from castcle_feed.db.session import Base
from castcle_feed.db.time import utcnow
from castcle_feed.models.user import EntityVisibility, User


class ContentType(str, enum.Enum):
    SHORT = "short"
    LONG = "long"
    IMAGE = "image"
    VIDEO = "video"
    RECAST = "recast"
    QUOTE = "quote"


class Content(Base):
    """A cast authored by a user; recasts and quotes reference an original post."""

    __tablename__ = "content"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    author_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user.id"),
        nullable=False,
        index=True,
    )
    original_post_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("content.id"),
        nullable=True,
    )
    type: Mapped[ContentType] = mapped_column(
        Enum(ContentType, native_enum=False, length=16),
        nullable=False,
        default=ContentType.SHORT,
    )
    visibility: Mapped[EntityVisibility] = mapped_column(
        Enum(EntityVisibility, native_enum=False, length=16),
        nullable=False,
        default=EntityVisibility.PUBLISH,
    )
    message: Mapped[str | None] = mapped_column(Text, nullable=True)
    photo_urls: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    hashtags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    language: Mapped[str | None] = mapped_column(String(8), nullable=True)
    country_code: Mapped[str | None] = mapped_column(String(8), nullable=True)

    like_count: Mapped[int] = mapped_column(default=0, nullable=False)
    comment_count: Mapped[int] = mapped_column(default=0, nullable=False)
    recast_count: Mapped[int] = mapped_column(default=0, nullable=False)
    quote_count: Mapped[int] = mapped_column(default=0, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )

    author: Mapped[User] = relationship("User", lazy="joined")
    original_post: Mapped[Content | None] = relationship(
        "Content",
        remote_side="Content.id",
        lazy="joined",
        join_depth=1,
    )
