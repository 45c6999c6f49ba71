# src/castcle_feed/models/feed_item.py
"""Materialized feed rows for members and guests."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from castcle_feed.db.session import Base
from castcle_feed.db.time import utcnow
from castcle_feed.models.content import Content


class FeedItem(Base):
    """One (viewer, content) pairing of a member's ranked feed.

    Rows are created in bulk per scoring run (``generation``) and only ever
    mutated to stamp ``seen_at`` / ``off_screen_at``.
    """

    __tablename__ = "feed_item"
    __table_args__ = (
        UniqueConstraint(
            "viewer_id",
            "content_id",
            "generation",
            name="uq_feed_item_viewer_content_generation",
        ),
        Index("ix_feed_item_viewer_seen", "viewer_id", "seen_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    viewer_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("account.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    content_id: Mapped[int] = mapped_column(Integer, ForeignKey("content.id"), nullable=False)
    # Time bucket of the scoring run that produced this row.
    generation: Mapped[int] = mapped_column(Integer, nullable=False)
    score: Mapped[float | None] = mapped_column(Float, nullable=True)
    called_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    seen_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    seen_credential: Mapped[str | None] = mapped_column(String(64), nullable=True)
    off_screen_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    # Aggregator metadata: when the scoring run was created.
    aggregator_created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    content: Mapped[Content] = relationship("Content", lazy="joined")


class GuestFeedItem(Base):
    """Precomputed feed entry for anonymous visitors of a country."""

    __tablename__ = "guest_feed_item"
    __table_args__ = (Index("ix_guest_feed_item_country_score", "country_code", "score"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    country_code: Mapped[str] = mapped_column(String(8), nullable=False)
    content_id: Mapped[int] = mapped_column(Integer, ForeignKey("content.id"), nullable=False)
    score: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    content: Mapped[Content] = relationship("Content", lazy="joined")


class DefaultContent(Base):
    """Pinned content shown ahead of the guest feed on its first page."""

    __tablename__ = "default_content"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # Negative indexes are parked and never shown.
    index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    content_id: Mapped[int] = mapped_column(Integer, ForeignKey("content.id"), nullable=False)

    content: Mapped[Content] = relationship("Content", lazy="joined")
