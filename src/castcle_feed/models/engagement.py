# src/castcle_feed/models/engagement.py
"""Models capturing viewer interactions with contents and comments."""

import enum
from datetime import datetime

from sqlalchemy import DateTime, Enum, ForeignKey, Index, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from castcle_feed.db.session import Base
from castcle_feed.db.time import utcnow
from castcle_feed.models.user import EntityVisibility


class EngagementTargetType(str, enum.Enum):
    CONTENT = "content"
    COMMENT = "comment"


class EngagementType(str, enum.Enum):
    LIKE = "like"
    RECAST = "recast"
    QUOTE = "quote"
    COMMENT = "comment"
    REPORT = "report"


class Engagement(Base):
    """Per-user interaction with a target.

    The unique constraint makes each (user, target, type) interaction
    idempotent.
    """

    __tablename__ = "engagement"
    __table_args__ = (
        UniqueConstraint(
            "user_id",
            "target_type",
            "target_id",
            "type",
            name="uq_engagement_user_target_type",
        ),
        Index("ix_engagement_target", "target_type", "target_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("user.id"), nullable=False)
    target_type: Mapped[EngagementTargetType] = mapped_column(
        Enum(EngagementTargetType, native_enum=False, length=16),
        nullable=False,
        default=EngagementTargetType.CONTENT,
    )
    target_id: Mapped[int] = mapped_column(Integer, nullable=False)
    type: Mapped[EngagementType] = mapped_column(
        Enum(EngagementType, native_enum=False, length=16),
        nullable=False,
        default=EngagementType.LIKE,
    )
    visibility: Mapped[EntityVisibility] = mapped_column(
        Enum(EntityVisibility, native_enum=False, length=16),
        nullable=False,
        default=EntityVisibility.PUBLISH,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
