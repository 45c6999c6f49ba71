# src/castcle_feed/models/relationship.py
"""Directed follow/block edges between users."""

from datetime import datetime

from sqlalchemy import DateTime, Enum, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from castcle_feed.db.session import Base
from castcle_feed.db.time import utcnow
from castcle_feed.models.user import EntityVisibility


class Relationship(Base):
    """Edge from ``user_id`` towards ``followed_user_id``.

    A single row carries all flags for the ordered pair; the reverse
    direction is stored as its own row.
    """

    __tablename__ = "relationship"
    __table_args__ = (
        UniqueConstraint("user_id", "followed_user_id", name="uq_relationship_pair"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("user.id"), nullable=False, index=True)
    followed_user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user.id"),
        nullable=False,
        index=True,
    )
    following: Mapped[bool] = mapped_column(default=False, nullable=False)
    # user_id blocks followed_user_id.
    blocking: Mapped[bool] = mapped_column(default=False, nullable=False)
    # user_id is blocked by followed_user_id.
    blocked: Mapped[bool] = mapped_column(default=False, nullable=False)
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
