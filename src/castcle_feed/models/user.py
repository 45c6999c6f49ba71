# src/castcle_feed/models/user.py
"""SQLAlchemy models for people and page identities."""

from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import DateTime, Enum, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from castcle_feed.db.session import Base
from castcle_feed.db.time import utcnow


class EntityVisibility(str, enum.Enum):
    """Visibility state shared by users, contents and relationships."""

    PUBLISH = "publish"
    HIDDEN = "hidden"
    DELETED = "deleted"


class UserType(str, enum.Enum):
    PEOPLE = "people"
    PAGE = "page"


class User(Base):
    """Public identity (a person or a page) owned by an account."""

    __tablename__ = "user"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    owner_account_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("account.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    type: Mapped[UserType] = mapped_column(
        Enum(UserType, native_enum=False, length=16),
        nullable=False,
        default=UserType.PEOPLE,
    )
    # Public handle, e.g. "@castcle".
    cast_id: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    display_name: Mapped[str] = mapped_column(Text, nullable=False)
    avatar_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    verified: Mapped[bool] = mapped_column(default=False, nullable=False)
    visibility: Mapped[EntityVisibility] = mapped_column(
        Enum(EntityVisibility, native_enum=False, length=16),
        nullable=False,
        default=EntityVisibility.PUBLISH,
    )
    follower_count: Mapped[int] = mapped_column(default=0, nullable=False)
    following_count: Mapped[int] = mapped_column(default=0, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
