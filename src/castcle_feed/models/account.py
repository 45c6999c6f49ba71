# src/castcle_feed/models/account.py
"""SQLAlchemy model for viewer accounts."""

from datetime import datetime

from sqlalchemy import JSON, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from castcle_feed.db.session import Base
from castcle_feed.db.time import utcnow


class Account(Base):
    """Login-level identity that owns one or more users and pages.

    Feed items are materialized per account; the account carries the
    geolocation and language preferences used to compose the feed.
    """

    __tablename__ = "account"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # Lower-cased ISO country code from geolocation, if known.
    country_code: Mapped[str | None] = mapped_column(String(8), nullable=True)
    preferred_languages: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    is_guest: Mapped[bool] = mapped_column(default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
