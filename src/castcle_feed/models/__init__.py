# src/castcle_feed/models/__init__.py
"""SQLAlchemy models for the Castcle feed service."""

from .account import Account
from .content import Content, ContentType
from .engagement import Engagement, EngagementTargetType, EngagementType
from .feed_item import DefaultContent, FeedItem, GuestFeedItem
from .relationship import Relationship
from .user import EntityVisibility, User, UserType

__all__ = [
    "Account",
    "Content", "ContentType",
    "DefaultContent", "FeedItem", "GuestFeedItem",
    "Engagement", "EngagementTargetType", "EngagementType",
    "EntityVisibility",
    "Relationship",
    "User", "UserType",
]
