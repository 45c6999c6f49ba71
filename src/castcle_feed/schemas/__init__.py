"""
Pydantic schemas for API request/response models.

These schemas define the structure of feed data for serialization and validation.
"""

from .common import Meta, PaginationQuery
from .content import ContentMetrics, ContentParticipate, ContentPayload
from .feed import (
    FeedCircle,
    FeedFeature,
    FeedItemPayloadItem,
    FeedItemResponse,
    FeedMode,
    FeedQuery,
    Includes,
)
from .user import UserField, UserResponse

__all__ = [
    "Meta", "PaginationQuery",
    "ContentMetrics", "ContentParticipate", "ContentPayload",
    "FeedCircle", "FeedFeature", "FeedItemPayloadItem", "FeedItemResponse",
    "FeedMode", "FeedQuery", "Includes",
    "UserField", "UserResponse",
]
