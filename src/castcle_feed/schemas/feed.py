"""Feed request and response schemas."""
from __future__ import annotations

import enum

from pydantic import Field

from castcle_feed.schemas.common import CamelModel, Meta, PaginationQuery
from castcle_feed.schemas.content import ContentPayload
from castcle_feed.schemas.user import UserField, UserResponse


class FeedMode(str, enum.Enum):
    CURRENT = "current"
    HISTORY = "history"


class FeedQuery(PaginationQuery):
    """Query accepted by the member feed."""

    mode: FeedMode = FeedMode.CURRENT
    user_fields: list[UserField] = Field(default_factory=list)


class FeedFeature(CamelModel):
    slug: str = "feed"
    key: str = "feature.feed"
    name: str = "Feed"


class FeedCircle(CamelModel):
    id: str = "for-you"
    key: str = "circle.forYou"
    name: str = "For You"
    slug: str = "forYou"


class FeedItemPayloadItem(CamelModel):
    id: str
    feature: FeedFeature = Field(default_factory=FeedFeature)
    circle: FeedCircle = Field(default_factory=FeedCircle)
    payload: ContentPayload
    type: str = "content"


class Includes(CamelModel):
    """Authors and embedded original posts referenced by a payload."""

    users: list[UserResponse] = Field(default_factory=list)
    casts: list[ContentPayload] = Field(default_factory=list)


class FeedItemResponse(CamelModel):
    payload: list[FeedItemPayloadItem] = Field(default_factory=list)
    includes: Includes = Field(default_factory=Includes)
    meta: Meta = Field(default_factory=Meta)
