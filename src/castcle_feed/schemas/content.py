"""Content payload schemas."""
from __future__ import annotations

from datetime import datetime

from pydantic import Field

from castcle_feed.schemas.common import CamelModel


class ContentMetrics(CamelModel):
    like_count: int = 0
    comment_count: int = 0
    recast_count: int = 0
    quote_count: int = 0


class ContentParticipate(CamelModel):
    """Interaction flags of the requesting viewer."""

    liked: bool = False
    commented: bool = False
    recasted: bool = False
    quoted: bool = False
    reported: bool = False


class ContentPayload(CamelModel):
    """Client-facing representation of a cast."""

    id: str
    type: str
    author_id: str
    message: str | None = None
    photo_urls: list[str] = Field(default_factory=list)
    hashtags: list[str] = Field(default_factory=list)
    reference_cast_id: str | None = None
    metrics: ContentMetrics = Field(default_factory=ContentMetrics)
    participate: ContentParticipate = Field(default_factory=ContentParticipate)
    signed: bool = False
    created_at: datetime
    updated_at: datetime
