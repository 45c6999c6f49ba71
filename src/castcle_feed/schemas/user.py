"""User and page response schemas."""
from __future__ import annotations

import enum

from castcle_feed.schemas.common import CamelModel


class UserField(str, enum.Enum):
    RELATIONSHIPS = "relationships"
    CASTS = "casts"


class UserResponse(CamelModel):
    """Author record placed in ``includes.users``.

    Relationship flags stay ``None`` unless relationship expansion was
    requested.
    """

    id: str
    cast_id: str
    display_name: str
    type: str
    avatar_url: str | None = None
    verified: bool = False
    follower_count: int = 0
    following_count: int = 0
    casts: int | None = None
    blocked: bool | None = None
    blocking: bool | None = None
    followed: bool | None = None
