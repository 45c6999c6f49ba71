"""Transformers turning ORM rows into feed payloads.

These are free functions over plain rows so that payload shaping stays
independent of the persistence layer.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Protocol

from castcle_feed.db.time import as_utc
from castcle_feed.models import Content, Engagement, EngagementType, User, UserType
from castcle_feed.schemas import (
    ContentMetrics,
    ContentParticipate,
    ContentPayload,
    FeedItemPayloadItem,
    Meta,
    UserResponse,
)
from castcle_feed.services.media_signing import MediaUrlSigner

DEFAULT_FEED_ITEM_ID = "default"


class HasId(Protocol):
    id: int


def to_unsigned_content_payload(
    content: Content,
    engagements: Iterable[Engagement] = (),
) -> ContentPayload:
    """Return the payload of ``content`` with the viewer's participation flags."""
    kinds = {e.type for e in engagements if e.target_id == content.id}
    return ContentPayload(
        id=str(content.id),
        type=content.type.value,
        author_id=str(content.author_id),
        message=content.message,
        photo_urls=list(content.photo_urls or []),
        hashtags=list(content.hashtags or []),
        reference_cast_id=str(content.original_post_id) if content.original_post_id else None,
        metrics=ContentMetrics(
            like_count=content.like_count,
            comment_count=content.comment_count,
            recast_count=content.recast_count,
            quote_count=content.quote_count,
        ),
        participate=ContentParticipate(
            liked=EngagementType.LIKE in kinds,
            commented=EngagementType.COMMENT in kinds,
            recasted=EngagementType.RECAST in kinds,
            quoted=EngagementType.QUOTE in kinds,
            reported=EngagementType.REPORT in kinds,
        ),
        created_at=as_utc(content.created_at),
        updated_at=as_utc(content.updated_at),
    )


def sign_content_payload(payload: ContentPayload, signer: MediaUrlSigner) -> ContentPayload:
    """Return a copy of ``payload`` whose media URLs are signed for the viewer."""
    return payload.model_copy(
        update={
            "photo_urls": [signer.sign(url) for url in payload.photo_urls],
            "signed": True,
        }
    )


def to_signed_content_payload(
    content: Content,
    signer: MediaUrlSigner,
    engagements: Iterable[Engagement] = (),
) -> ContentPayload:
    return sign_content_payload(to_unsigned_content_payload(content, engagements), signer)


def to_feed_payload_item(item_id: str, payload: ContentPayload) -> FeedItemPayloadItem:
    return FeedItemPayloadItem(id=item_id, payload=payload)


def to_user_response(user: User) -> UserResponse:
    return UserResponse(
        id=str(user.id),
        cast_id=user.cast_id,
        display_name=user.display_name,
        type=UserType.PEOPLE.value,
        avatar_url=user.avatar_url,
        verified=user.verified,
        follower_count=user.follower_count,
        following_count=user.following_count,
    )


def to_page_response(user: User) -> UserResponse:
    # Pages do not expose who they follow.
    return UserResponse(
        id=str(user.id),
        cast_id=user.cast_id,
        display_name=user.display_name,
        type=UserType.PAGE.value,
        avatar_url=user.avatar_url,
        verified=user.verified,
        follower_count=user.follower_count,
    )


def to_author_response(user: User) -> UserResponse:
    return to_page_response(user) if user.type == UserType.PAGE else to_user_response(user)


def collect_authors(contents: Iterable[Content]) -> list[User]:
    """Return distinct authors of contents and their original posts, first seen first."""
    contents = list(contents)
    seen: set[int] = set()
    authors: list[User] = []
    candidates = [c.author for c in contents]
    candidates.extend(c.original_post.author for c in contents if c.original_post is not None)
    for author in candidates:
        if author is None or author.id in seen:
            continue
        seen.add(author.id)
        authors.append(author)
    return authors


def collect_casts(contents: Iterable[Content]) -> list[Content]:
    """Return distinct original posts embedded by reposts."""
    seen: set[int] = set()
    casts: list[Content] = []
    for content in contents:
        original = content.original_post
        if original is None or original.id in seen:
            continue
        seen.add(original.id)
        casts.append(original)
    return casts


def create_meta(rows: Sequence[HasId]) -> Meta:
    """Report the size and boundary identifiers of a returned page."""
    if not rows:
        return Meta(result_count=0)
    return Meta(
        result_count=len(rows),
        newest_id=str(rows[0].id),
        oldest_id=str(rows[-1].id),
    )
