"""Engagement writes and per-target aggregates."""
from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from castcle_feed.exceptions import ContentNotFoundError
from castcle_feed.models import (
    Content,
    Engagement,
    EngagementTargetType,
    EngagementType,
    EntityVisibility,
    User,
)


class EngagementService:
    """Service recording likes and counting them per target."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def _get_engagement(
        self,
        user_id: int,
        target_type: EngagementTargetType,
        target_id: int,
        kind: EngagementType,
    ) -> Engagement | None:
        return self.session.scalars(
            select(Engagement).where(
                Engagement.user_id == user_id,
                Engagement.target_type == target_type,
                Engagement.target_id == target_id,
                Engagement.type == kind,
            )
        ).first()

    def like_content(self, user: User, content_id: int) -> Engagement:
        """Record a like; liking twice leaves a single engagement."""
        content = self.session.get(Content, content_id)
        if content is None or content.visibility != EntityVisibility.PUBLISH:
            raise ContentNotFoundError(content_id)

        engagement = self._get_engagement(
            user.id, EngagementTargetType.CONTENT, content_id, EngagementType.LIKE
        )
        if engagement is None:
            engagement = Engagement(
                user_id=user.id,
                target_type=EngagementTargetType.CONTENT,
                target_id=content_id,
                type=EngagementType.LIKE,
            )
            self.session.add(engagement)
            content.like_count += 1
        elif engagement.visibility != EntityVisibility.PUBLISH:
            engagement.visibility = EntityVisibility.PUBLISH
            content.like_count += 1
        self.session.flush()
        return engagement

    def unlike_content(self, user: User, content_id: int) -> None:
        engagement = self._get_engagement(
            user.id, EngagementTargetType.CONTENT, content_id, EngagementType.LIKE
        )
        if engagement is None or engagement.visibility != EntityVisibility.PUBLISH:
            return
        engagement.visibility = EntityVisibility.HIDDEN
        content = self.session.get(Content, content_id)
        if content is not None:
            content.like_count = max(0, content.like_count - 1)
        self.session.flush()

    def get_viewer_engagements(
        self,
        user_id: int,
        content_ids: Iterable[int],
        target_type: EngagementTargetType = EngagementTargetType.CONTENT,
    ) -> list[Engagement]:
        """Return a user's published engagements on the given targets."""
        ids = list(content_ids)
        if not ids:
            return []
        stmt = select(Engagement).where(
            Engagement.user_id == user_id,
            Engagement.target_type == target_type,
            Engagement.target_id.in_(ids),
            Engagement.visibility == EntityVisibility.PUBLISH,
        )
        return list(self.session.scalars(stmt))

    def count_likes(
        self,
        target_ids: Iterable[int],
        target_type: EngagementTargetType = EngagementTargetType.CONTENT,
    ) -> dict[int, int]:
        """Aggregate published likes per target; targets without likes map to 0."""
        ids = list(target_ids)
        counts = dict.fromkeys(ids, 0)
        if not ids:
            return counts
        stmt = (
            select(Engagement.target_id, func.count(Engagement.id))
            .where(
                Engagement.target_type == target_type,
                Engagement.target_id.in_(ids),
                Engagement.type == EngagementType.LIKE,
                Engagement.visibility == EntityVisibility.PUBLISH,
            )
            .group_by(Engagement.target_id)
        )
        for target_id, total in self.session.execute(stmt):
            counts[target_id] = total
        return counts
