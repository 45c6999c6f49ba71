"""Candidate generation for member feeds.

The pipeline mixes contents of followed users with a global pool:

1. Followed authors fill up to ``min(follow_feed_max, ceil(max_result * ratio))``
   slots.
2. The remaining slots are backfilled from contents of everyone else,
   restricted to the viewer's preferred languages when they have any.

Both pools are ranked by an age-decayed engagement weight. Blocked authors
(in either direction) never appear, and contents already delivered to the
viewer in the current refresh cycle, or delivered ``duplicate_max`` times
overall, are skipped.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session, aliased

from castcle_feed.core.settings import FeedConfig
from castcle_feed.db.time import as_utc, utcnow
from castcle_feed.models import Content, EntityVisibility
from castcle_feed.repositories.feed_repo import FeedItemRepository
from castcle_feed.services.user_service import UserService

logger = logging.getLogger(__name__)

# Contents older than this many half-lives are dropped from the pools.
DECAY_CUTOFF_HALF_LIVES = 4
# Rows read per pool relative to the requested page size.
POOL_FACTOR = 20
GEO_BOOST = 2.0


@dataclass(frozen=True)
class CandidateRequest:
    """Inputs of one candidate generation run."""

    user_id: int
    viewer_id: int
    max_result: int
    generation: int
    country_code: str | None = None
    prefer_languages: Sequence[str] = field(default_factory=tuple)
    now: datetime | None = None


def decay_weight(
    content: Content,
    now: datetime,
    decay_days: float,
    country_code: str | None = None,
) -> float:
    """Return the engagement weight of ``content`` halved every ``decay_days``."""
    weight = 1.0 + max(0, content.like_count)
    if decay_days > 0:
        age_days = max(0.0, (now - as_utc(content.created_at)).total_seconds() / 86_400)
        weight *= 0.5 ** (age_days / decay_days)
    if country_code and content.country_code and content.country_code.lower() == country_code.lower():
        weight *= GEO_BOOST
    return weight


def follow_quota(config: FeedConfig, max_result: int) -> int:
    ratio = min(1.0, max(0.0, config.follow_feed_ratio))
    return max(0, min(config.follow_feed_max, math.ceil(max_result * ratio)))


class CandidatePipeline:
    """Build the unscored candidate list of content identifiers for a viewer."""

    def __init__(self, session: Session, config: FeedConfig) -> None:
        self.session = session
        self.config = config
        self.feed_items = FeedItemRepository(session)
        self.users = UserService(session)

    def _eligible_contents(
        self,
        *,
        request: CandidateRequest,
        now: datetime,
        blocked: set[int],
        excluded: set[int],
        followed: set[int],
        from_followed: bool,
        languages: set[str] | None = None,
    ) -> list[Content]:
        stmt = select(Content).where(
            Content.visibility == EntityVisibility.PUBLISH,
            Content.author_id != request.user_id,
        )
        if blocked:
            stmt = stmt.where(Content.author_id.not_in(sorted(blocked)))
        if excluded:
            stmt = stmt.where(Content.id.not_in(sorted(excluded)))
        if from_followed:
            stmt = stmt.where(Content.author_id.in_(sorted(followed)))
        elif followed:
            stmt = stmt.where(Content.author_id.not_in(sorted(followed)))
        if languages:
            stmt = stmt.where(
                or_(Content.language.is_(None), func.lower(Content.language).in_(sorted(languages)))
            )

        # Reposts only qualify while their original is published and not blocked.
        original = aliased(Content)
        available_originals = select(original.id).where(
            original.visibility == EntityVisibility.PUBLISH
        )
        if blocked:
            available_originals = available_originals.where(
                original.author_id.not_in(sorted(blocked))
            )
        stmt = stmt.where(
            or_(
                Content.original_post_id.is_(None),
                Content.original_post_id.in_(available_originals),
            )
        )

        if self.config.decay_days > 0:
            cutoff = now - timedelta(days=self.config.decay_days * DECAY_CUTOFF_HALF_LIVES)
            stmt = stmt.where(Content.created_at >= cutoff)
        stmt = stmt.order_by(Content.created_at.desc(), Content.id.desc()).limit(
            max(1, request.max_result) * POOL_FACTOR
        )
        return list(self.session.scalars(stmt).unique())

    def _rank(self, contents: Iterable[Content], request: CandidateRequest, now: datetime) -> list[Content]:
        weighted = [
            (decay_weight(c, now, self.config.decay_days, request.country_code), c) for c in contents
        ]
        weighted.sort(key=lambda pair: (-pair[0], -pair[1].id))
        return [content for _, content in weighted]

    def get_feed_contents(self, request: CandidateRequest) -> list[int]:
        """Return candidate content IDs, followed picks first then backfill."""
        if request.max_result <= 0:
            return []
        now = request.now or utcnow()

        followed = self.users.get_following_user_ids(request.user_id)
        blocked = self.users.get_blocked_user_ids(request.user_id)
        followed -= blocked
        excluded = self.feed_items.content_ids_in_generation(
            request.viewer_id, request.generation
        ) | self.feed_items.saturated_content_ids(request.viewer_id, self.config.duplicate_max)

        picks: list[Content] = []
        if followed:
            followed_contents = self._eligible_contents(
                request=request,
                now=now,
                blocked=blocked,
                excluded=excluded,
                followed=followed,
                from_followed=True,
            )
            quota = follow_quota(self.config, request.max_result)
            picks = self._rank(followed_contents, request, now)[:quota]

        remaining = request.max_result - len(picks)
        backfill: list[Content] = []
        if remaining > 0:
            global_contents = self._eligible_contents(
                request=request,
                now=now,
                blocked=blocked,
                excluded=excluded,
                followed=followed,
                from_followed=False,
                languages={lang.lower() for lang in request.prefer_languages if lang},
            )
            backfill = self._rank(global_contents, request, now)[:remaining]

        logger.debug(
            "Candidate pipeline for viewer %s: %d followed, %d backfill, %d excluded",
            request.viewer_id,
            len(picks),
            len(backfill),
            len(excluded),
        )
        return [content.id for content in picks + backfill]
