"""Feed ranking and assembly.

``RankerService`` answers the three feed reads (member, member history and
guest) and the two feed item acknowledgements (seen, off-screen).

Member feeds are computed on request: candidates come from
:class:`~castcle_feed.services.candidates.CandidatePipeline`, are scored by the
personalization service and materialized as ``FeedItem`` rows keyed by
(viewer, content, generation). A generation is a time bucket of
``FeedConfig.generation_seconds``; refreshes within the same bucket serialize
on a per-viewer lock and only insert rows that are not there yet.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Iterable, Mapping, Sequence
from datetime import datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from castcle_feed.core.settings import FeedConfig
from castcle_feed.db.time import utcnow
from castcle_feed.exceptions import FeedItemNotFoundError
from castcle_feed.models import Account, Content, Engagement, EntityVisibility, FeedItem
from castcle_feed.repositories.feed_repo import FeedItemRepository
from castcle_feed.schemas import (
    FeedItemPayloadItem,
    FeedItemResponse,
    FeedMode,
    FeedQuery,
    Includes,
    PaginationQuery,
)
from castcle_feed.services.candidates import CandidatePipeline, CandidateRequest
from castcle_feed.services.engagement import EngagementService
from castcle_feed.services.feed_lock import FeedLock, MemoryFeedLock
from castcle_feed.services.includes import (
    DEFAULT_FEED_ITEM_ID,
    collect_authors,
    collect_casts,
    create_meta,
    sign_content_payload,
    to_feed_payload_item,
    to_signed_content_payload,
    to_unsigned_content_payload,
)
from castcle_feed.services.media_signing import MediaUrlSigner
from castcle_feed.services.personalization import ContentScorer, PersonalizationError
from castcle_feed.services.user_service import UserService

logger = logging.getLogger(__name__)

ScoredContent = tuple[int, float | None]


def rank_content_ids(
    candidates: Sequence[int],
    scores: Mapping[str, float],
) -> list[ScoredContent]:
    """Order candidates by descending score.

    Equal scores fall back to ascending content ID. Candidates the scorer did
    not return, or returned a non-finite score for, follow the scored ones in
    candidate order; with no usable scores the candidate order is kept.
    """
    unique = list(dict.fromkeys(candidates))
    usable = {cid: score for cid, score in scores.items() if math.isfinite(score)}
    if not usable:
        return [(content_id, None) for content_id in unique]

    scored = [(cid, usable[str(cid)]) for cid in unique if str(cid) in usable]
    scored.sort(key=lambda pair: (-pair[1], pair[0]))
    unscored: list[ScoredContent] = [(cid, None) for cid in unique if str(cid) not in usable]
    return [*scored, *unscored]


class RankerService:
    """Assemble member and guest feeds for one database session."""

    def __init__(
        self,
        session: Session,
        scorer: ContentScorer | None,
        config: FeedConfig,
        *,
        url_signer: MediaUrlSigner | None = None,
        lock: FeedLock | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.session = session
        self.scorer = scorer
        self.config = config
        self.url_signer = url_signer or MediaUrlSigner()
        self.lock = lock or MemoryFeedLock()
        self.clock = clock
        self.feed_items = FeedItemRepository(session)
        self.users = UserService(session)
        self.engagements = EngagementService(session)
        self.candidates = CandidatePipeline(session, config)

    def generation_of(self, moment: datetime) -> int:
        return int(moment.timestamp()) // self.config.generation_seconds

    async def _score(self, account_id: str, content_ids: Sequence[str]) -> dict[str, float]:
        if self.scorer is None or not content_ids:
            return {}
        try:
            return dict(await self.scorer.personalize_contents(account_id, content_ids))
        except PersonalizationError as exc:
            logger.warning(
                "Personalization failed for account %s, using candidate order: %s",
                account_id,
                exc,
            )
            return {}

    async def get_all_engagement(
        self, content_ids: Iterable[int], viewer_account: Account | None
    ) -> list[Engagement]:
        """Return the viewer's engagements on the given contents."""
        if viewer_account is None:
            return []
        viewer = self.users.find_user_from_account_id(viewer_account.id)
        if viewer is None:
            return []
        return self.engagements.get_viewer_engagements(viewer.id, content_ids)

    # --- Guest feed ---------------------------------------------------------------
    async def get_guest_feed_items(
        self,
        query: PaginationQuery,
        viewer: Account | None,
        exclude_contents: Iterable[int] | None = None,
        *,
        country_code: str | None = None,
    ) -> FeedItemResponse:
        """Return the country guest feed, led by pinned contents on the first page."""
        prefix_contents: list[Content] = []
        if not query.has_cursor:
            prefix_contents = [
                pinned.content
                for pinned in self.feed_items.list_default_contents()
                if pinned.content is not None
                and pinned.content.visibility == EntityVisibility.PUBLISH
            ]

        country = country_code or (viewer.country_code if viewer else None)
        country = (country or self.config.default_country).lower()
        rows = self.feed_items.list_guest(country, query.swapped(), exclude_contents or ())
        rows = [
            row for row in rows
            if row.content is not None and row.content.visibility == EntityVisibility.PUBLISH
        ]

        payload = [
            to_feed_payload_item(DEFAULT_FEED_ITEM_ID, to_signed_content_payload(c, self.url_signer))
            for c in prefix_contents
        ]
        payload.extend(
            to_feed_payload_item(str(row.id), to_signed_content_payload(row.content, self.url_signer))
            for row in rows
        )

        row_contents = [row.content for row in rows]
        includes = Includes(
            users=self.users.get_includes_users(
                viewer,
                collect_authors(row_contents + prefix_contents),
                query.has_relationship_expansion,
            ),
            casts=[
                to_signed_content_payload(cast, self.url_signer)
                for cast in collect_casts(row_contents)
            ],
        )
        return FeedItemResponse(payload=payload, includes=includes, meta=create_meta(rows))

    # --- Member feed --------------------------------------------------------------
    async def _shape_member_response(
        self,
        viewer: Account,
        feeds: Sequence[FeedItem],
        contents: Mapping[int, Content],
        query: FeedQuery,
    ) -> FeedItemResponse:
        visible = [feed for feed in feeds if feed.content_id in contents]
        ordered_contents = [contents[feed.content_id] for feed in visible]
        casts = collect_casts(ordered_contents)
        engagements = await self.get_all_engagement(
            [c.id for c in ordered_contents] + [c.id for c in casts],
            viewer,
        )

        payload: list[FeedItemPayloadItem] = [
            to_feed_payload_item(
                str(feed.id),
                sign_content_payload(
                    to_unsigned_content_payload(content, engagements), self.url_signer
                ),
            )
            for feed, content in zip(visible, ordered_contents)
        ]
        includes = Includes(
            users=self.users.get_includes_users(
                viewer,
                collect_authors(ordered_contents),
                query.has_relationship_expansion,
                query.user_fields,
            ),
            casts=[
                sign_content_payload(to_unsigned_content_payload(cast, engagements), self.url_signer)
                for cast in casts
            ],
        )
        return FeedItemResponse(payload=payload, includes=includes, meta=create_meta(visible))

    async def _get_member_feed_history_items_from_viewer(
        self, viewer: Account, query: FeedQuery
    ) -> FeedItemResponse:
        rows = self.feed_items.list_seen(viewer.id, query.swapped())
        contents = {
            row.content_id: row.content
            for row in rows
            if row.content is not None and row.content.visibility == EntityVisibility.PUBLISH
        }
        return await self._shape_member_response(viewer, rows, contents, query)

    async def _materialize(
        self,
        viewer: Account,
        generation: int,
        ranked: Sequence[ScoredContent],
        created_at: datetime,
    ) -> list[FeedItem]:
        """Insert missing (viewer, content, generation) rows under the viewer lock."""
        content_ids = [content_id for content_id, _ in ranked]
        async with self.lock.hold(viewer.id):
            existing = {
                row.content_id: row
                for row in self.feed_items.list_in_generation(viewer.id, generation, content_ids)
            }
            missing = [pair for pair in ranked if pair[0] not in existing]
            try:
                with self.session.begin_nested():
                    inserted = self.feed_items.insert_many(
                        viewer.id, generation, missing, created_at=created_at
                    )
            except IntegrityError:
                # Another process materialized this generation first.
                logger.warning(
                    "Feed items of generation %d for viewer %s were inserted concurrently",
                    generation,
                    viewer.id,
                )
                inserted = []
                existing = {
                    row.content_id: row
                    for row in self.feed_items.list_in_generation(
                        viewer.id, generation, content_ids
                    )
                }
            self.session.commit()

        if existing:
            logger.info(
                "Reused %d feed items of generation %d for viewer %s",
                len(existing),
                generation,
                viewer.id,
            )
        rows = {**existing, **{row.content_id: row for row in inserted}}
        return [rows[content_id] for content_id in content_ids if content_id in rows]

    async def get_member_feed_items_from_viewer(
        self, viewer: Account, query: FeedQuery
    ) -> FeedItemResponse:
        """Compute, materialize and return the viewer's next ranked feed page.

        Raises:
            UserNotFoundError: If the account owns no published person.
        """
        if query.mode == FeedMode.HISTORY:
            return await self._get_member_feed_history_items_from_viewer(viewer, query)

        user = self.users.get_user_from_account_id(viewer.id)
        now = self.clock()
        generation = self.generation_of(now)

        candidates = self.candidates.get_feed_contents(
            CandidateRequest(
                user_id=user.id,
                viewer_id=viewer.id,
                max_result=query.max_results,
                generation=generation,
                country_code=viewer.country_code,
                prefer_languages=tuple(viewer.preferred_languages or ()),
                now=now,
            )
        )
        scores = await self._score(str(viewer.id), [str(cid) for cid in candidates])
        ranked = rank_content_ids(candidates, scores)
        logger.debug(
            "Ranked %d candidates for viewer %s (%d scored)",
            len(ranked),
            viewer.id,
            len(scores),
        )

        feeds = await self._materialize(viewer, generation, ranked, now) if ranked else []
        contents = self.feed_items.get_published_contents(feed.content_id for feed in feeds)
        return await self._shape_member_response(viewer, feeds, contents, query)

    async def sort_contents_by_score(
        self, account_id: str, contents: Sequence[Content]
    ) -> list[Content]:
        """Re-order fetched contents by personalization score, most relevant first.

        Repeated contents are kept next to each other in their input order.
        """
        content_ids = [content.id for content in contents]
        scores = await self._score(account_id, [str(cid) for cid in dict.fromkeys(content_ids)])
        position = {cid: index for index, (cid, _) in enumerate(rank_content_ids(content_ids, scores))}
        return sorted(contents, key=lambda content: position[content.id])

    # --- Acknowledgements ---------------------------------------------------------
    def _ensure_feed_item(self, account: Account, feed_item_id: int) -> None:
        item = self.feed_items.get_by_id(feed_item_id)
        if item is None or item.viewer_id != account.id:
            raise FeedItemNotFoundError(feed_item_id)

    async def seen_feed_item(
        self,
        account: Account,
        feed_item_id: int,
        credential_id: str | None = None,
    ) -> bool:
        """Stamp the item as seen once; returns False when it already was."""
        changed = self.feed_items.mark_seen(account.id, feed_item_id, credential_id)
        if not changed:
            self._ensure_feed_item(account, feed_item_id)
        self.session.commit()
        return changed

    async def off_screen_feed_item(self, account: Account, feed_item_id: int) -> bool:
        """Stamp the item as scrolled past once; returns False when it already was."""
        changed = self.feed_items.mark_off_screen(account.id, feed_item_id)
        if not changed:
            self._ensure_feed_item(account, feed_item_id)
        self.session.commit()
        return changed
