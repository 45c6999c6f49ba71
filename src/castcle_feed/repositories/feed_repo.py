"""Data access helpers for materialized feed rows."""
from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import datetime

from sqlalchemy import ColumnElement, func, select, update
from sqlalchemy.orm import InstrumentedAttribute, Session

from castcle_feed.db.time import utcnow
from castcle_feed.models import (
    Content,
    DefaultContent,
    EntityVisibility,
    FeedItem,
    GuestFeedItem,
)
from castcle_feed.schemas.common import PaginationQuery

__all__ = ["FeedItemRepository", "create_cursor_filter"]


def create_cursor_filter(
    column: InstrumentedAttribute[int],
    query: PaginationQuery,
) -> list[ColumnElement[bool]]:
    """Translate ``sinceId``/``untilId`` into bounds on an identifier column."""
    clauses: list[ColumnElement[bool]] = []
    if query.since_id is not None:
        clauses.append(column > query.since_id)
    if query.until_id is not None:
        clauses.append(column < query.until_id)
    return clauses


class FeedItemRepository:
    """Thin wrapper around database access for feed entities."""

    def __init__(self, session: Session) -> None:
        """Initialize the repository with a SQLAlchemy session."""
        self.session = session

    def get_by_id(self, feed_item_id: int) -> FeedItem | None:
        """Return a feed item by identifier."""
        return self.session.get(FeedItem, feed_item_id)

    def list_seen(self, viewer_id: int, query: PaginationQuery) -> list[FeedItem]:
        """Return seen feed items of a viewer, most recently seen first."""
        stmt = (
            select(FeedItem)
            .where(
                FeedItem.viewer_id == viewer_id,
                FeedItem.seen_at.is_not(None),
                *create_cursor_filter(FeedItem.id, query),
            )
            .order_by(FeedItem.seen_at.desc(), FeedItem.id.desc())
            .limit(query.max_results)
        )
        return list(self.session.scalars(stmt).unique())

    def list_guest(
        self,
        country_code: str,
        query: PaginationQuery,
        exclude_contents: Iterable[int] = (),
    ) -> list[GuestFeedItem]:
        """Return guest feed rows of a country by score, then recency."""
        stmt = select(GuestFeedItem).where(
            GuestFeedItem.country_code == country_code,
            *create_cursor_filter(GuestFeedItem.id, query),
        )
        excluded = list(exclude_contents)
        if excluded:
            stmt = stmt.where(GuestFeedItem.content_id.not_in(excluded))
        stmt = stmt.order_by(
            GuestFeedItem.score.desc(),
            GuestFeedItem.created_at.desc(),
            GuestFeedItem.id.desc(),
        ).limit(query.max_results)
        return list(self.session.scalars(stmt).unique())

    def list_default_contents(self) -> list[DefaultContent]:
        """Return active pinned contents in display order."""
        stmt = (
            select(DefaultContent)
            .where(DefaultContent.index >= 0)
            .order_by(DefaultContent.index.asc(), DefaultContent.id.asc())
        )
        return list(self.session.scalars(stmt).unique())

    def content_ids_in_generation(self, viewer_id: int, generation: int) -> set[int]:
        """Return content already materialized for a viewer in one scoring run."""
        stmt = select(FeedItem.content_id).where(
            FeedItem.viewer_id == viewer_id,
            FeedItem.generation == generation,
        )
        return set(self.session.scalars(stmt))

    def saturated_content_ids(self, viewer_id: int, duplicate_max: int) -> set[int]:
        """Return content materialized for a viewer at least ``duplicate_max`` times."""
        if duplicate_max <= 0:
            return set()
        stmt = (
            select(FeedItem.content_id)
            .where(FeedItem.viewer_id == viewer_id)
            .group_by(FeedItem.content_id)
            .having(func.count(FeedItem.id) >= duplicate_max)
        )
        return set(self.session.scalars(stmt))

    def list_in_generation(
        self,
        viewer_id: int,
        generation: int,
        content_ids: Sequence[int],
    ) -> list[FeedItem]:
        if not content_ids:
            return []
        stmt = select(FeedItem).where(
            FeedItem.viewer_id == viewer_id,
            FeedItem.generation == generation,
            FeedItem.content_id.in_(list(content_ids)),
        )
        return list(self.session.scalars(stmt).unique())

    def insert_many(
        self,
        viewer_id: int,
        generation: int,
        scored: Sequence[tuple[int, float | None]],
        *,
        created_at: datetime | None = None,
    ) -> list[FeedItem]:
        """Insert feed rows in the given order and return them."""
        created_at = created_at or utcnow()
        rows = [
            FeedItem(
                viewer_id=viewer_id,
                content_id=content_id,
                generation=generation,
                score=score,
                called_at=created_at,
                aggregator_created_at=created_at,
                created_at=created_at,
            )
            for content_id, score in scored
        ]
        self.session.add_all(rows)
        self.session.flush()
        return rows

    def mark_seen(self, viewer_id: int, feed_item_id: int, credential: str | None) -> bool:
        """Stamp ``seen_at`` unless it is already set."""
        result = self.session.execute(
            update(FeedItem)
            .where(
                FeedItem.id == feed_item_id,
                FeedItem.viewer_id == viewer_id,
                FeedItem.seen_at.is_(None),
            )
            .values(seen_at=utcnow(), seen_credential=credential)
            .execution_options(synchronize_session=False)
        )
        return bool(result.rowcount)

    def mark_off_screen(self, viewer_id: int, feed_item_id: int) -> bool:
        """Stamp ``off_screen_at`` unless it is already set."""
        result = self.session.execute(
            update(FeedItem)
            .where(
                FeedItem.id == feed_item_id,
                FeedItem.viewer_id == viewer_id,
                FeedItem.off_screen_at.is_(None),
            )
            .values(off_screen_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        return bool(result.rowcount)

    def get_published_contents(self, content_ids: Iterable[int]) -> dict[int, Content]:
        """Return published contents keyed by identifier."""
        ids = list(content_ids)
        if not ids:
            return {}
        stmt = select(Content).where(
            Content.id.in_(ids),
            Content.visibility == EntityVisibility.PUBLISH,
        )
        return {content.id: content for content in self.session.scalars(stmt).unique()}
