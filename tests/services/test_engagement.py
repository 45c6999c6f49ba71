# tests/services/test_engagement.py
from __future__ import annotations

import pytest
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from castcle_feed.exceptions import ContentNotFoundError
from castcle_feed.models import Engagement, EntityVisibility
from castcle_feed.services.engagement import EngagementService


def test_like_is_idempotent(db_session: Session, viewer, make_user, make_content) -> None:
    _, user = viewer
    content = make_content(make_user())
    service = EngagementService(db_session)

    service.like_content(user, content.id)
    service.like_content(user, content.id)

    total = db_session.scalar(select(func.count(Engagement.id)))
    assert total == 1
    assert content.like_count == 1
    assert service.count_likes([content.id]) == {content.id: 1}


def test_unlike_hides_engagement_and_relike_restores(
    db_session: Session, viewer, make_user, make_content
) -> None:
    _, user = viewer
    content = make_content(make_user())
    service = EngagementService(db_session)
    engagement = service.like_content(user, content.id)

    service.unlike_content(user, content.id)
    assert engagement.visibility == EntityVisibility.HIDDEN
    assert content.like_count == 0
    assert service.get_viewer_engagements(user.id, [content.id]) == []

    service.like_content(user, content.id)
    assert content.like_count == 1
    assert service.get_viewer_engagements(user.id, [content.id]) == [engagement]


def test_like_unknown_content_raises(db_session: Session, viewer) -> None:
    _, user = viewer
    with pytest.raises(ContentNotFoundError):
        EngagementService(db_session).like_content(user, 123_456)


def test_count_likes_defaults_to_zero(db_session: Session) -> None:
    assert EngagementService(db_session).count_likes([1, 2]) == {1: 0, 2: 0}
