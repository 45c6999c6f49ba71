# tests/services/test_includes.py
from __future__ import annotations

from types import SimpleNamespace

from castcle_feed.models import ContentType, Engagement, EngagementType, UserType
from castcle_feed.services.includes import (
    collect_authors,
    collect_casts,
    create_meta,
    to_author_response,
    to_signed_content_payload,
    to_unsigned_content_payload,
)


def test_collect_authors_dedupes_in_first_seen_order(make_user, make_content) -> None:
    alice, bob, carol = make_user(), make_user(), make_user()
    original = make_content(carol)
    contents = [
        make_content(alice),
        make_content(bob, type=ContentType.RECAST, original_post_id=original.id),
        make_content(alice),
    ]

    assert [user.id for user in collect_authors(contents)] == [alice.id, bob.id, carol.id]


def test_collect_casts_returns_each_original_once(make_user, make_content) -> None:
    author = make_user()
    original = make_content(author)
    contents = [
        make_content(author, type=ContentType.RECAST, original_post_id=original.id),
        make_content(author, type=ContentType.QUOTE, original_post_id=original.id),
        make_content(author),
    ]

    assert collect_casts(contents) == [original]


def test_create_meta_reports_page_boundaries() -> None:
    rows = [SimpleNamespace(id=30), SimpleNamespace(id=20), SimpleNamespace(id=10)]
    meta = create_meta(rows)

    assert (meta.result_count, meta.newest_id, meta.oldest_id) == (3, "30", "10")
    assert create_meta([]).model_dump(by_alias=True) == {
        "resultCount": 0,
        "newestId": None,
        "oldestId": None,
    }


def test_participation_flags_follow_viewer_engagements(make_user, make_content) -> None:
    author = make_user()
    content = make_content(author, photo_urls=["https://cdn.castcle.com/p/1.jpg"])
    engagements = [
        Engagement(target_id=content.id, type=EngagementType.LIKE),
        Engagement(target_id=content.id + 1, type=EngagementType.RECAST),
    ]

    payload = to_unsigned_content_payload(content, engagements)

    assert payload.participate.liked is True
    assert payload.participate.recasted is False
    assert payload.signed is False
    assert payload.photo_urls == ["https://cdn.castcle.com/p/1.jpg"]


def test_signed_payload_carries_tokens(make_user, make_content, signer) -> None:
    content = make_content(make_user(), photo_urls=["https://cdn.castcle.com/p/1.jpg"])

    payload = to_signed_content_payload(content, signer)

    assert payload.signed is True
    assert signer.verify(payload.photo_urls[0])


def test_pages_hide_following_count(make_user) -> None:
    page = make_user(type=UserType.PAGE, following_count=7)
    person = make_user(following_count=7)

    assert to_author_response(page).type == "page"
    assert to_author_response(page).following_count == 0
    assert to_author_response(person).following_count == 7
