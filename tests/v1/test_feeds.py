# tests/v1/test_feeds.py
from __future__ import annotations

from typing import Any

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from castcle_feed.models import DefaultContent, FeedItem, GuestFeedItem


def _member_feed(client: TestClient, account_id: int, **params: Any):
    return client.get(f"/api/v1/feeds/members/{account_id}", params=params)


def test_member_feed_for_unknown_account_is_404(client: TestClient) -> None:
    response = _member_feed(client, 999_999)
    assert response.status_code == 404
    assert "Account" in response.json()["detail"]


def test_member_feed_returns_camel_case_payload(
    client: TestClient, viewer, make_user, make_content
) -> None:
    account, _ = viewer
    author = make_user()
    content = make_content(author, hashtags=["castcle"])

    response = _member_feed(client, account.id, hasRelationshipExpansion="true")

    assert response.status_code == 200
    body = response.json()
    assert body["meta"]["resultCount"] == 1
    item = body["payload"][0]
    assert item["type"] == "content"
    assert item["payload"]["id"] == str(content.id)
    assert item["payload"]["authorId"] == str(author.id)
    assert item["payload"]["hashtags"] == ["castcle"]
    assert body["includes"]["users"][0]["castId"] == author.cast_id
    assert body["includes"]["users"][0]["followed"] is False


def test_member_feed_rejects_oversized_pages(client: TestClient, viewer) -> None:
    account, _ = viewer
    assert _member_feed(client, account.id, maxResults=500).status_code == 422


def test_seen_and_off_screen_acknowledge_feed_items(
    client: TestClient,
    db_session: Session,
    viewer,
    make_user,
    make_content,
) -> None:
    account, _ = viewer
    make_content(make_user())
    feed_item_id = _member_feed(client, account.id).json()["payload"][0]["id"]
    base = f"/api/v1/feeds/members/{account.id}/items/{feed_item_id}"

    assert client.post(f"{base}/seen", params={"credentialId": "device-1"}).status_code == 204
    assert client.post(f"{base}/seen").status_code == 204
    assert client.post(f"{base}/off-screen").status_code == 204

    db_session.expire_all()
    item = db_session.get(FeedItem, int(feed_item_id))
    assert item.seen_at is not None
    assert item.seen_credential == "device-1"
    assert item.off_screen_at is not None

    history = _member_feed(client, account.id, mode="history").json()
    assert [entry["id"] for entry in history["payload"]] == [feed_item_id]


def test_seen_unknown_feed_item_is_404(client: TestClient, viewer) -> None:
    account, _ = viewer
    response = client.post(f"/api/v1/feeds/members/{account.id}/items/424242/seen")
    assert response.status_code == 404


def test_guest_feed_by_country(
    client: TestClient, db_session: Session, make_user, make_content
) -> None:
    author = make_user()
    pinned = make_content(author)
    listed = make_content(author)
    excluded = make_content(author)
    db_session.add(DefaultContent(index=0, content_id=pinned.id))
    row = GuestFeedItem(country_code="th", content_id=listed.id, score=2.0)
    db_session.add_all([row, GuestFeedItem(country_code="th", content_id=excluded.id, score=1.0)])
    db_session.flush()

    response = client.get(
        "/api/v1/feeds/guests",
        params={"countryCode": "TH", "excludeContents": [excluded.id]},
    )

    assert response.status_code == 200
    body = response.json()
    assert [item["id"] for item in body["payload"]] == ["default", str(row.id)]
    assert body["meta"] == {"resultCount": 1, "newestId": str(row.id), "oldestId": str(row.id)}
    assert body["includes"]["users"][0]["id"] == str(author.id)


def test_guest_feed_for_empty_country(client: TestClient) -> None:
    response = client.get("/api/v1/feeds/guests", params={"countryCode": "TH"})

    assert response.status_code == 200
    assert response.json()["meta"]["resultCount"] == 0
    assert response.json()["payload"] == []
