"""Feed endpoints for members and guests."""
from __future__ import annotations

from fastapi import APIRouter, Query, status

from castcle_feed.api.v1.dependencies import RankerDep, ViewerDep
from castcle_feed.schemas import FeedItemResponse, FeedMode, FeedQuery, PaginationQuery, UserField
from castcle_feed.schemas.common import DEFAULT_MAX_RESULTS, MAX_RESULTS_LIMIT

router = APIRouter(prefix="/feeds", tags=["feed"])


@router.get("/members/{account_id}", response_model=FeedItemResponse)
async def get_member_feed(
    viewer: ViewerDep,
    ranker: RankerDep,
    since_id: int | None = Query(None, alias="sinceId", ge=1),
    until_id: int | None = Query(None, alias="untilId", ge=1),
    max_results: int = Query(DEFAULT_MAX_RESULTS, alias="maxResults", ge=1, le=MAX_RESULTS_LIMIT),
    mode: FeedMode = Query(FeedMode.CURRENT),
    has_relationship_expansion: bool = Query(False, alias="hasRelationshipExpansion"),
    user_fields: list[UserField] = Query([], alias="userFields"),
) -> FeedItemResponse:
    """Return the viewer's ranked feed, or their seen history in ``history`` mode."""
    query = FeedQuery(
        since_id=since_id,
        until_id=until_id,
        max_results=max_results,
        mode=mode,
        has_relationship_expansion=has_relationship_expansion,
        user_fields=user_fields,
    )
    return await ranker.get_member_feed_items_from_viewer(viewer, query)


@router.get("/guests", response_model=FeedItemResponse)
async def get_guest_feed(
    ranker: RankerDep,
    account_id: int | None = Query(None, alias="accountId", ge=1),
    country_code: str | None = Query(None, alias="countryCode", max_length=8),
    since_id: int | None = Query(None, alias="sinceId", ge=1),
    until_id: int | None = Query(None, alias="untilId", ge=1),
    max_results: int = Query(DEFAULT_MAX_RESULTS, alias="maxResults", ge=1, le=MAX_RESULTS_LIMIT),
    has_relationship_expansion: bool = Query(False, alias="hasRelationshipExpansion"),
    exclude_contents: list[int] = Query([], alias="excludeContents"),
) -> FeedItemResponse:
    """Return the guest feed of a country, optionally for a known guest account."""
    viewer = ranker.users.get_account(account_id) if account_id is not None else None
    query = PaginationQuery(
        since_id=since_id,
        until_id=until_id,
        max_results=max_results,
        has_relationship_expansion=has_relationship_expansion,
    )
    return await ranker.get_guest_feed_items(
        query,
        viewer,
        exclude_contents,
        country_code=country_code,
    )


@router.post(
    "/members/{account_id}/items/{feed_item_id}/seen",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def mark_feed_item_seen(
    feed_item_id: int,
    viewer: ViewerDep,
    ranker: RankerDep,
    credential_id: str | None = Query(None, alias="credentialId", max_length=64),
) -> None:
    """Record that the viewer has seen a feed item."""
    await ranker.seen_feed_item(viewer, feed_item_id, credential_id)


@router.post(
    "/members/{account_id}/items/{feed_item_id}/off-screen",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def mark_feed_item_off_screen(
    feed_item_id: int,
    viewer: ViewerDep,
    ranker: RankerDep,
) -> None:
    """Record that the viewer scrolled past a feed item."""
    await ranker.off_screen_feed_item(viewer, feed_item_id)
