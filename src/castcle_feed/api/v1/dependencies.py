"""Shared API dependencies for feed routes."""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Path
from sqlalchemy.orm import Session

from castcle_feed.core.settings import load_feed_config
from castcle_feed.db.session import get_db
from castcle_feed.models import Account
from castcle_feed.services.feed_lock import FeedLock, build_feed_lock
from castcle_feed.services.personalization import get_personalization_client
from castcle_feed.services.ranker import RankerService
from castcle_feed.services.user_service import UserService

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


@lru_cache(maxsize=1)
def get_feed_lock() -> FeedLock:
    """Return the process-wide feed materialization lock."""
    return build_feed_lock()


def get_ranker_service(db: SessionDep) -> RankerService:
    """Build a ranker bound to the request's session."""
    return RankerService(
        db,
        get_personalization_client(),
        load_feed_config(),
        lock=get_feed_lock(),
    )


def get_viewer_account(
    account_id: Annotated[int, Path(ge=1, description="Viewer account identifier")],
    db: SessionDep,
) -> Account:
    """Resolve the viewer account; a missing account surfaces as 404."""
    return UserService(db).get_account(account_id)


RankerDep = Annotated[RankerService, Depends(get_ranker_service)]
ViewerDep = Annotated[Account, Depends(get_viewer_account)]
