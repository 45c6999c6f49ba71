"""Exceptions raised by the feed services."""

from __future__ import annotations


class CastcleError(RuntimeError):
    """Base exception for feed service failures."""


class NotFoundError(CastcleError, LookupError):
    """Raised when a referenced entity does not exist."""

    entity = "Entity"

    def __init__(self, identifier: object) -> None:
        self.identifier = identifier
        super().__init__(f"{self.entity} not found: {identifier}")


class AccountNotFoundError(NotFoundError):
    entity = "Account"


class UserNotFoundError(NotFoundError):
    entity = "User"


class ContentNotFoundError(NotFoundError):
    entity = "Content"


class FeedItemNotFoundError(NotFoundError):
    entity = "Feed item"
