"""Shared Pydantic schemas for common API elements."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

DEFAULT_MAX_RESULTS = 25
MAX_RESULTS_LIMIT = 100


class CamelModel(BaseModel):
    """Base model exchanging camelCase keys with clients."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PaginationQuery(CamelModel):
    """Cursor pagination parameters.

    ``since_id`` and ``until_id`` bound the underlying collection's own
    monotonic identifiers.
    """

    since_id: int | None = Field(None, ge=1)
    until_id: int | None = Field(None, ge=1)
    max_results: int = Field(DEFAULT_MAX_RESULTS, ge=1, le=MAX_RESULTS_LIMIT)
    has_relationship_expansion: bool = False

    @property
    def has_cursor(self) -> bool:
        return self.since_id is not None or self.until_id is not None

    def swapped(self) -> PaginationQuery:
        """Return a copy with the since/until bounds exchanged."""
        return self.model_copy(update={"since_id": self.until_id, "until_id": self.since_id})


class Meta(CamelModel):
    """Page boundaries reported alongside list payloads."""

    result_count: int = 0
    newest_id: str | None = None
    oldest_id: str | None = None
