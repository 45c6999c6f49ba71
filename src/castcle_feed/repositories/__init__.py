"""Repositories wrapping database access."""

from .feed_repo import FeedItemRepository, create_cursor_filter

__all__ = ["FeedItemRepository", "create_cursor_filter"]
