"""Per-viewer locks guarding feed materialization.

Concurrent refreshes of the same viewer's feed serialize on one of these
locks so that the second caller sees the rows inserted by the first.
"""

from __future__ import annotations

import asyncio
import logging
import weakref
from collections.abc import AsyncIterator
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import Protocol

from redis.asyncio import Redis

from castcle_feed.core.settings import settings

logger = logging.getLogger(__name__)

LOCK_KEY_PREFIX = "feed:materialize"


class FeedLock(Protocol):
    def hold(self, viewer_id: int) -> AbstractAsyncContextManager[None]: ...


class MemoryFeedLock:
    """In-process lock registry keyed by viewer."""

    def __init__(self) -> None:
        self._locks: weakref.WeakValueDictionary[int, asyncio.Lock] = weakref.WeakValueDictionary()

    def _lock_for(self, viewer_id: int) -> asyncio.Lock:
        lock = self._locks.get(viewer_id)
        if lock is None:
            lock = self._locks[viewer_id] = asyncio.Lock()
        return lock

    @asynccontextmanager
    async def hold(self, viewer_id: int) -> AsyncIterator[None]:
        lock = self._lock_for(viewer_id)
        async with lock:
            yield


class RedisFeedLock:
    """Lock shared by every service process through Redis."""

    def __init__(self, client: Redis, *, timeout: float = 10.0) -> None:
        self._redis = client
        self._timeout = timeout

    @asynccontextmanager
    async def hold(self, viewer_id: int) -> AsyncIterator[None]:
        lock = self._redis.lock(
            f"{LOCK_KEY_PREFIX}:{viewer_id}",
            timeout=self._timeout,
            blocking_timeout=self._timeout,
        )
        async with lock:
            yield


def build_feed_lock() -> MemoryFeedLock | RedisFeedLock:
    """Return the lock backend selected by configuration."""
    backend = settings.feed_lock_backend.lower()
    if backend == "redis":
        logger.info("Using Redis feed materialization lock at %s", settings.redis_url)
        return RedisFeedLock(
            Redis.from_url(settings.redis_url),
            timeout=settings.feed_lock_timeout_seconds,
        )
    if backend != "memory":
        raise ValueError(f"Unknown feed lock backend: {settings.feed_lock_backend}")
    return MemoryFeedLock()
