# tests/services/test_feed_lock.py
from __future__ import annotations

import asyncio

import pytest

from castcle_feed.core.settings import settings
from castcle_feed.services.feed_lock import MemoryFeedLock, RedisFeedLock, build_feed_lock


@pytest.mark.asyncio
async def test_memory_lock_serializes_same_viewer() -> None:
    lock = MemoryFeedLock()
    events: list[str] = []

    async def worker(name: str) -> None:
        async with lock.hold(1):
            events.append(f"{name}:enter")
            await asyncio.sleep(0.01)
            events.append(f"{name}:exit")

    await asyncio.gather(worker("a"), worker("b"))

    assert events == ["a:enter", "a:exit", "b:enter", "b:exit"]


@pytest.mark.asyncio
async def test_memory_lock_does_not_block_other_viewers() -> None:
    lock = MemoryFeedLock()
    async with lock.hold(1):
        await asyncio.wait_for(_enter(lock, 2), timeout=1)


async def _enter(lock: MemoryFeedLock, viewer_id: int) -> None:
    async with lock.hold(viewer_id):
        pass


def test_build_feed_lock_selects_backend(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(settings, "feed_lock_backend", "memory")
    assert isinstance(build_feed_lock(), MemoryFeedLock)

    monkeypatch.setattr(settings, "feed_lock_backend", "redis")
    assert isinstance(build_feed_lock(), RedisFeedLock)


def test_build_feed_lock_rejects_unknown_backend(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(settings, "feed_lock_backend", "zookeeper")
    with pytest.raises(ValueError):
        build_feed_lock()
