# tests/services/test_personalization.py
from __future__ import annotations

import json

import httpx
import pytest

from castcle_feed.services.personalization import (
    PERSONALIZE_PATH,
    PersonalizationClient,
    PersonalizationConfig,
    PersonalizationError,
)


def _config(**overrides) -> PersonalizationConfig:
    values = {
        "enabled": True,
        "base_url": "http://personalize.test",
        "timeout_seconds": 1.0,
        "api_key": "secret-key",
    }
    values.update(overrides)
    return PersonalizationConfig(**values)


@pytest.mark.asyncio
async def test_personalize_contents_posts_candidates_and_parses_result() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"result": {"1": 0.25, "2": 3}})

    client = PersonalizationClient(_config(), transport=httpx.MockTransport(handler))
    try:
        scores = await client.personalize_contents("42", ["1", "2"])
    finally:
        await client.close()

    assert scores == {"1": 0.25, "2": 3.0}
    request = seen[0]
    assert request.url.path == PERSONALIZE_PATH
    assert request.headers["Authorization"] == "Bearer secret-key"
    assert json.loads(request.content) == {"accountId": "42", "contents": ["1", "2"]}


@pytest.mark.asyncio
async def test_bare_mapping_body_is_accepted() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"7": 1.5}))
    client = PersonalizationClient(_config(), transport=transport)

    assert await client.personalize_contents("1", ["7"]) == {"7": 1.5}
    await client.close()


@pytest.mark.asyncio
async def test_disabled_client_returns_no_scores_without_calling() -> None:
    def handler(request: httpx.Request) -> httpx.Response:  # pragma: no cover - must not run
        raise AssertionError("personalization service was called")

    client = PersonalizationClient(_config(enabled=False), transport=httpx.MockTransport(handler))

    assert client.enabled is False
    assert await client.personalize_contents("1", ["1"]) == {}


@pytest.mark.asyncio
async def test_empty_candidates_skip_the_request() -> None:
    client = PersonalizationClient(_config(), transport=httpx.MockTransport(lambda r: httpx.Response(500)))
    assert await client.personalize_contents("1", []) == {}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(503, json={"message": "unavailable"}),
        httpx.Response(200, content=b"not json"),
        httpx.Response(200, json=["1", "2"]),
        httpx.Response(200, json={"result": {"1": "high"}}),
    ],
)
async def test_failures_raise_personalization_error(response: httpx.Response) -> None:
    client = PersonalizationClient(_config(), transport=httpx.MockTransport(lambda request: response))
    try:
        with pytest.raises(PersonalizationError):
            await client.personalize_contents("1", ["1"])
    finally:
        await client.close()


@pytest.mark.asyncio
async def test_non_finite_scores_are_left_unscored() -> None:
    body = b'{"result": {"1": NaN, "2": Infinity, "3": -Infinity, "4": 0.5}}'
    transport = httpx.MockTransport(lambda request: httpx.Response(200, content=body))
    client = PersonalizationClient(_config(), transport=transport)
    try:
        scores = await client.personalize_contents("1", ["1", "2", "3", "4"])
    finally:
        await client.close()

    assert scores == {"4": 0.5}
