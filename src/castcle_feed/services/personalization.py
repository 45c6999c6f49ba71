"""Client for the external content personalization service.

The personalization service scores candidate contents for an account. Scores
are opaque floats where higher means more relevant. Callers treat any failure
as "no scores" and fall back to candidate ordering.
"""

from __future__ import annotations

import asyncio
import logging
import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Protocol

import httpx

from castcle_feed.core.settings import settings
from castcle_feed.exceptions import CastcleError

logger = logging.getLogger(__name__)

PERSONALIZE_PATH = "/v1/personalize"


class PersonalizationError(CastcleError):
    """Raised when the personalization service cannot produce scores."""


class ContentScorer(Protocol):
    """Anything able to score content identifiers for an account."""

    async def personalize_contents(
        self, account_id: str, content_ids: Sequence[str]
    ) -> dict[str, float]: ...


@dataclass(frozen=True)
class PersonalizationConfig:
    """Immutable configuration for personalization requests."""

    enabled: bool
    base_url: str | None
    timeout_seconds: float
    api_key: str | None


def load_personalization_config() -> PersonalizationConfig:
    """Build configuration object from global settings."""
    return PersonalizationConfig(
        enabled=bool(settings.personalization_enabled and settings.personalization_base_url),
        base_url=settings.personalization_base_url,
        timeout_seconds=float(settings.personalization_timeout_seconds),
        api_key=settings.personalization_api_key,
    )


def _parse_scores(body: Any) -> dict[str, float]:
    if isinstance(body, Mapping) and isinstance(body.get("result"), Mapping):
        body = body["result"]
    if not isinstance(body, Mapping):
        raise PersonalizationError("Personalization response is not a mapping")
    try:
        scores = {str(content_id): float(score) for content_id, score in body.items()}
    except (TypeError, ValueError) as exc:
        raise PersonalizationError(f"Invalid personalization score: {exc}") from exc
    # NaN and infinities cannot be ordered; treat those contents as unscored.
    return {content_id: score for content_id, score in scores.items() if math.isfinite(score)}


class PersonalizationClient:
    """HTTP client wrapper for the personalization service."""

    def __init__(
        self,
        config: PersonalizationConfig | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config or load_personalization_config()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._client_lock = asyncio.Lock()

    @property
    def enabled(self) -> bool:
        return self.config.enabled and bool(self.config.base_url)

    async def _ensure_client(self) -> httpx.AsyncClient:
        async with self._client_lock:
            if self._client is None:
                headers = {}
                if self.config.api_key:
                    headers["Authorization"] = f"Bearer {self.config.api_key}"
                self._client = httpx.AsyncClient(
                    base_url=self.config.base_url or "",
                    timeout=httpx.Timeout(self.config.timeout_seconds),
                    headers=headers,
                    transport=self._transport,
                )
        return self._client

    async def personalize_contents(
        self, account_id: str, content_ids: Sequence[str]
    ) -> dict[str, float]:
        """Return a content-ID to score mapping for ``account_id``.

        Raises:
            PersonalizationError: If the request fails or the body is malformed.
        """
        if not self.enabled or not content_ids:
            return {}

        client = await self._ensure_client()
        payload = {"accountId": account_id, "contents": list(content_ids)}
        try:
            response = await client.post(PERSONALIZE_PATH, json=payload)
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPError as exc:
            raise PersonalizationError(f"Personalization request failed: {exc}") from exc
        except ValueError as exc:
            raise PersonalizationError(f"Personalization response is not JSON: {exc}") from exc

        scores = _parse_scores(body)
        logger.debug(
            "Personalization scored %d of %d contents for account %s",
            len(scores),
            len(content_ids),
            account_id,
        )
        return scores

    async def close(self) -> None:
        """Close the underlying HTTP client if open."""
        async with self._client_lock:
            if self._client is not None:
                await self._client.aclose()
                self._client = None


class _PersonalizationClientSingleton:
    _instance: PersonalizationClient | None = None

    @classmethod
    def get_instance(cls) -> PersonalizationClient:
        if cls._instance is None:
            cls._instance = PersonalizationClient()
        return cls._instance


def get_personalization_client() -> PersonalizationClient:
    """Return a singleton personalization client instance."""
    return _PersonalizationClientSingleton.get_instance()
