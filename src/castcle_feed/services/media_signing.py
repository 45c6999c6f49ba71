"""Viewer-authorized media URLs.

Media links embedded in content payloads are handed out with a short-lived
token so that the media edge can reject hot-linked or expired URLs.
"""

from __future__ import annotations

import time
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from jose import JWTError, jwt

from castcle_feed.core.settings import settings

TOKEN_PARAM = "token"
SIGNING_ALGORITHM = "HS256"


class MediaUrlSigner:
    """Append an expiring HS256 token to media URLs."""

    def __init__(self, secret: str | None = None, ttl_seconds: int | None = None) -> None:
        self._secret = secret or settings.media_signing_secret
        self._ttl = settings.media_url_ttl_seconds if ttl_seconds is None else ttl_seconds

    def sign(self, url: str, *, now: int | None = None) -> str:
        """Return ``url`` with a token bound to its path."""
        issued = int(time.time()) if now is None else now
        parts = urlsplit(url)
        token = jwt.encode(
            {"path": parts.path, "iat": issued, "exp": issued + max(1, self._ttl)},
            self._secret,
            algorithm=SIGNING_ALGORITHM,
        )
        query = [(k, v) for k, v in parse_qsl(parts.query) if k != TOKEN_PARAM]
        query.append((TOKEN_PARAM, token))
        return urlunsplit(parts._replace(query=urlencode(query)))

    def verify(self, url: str) -> bool:
        """Return True if ``url`` carries a valid, unexpired token for its path."""
        parts = urlsplit(url)
        token = dict(parse_qsl(parts.query)).get(TOKEN_PARAM)
        if not token:
            return False
        try:
            claims = jwt.decode(token, self._secret, algorithms=[SIGNING_ALGORITHM])
        except JWTError:
            return False
        return claims.get("path") == parts.path
