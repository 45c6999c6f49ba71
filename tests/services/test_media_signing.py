# tests/services/test_media_signing.py
from __future__ import annotations

import time

from castcle_feed.services.media_signing import MediaUrlSigner


def test_signed_url_verifies() -> None:
    signer = MediaUrlSigner(secret="s3cret", ttl_seconds=60)
    signed = signer.sign("https://cdn.castcle.com/images/a.png?w=200")

    assert "w=200" in signed
    assert signer.verify(signed)


def test_token_is_bound_to_path() -> None:
    signer = MediaUrlSigner(secret="s3cret", ttl_seconds=60)
    signed = signer.sign("https://cdn.castcle.com/images/a.png")

    assert not signer.verify(signed.replace("/a.png", "/b.png"))


def test_expired_or_foreign_tokens_fail() -> None:
    signer = MediaUrlSigner(secret="s3cret", ttl_seconds=60)
    expired = signer.sign("https://cdn.castcle.com/a.png", now=int(time.time()) - 3600)
    foreign = MediaUrlSigner(secret="other", ttl_seconds=60).sign("https://cdn.castcle.com/a.png")

    assert not signer.verify(expired)
    assert not signer.verify(foreign)
    assert not signer.verify("https://cdn.castcle.com/a.png")


def test_resigning_replaces_previous_token() -> None:
    signer = MediaUrlSigner(secret="s3cret", ttl_seconds=60)
    twice = signer.sign(signer.sign("https://cdn.castcle.com/a.png"))

    assert twice.count("token=") == 1
