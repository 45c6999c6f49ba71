# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from datetime import datetime, timedelta
from itertools import count
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("PYTEST_RUNNING", "true")

from castcle_feed.core.settings import FeedConfig
from castcle_feed.db.session import Base
from castcle_feed.db.session import get_db as app_get_session
from castcle_feed.db.time import utcnow
from castcle_feed.main import app as fastapi_app
from castcle_feed.models import Account, Content, ContentType, User, UserType
from castcle_feed.services.media_signing import MediaUrlSigner

TEST_DB_URL = "sqlite://"
TEST_SIGNING_SECRET = "test-signing-secret"

_CAST_ID_COUNTER = count(1)


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    connection = engine.connect()
    transaction = connection.begin()
    SessionLocal = sessionmaker(
        bind=connection,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
        join_transaction_mode="create_savepoint",
    )
    session = SessionLocal()

    try:
        yield session
    finally:
        session.close()

        if transaction.is_active:
            transaction.rollback()
        connection.close()

        # Ensure each test sees a clean database even if commits occurred.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_session_dependency(app: FastAPI, db_session: Session) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def feed_config() -> FeedConfig:
    """Feed tuning with a one-hour refresh cycle and no decay cut-off surprises."""
    return FeedConfig(
        follow_feed_max=100,
        follow_feed_ratio=0.5,
        decay_days=7.0,
        duplicate_max=3,
        generation_seconds=3600,
        default_country="en",
    )


@pytest.fixture()
def signer() -> MediaUrlSigner:
    return MediaUrlSigner(secret=TEST_SIGNING_SECRET, ttl_seconds=600)


@pytest.fixture()
def make_account(db_session: Session) -> Callable[..., Account]:
    """Return a factory persisting accounts."""

    def _make(**overrides: Any) -> Account:
        values: dict[str, Any] = {"country_code": "th", "preferred_languages": []}
        values.update(overrides)
        account = Account(**values)
        db_session.add(account)
        db_session.flush()
        return account

    return _make


@pytest.fixture()
def make_user(db_session: Session, make_account: Callable[..., Account]) -> Callable[..., User]:
    """Return a factory persisting a person (or page) with its owning account."""

    def _make(account: Account | None = None, **overrides: Any) -> User:
        owner = account or make_account()
        number = next(_CAST_ID_COUNTER)
        values: dict[str, Any] = {
            "owner_account_id": owner.id,
            "type": UserType.PEOPLE,
            "cast_id": f"@caster{number}",
            "display_name": f"Caster {number}",
        }
        values.update(overrides)
        user = User(**values)
        db_session.add(user)
        db_session.flush()
        return user

    return _make


@pytest.fixture()
def make_content(db_session: Session) -> Callable[..., Content]:
    """Return a factory persisting published contents."""

    def _make(author: User, *, age: timedelta | None = None, **overrides: Any) -> Content:
        created_at: datetime = utcnow() - (age or timedelta(minutes=5))
        values: dict[str, Any] = {
            "author_id": author.id,
            "type": ContentType.SHORT,
            "message": f"cast by {author.cast_id}",
            "created_at": created_at,
            "updated_at": created_at,
        }
        values.update(overrides)
        content = Content(**values)
        db_session.add(content)
        db_session.flush()
        return content

    return _make


@pytest.fixture()
def viewer(make_account: Callable[..., Account], make_user: Callable[..., User]) -> tuple[Account, User]:
    """A member account together with its person."""
    account = make_account(country_code="th")
    user = make_user(account, display_name="Viewer")
    return account, user
