# tests/services/test_user_service.py
from __future__ import annotations

import pytest
from sqlalchemy.orm import Session

from castcle_feed.exceptions import AccountNotFoundError, UserNotFoundError
from castcle_feed.models import UserType
from castcle_feed.schemas import UserField
from castcle_feed.services.user_service import UserService


def test_get_account_raises_for_unknown_id(db_session: Session) -> None:
    with pytest.raises(AccountNotFoundError):
        UserService(db_session).get_account(999_999)


def test_user_from_account_ignores_pages(db_session: Session, make_account, make_user) -> None:
    account = make_account()
    make_user(account, type=UserType.PAGE)
    users = UserService(db_session)

    assert users.find_user_from_account_id(account.id) is None
    with pytest.raises(UserNotFoundError):
        users.get_user_from_account_id(account.id)


def test_follow_and_unfollow_maintain_counts(db_session: Session, viewer, make_user) -> None:
    _, user = viewer
    target = make_user()
    users = UserService(db_session)

    users.follow_user(user, target)
    users.follow_user(user, target)
    assert users.get_following_user_ids(user.id) == {target.id}
    assert (user.following_count, target.follower_count) == (1, 1)

    users.unfollow_user(user, target)
    assert users.get_following_user_ids(user.id) == set()
    assert (user.following_count, target.follower_count) == (0, 0)


def test_block_drops_follow_and_marks_both_edges(db_session: Session, viewer, make_user) -> None:
    _, user = viewer
    target = make_user()
    users = UserService(db_session)
    users.follow_user(user, target)

    users.block_user(user, target)

    assert users.get_following_user_ids(user.id) == set()
    assert users.get_blocked_user_ids(user.id) == {target.id}
    assert users.get_blocked_user_ids(target.id) == {user.id}
    assert target.follower_count == 0

    users.unblock_user(user, target)
    assert users.get_blocked_user_ids(user.id) == set()
    assert users.get_blocked_user_ids(target.id) == set()


def test_follow_requires_target(db_session: Session, viewer) -> None:
    _, user = viewer
    with pytest.raises(UserNotFoundError):
        UserService(db_session).follow_user(user, None)


class TestIncludesUsers:
    def test_relationship_flags_only_with_expansion(self, db_session: Session, viewer, make_user) -> None:
        account, user = viewer
        author = make_user()
        users = UserService(db_session)
        users.follow_user(user, author)

        plain = users.get_includes_users(account, [author])
        expanded = users.get_includes_users(account, [author], has_relationship_expansion=True)

        assert plain[0].followed is None
        assert (expanded[0].followed, expanded[0].blocked, expanded[0].blocking) == (True, False, False)

    def test_blocked_and_blocking_directions(self, db_session: Session, viewer, make_user) -> None:
        account, user = viewer
        blocked_author = make_user()
        blocking_author = make_user()
        users = UserService(db_session)
        users.block_user(user, blocked_author)
        users.block_user(blocking_author, user)

        responses = users.get_includes_users(
            account, [blocked_author, blocking_author], user_fields=[UserField.RELATIONSHIPS]
        )

        assert (responses[0].blocked, responses[0].blocking) == (True, False)
        assert (responses[1].blocked, responses[1].blocking) == (False, True)

    def test_casts_field_counts_published_contents(
        self, db_session: Session, viewer, make_user, make_content
    ) -> None:
        account, _ = viewer
        author = make_user()
        make_content(author)
        make_content(author)

        responses = UserService(db_session).get_includes_users(
            account, [author], user_fields=[UserField.CASTS]
        )

        assert responses[0].casts == 2

    def test_guest_viewer_gets_false_flags(self, db_session: Session, make_user) -> None:
        author = make_user()
        responses = UserService(db_session).get_includes_users(None, [author], True)
        assert (responses[0].followed, responses[0].blocked, responses[0].blocking) == (False, False, False)
