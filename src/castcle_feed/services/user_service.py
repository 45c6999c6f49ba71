"""User lookups, relationship edges and author enrichment."""
from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from sqlalchemy import and_, func, or_, select
from sqlalchemy.orm import Session

from castcle_feed.exceptions import AccountNotFoundError, UserNotFoundError
from castcle_feed.models import (
    Account,
    Content,
    EntityVisibility,
    Relationship,
    User,
    UserType,
)
from castcle_feed.schemas import UserField, UserResponse
from castcle_feed.services.includes import to_author_response

logger = logging.getLogger(__name__)


class UserService:
    """Service wrapping user and relationship access for one session."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get_account(self, account_id: int) -> Account:
        account = self.session.get(Account, account_id)
        if account is None:
            raise AccountNotFoundError(account_id)
        return account

    def get_user(self, user_id: int) -> User:
        user = self.session.get(User, user_id)
        if user is None or user.visibility != EntityVisibility.PUBLISH:
            raise UserNotFoundError(user_id)
        return user

    def find_user_from_account_id(self, account_id: int) -> User | None:
        """Return the people-type user owned by an account, if any."""
        stmt = (
            select(User)
            .where(
                User.owner_account_id == account_id,
                User.type == UserType.PEOPLE,
                User.visibility == EntityVisibility.PUBLISH,
            )
            .order_by(User.id.asc())
            .limit(1)
        )
        return self.session.scalars(stmt).first()

    def get_user_from_account_id(self, account_id: int) -> User:
        """Return the people-type user owned by an account.

        Raises:
            UserNotFoundError: If the account owns no published person.
        """
        user = self.find_user_from_account_id(account_id)
        if user is None:
            raise UserNotFoundError(f"account:{account_id}")
        return user

    def get_relationships_between(
        self, viewer_user_id: int, user_ids: Sequence[int]
    ) -> list[Relationship]:
        """Return published edges in both directions between a viewer and users."""
        if not user_ids:
            return []
        stmt = select(Relationship).where(
            or_(
                and_(
                    Relationship.user_id == viewer_user_id,
                    Relationship.followed_user_id.in_(user_ids),
                ),
                and_(
                    Relationship.user_id.in_(user_ids),
                    Relationship.followed_user_id == viewer_user_id,
                ),
            ),
            Relationship.visibility == EntityVisibility.PUBLISH,
        )
        return list(self.session.scalars(stmt))

    def _count_casts(self, user_ids: Sequence[int]) -> dict[int, int]:
        stmt = (
            select(Content.author_id, func.count(Content.id))
            .where(
                Content.author_id.in_(user_ids),
                Content.visibility == EntityVisibility.PUBLISH,
            )
            .group_by(Content.author_id)
        )
        return {author_id: total for author_id, total in self.session.execute(stmt)}

    def get_includes_users(
        self,
        viewer: Account | None,
        users: Iterable[User],
        has_relationship_expansion: bool = False,
        user_fields: Sequence[UserField] | None = None,
    ) -> list[UserResponse]:
        """Convert authors to responses, optionally with viewer relationship flags.

        ``blocked`` means the viewer blocks the author, ``blocking`` means the
        author blocks the viewer and ``followed`` means the viewer follows the
        author. Relationship rows are only read when expansion is requested.
        """
        users = list(users)
        responses = [to_author_response(user) for user in users]
        user_ids = [user.id for user in users]
        fields = set(user_fields or ())

        if UserField.CASTS in fields and user_ids:
            casts = self._count_casts(user_ids)
            for response, user in zip(responses, users):
                response.casts = casts.get(user.id, 0)

        if not (has_relationship_expansion or UserField.RELATIONSHIPS in fields):
            return responses

        viewer_user = self.find_user_from_account_id(viewer.id) if viewer else None
        relationships = (
            self.get_relationships_between(viewer_user.id, user_ids) if viewer_user else []
        )
        outgoing: dict[int, Relationship] = {}
        incoming: dict[int, Relationship] = {}
        if viewer_user is not None:
            for relationship in relationships:
                if relationship.user_id == viewer_user.id:
                    outgoing[relationship.followed_user_id] = relationship
                else:
                    incoming[relationship.user_id] = relationship

        for response, user in zip(responses, users):
            getter = outgoing.get(user.id)
            target = incoming.get(user.id)
            response.blocked = bool(getter and getter.blocking)
            response.blocking = bool(target and target.blocking)
            response.followed = bool(getter and getter.following)
        return responses

    def get_following_user_ids(self, user_id: int) -> set[int]:
        stmt = select(Relationship.followed_user_id).where(
            Relationship.user_id == user_id,
            Relationship.following.is_(True),
            Relationship.visibility == EntityVisibility.PUBLISH,
        )
        return set(self.session.scalars(stmt))

    def get_blocked_user_ids(self, user_id: int) -> set[int]:
        """Return users the given user blocks or is blocked by."""
        stmt = select(Relationship.followed_user_id).where(
            Relationship.user_id == user_id,
            or_(Relationship.blocking.is_(True), Relationship.blocked.is_(True)),
        )
        return set(self.session.scalars(stmt))

    # --- Relationship writes ---------------------------------------------------------
    def _upsert_relationship(self, user_id: int, followed_user_id: int, **flags: bool) -> Relationship:
        """Insert the edge if absent, else update the given flags in place."""
        relationship = self.session.scalars(
            select(Relationship).where(
                Relationship.user_id == user_id,
                Relationship.followed_user_id == followed_user_id,
            )
        ).first()
        if relationship is None:
            relationship = Relationship(
                user_id=user_id,
                followed_user_id=followed_user_id,
                following=False,
                blocking=False,
                blocked=False,
                visibility=EntityVisibility.PUBLISH,
            )
            self.session.add(relationship)
        for name, value in flags.items():
            setattr(relationship, name, value)
        self.session.flush()
        return relationship

    def follow_user(self, user: User, target: User | None) -> Relationship:
        if target is None:
            raise UserNotFoundError("target")
        existing = self.session.scalars(
            select(Relationship.following).where(
                Relationship.user_id == user.id,
                Relationship.followed_user_id == target.id,
            )
        ).first()
        relationship = self._upsert_relationship(user.id, target.id, following=True)
        if not existing:
            user.following_count += 1
            target.follower_count += 1
            self.session.flush()
        return relationship

    def unfollow_user(self, user: User, target: User | None) -> None:
        if target is None:
            raise UserNotFoundError("target")
        relationship = self.session.scalars(
            select(Relationship).where(
                Relationship.user_id == user.id,
                Relationship.followed_user_id == target.id,
                Relationship.following.is_(True),
            )
        ).first()
        if relationship is None:
            return
        relationship.following = False
        user.following_count = max(0, user.following_count - 1)
        target.follower_count = max(0, target.follower_count - 1)
        self.session.flush()

    def block_user(self, user: User, target: User | None) -> None:
        """Block ``target``; any follow edge from ``user`` is dropped."""
        if target is None:
            raise UserNotFoundError("target")
        was_following = target.id in self.get_following_user_ids(user.id)
        self._upsert_relationship(user.id, target.id, blocking=True, following=False)
        self._upsert_relationship(target.id, user.id, blocked=True)
        if was_following:
            user.following_count = max(0, user.following_count - 1)
            target.follower_count = max(0, target.follower_count - 1)
            self.session.flush()
        logger.info("User %s blocked user %s", user.id, target.id)

    def unblock_user(self, user: User, target: User | None) -> None:
        if target is None:
            raise UserNotFoundError("target")
        self._upsert_relationship(user.id, target.id, blocking=False)
        self._upsert_relationship(target.id, user.id, blocked=False)
