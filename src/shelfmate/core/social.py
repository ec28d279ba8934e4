# ABOUTME: Social graph manager: user accounts plus follow and block edges between them.
# ABOUTME: Blocking severs follows both ways in the same transaction that records the block.

import logging
import sqlite3

from shelfmate.db.connection import transaction
from shelfmate.db.library import LibraryRepository
from shelfmate.db.mapping import User, UserStats
from shelfmate.db.shelves import ShelfRepository
from shelfmate.db.users import UserRepository
from shelfmate.errors import (
    AlreadyBlockedError,
    AlreadyFollowingError,
    BlockedByTargetError,
    NotBlockedError,
    NotFollowingError,
    SelfBlockError,
    SelfFollowError,
    UserNotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)

MAX_USERNAME_LENGTH = 50


class SocialGraphManager:
    """Accounts, follows and blocks."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn
        self._users = UserRepository(conn)
        self._entries = LibraryRepository(conn)
        self._shelves = ShelfRepository(conn)

    # --- Accounts ---

    def find_or_create_user(
        self, external_uid: str, email: str, username: str | None = None
    ) -> User:
        """Return the account for an identity-provider uid, creating it on first sight.

        The username defaults to the local part of the email address.
        """
        external_uid = external_uid.strip()
        email = email.strip()
        if not external_uid:
            raise ValidationError("external uid must not be blank")
        if not email:
            raise ValidationError("email must not be blank")

        with transaction(self._conn):
            user = self._users.find_by_external_uid(external_uid)
            if user is not None:
                return user
            name = _clean_username(username or email.split("@", 1)[0])
            user = self._users.create(external_uid, name, email)
        logger.info("Created user %d for %s", user.id, external_uid)
        return user

    def get_user(self, user_id: int) -> User:
        user = self._users.get(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    def rename_user(self, user_id: int, username: str) -> User:
        username = _clean_username(username)
        with transaction(self._conn):
            self.get_user(user_id)
            self._users.update(user_id, username=username)
        return self.get_user(user_id)

    def user_stats(self, user_id: int) -> UserStats:
        self.get_user(user_id)
        total, read = self._entries.count_for_user(user_id)
        shelves, public_shelves = self._shelves.count_for_user(user_id)
        followers, following = self._users.follow_counts(user_id)
        return UserStats(
            total_books=total,
            read_books=read,
            unread_books=total - read,
            shelves=shelves,
            public_shelves=public_shelves,
            followers=followers,
            following=following,
        )

    # --- Follows ---

    def follow(self, follower_id: int, target_id: int) -> None:
        """Make ``follower_id`` follow ``target_id``.

        A target that has blocked the follower cannot be followed. The block
        check and the insert share one write transaction, so a concurrent
        block either lands first (and this fails) or removes the new edge.

        Raises:
            SelfFollowError, UserNotFoundError, BlockedByTargetError,
            AlreadyFollowingError.
        """
        if follower_id == target_id:
            raise SelfFollowError()
        with transaction(self._conn):
            self._require_users(follower_id, target_id)
            if self._users.is_blocked(target_id, follower_id):
                raise BlockedByTargetError(target_id)
            if self._users.is_following(follower_id, target_id):
                raise AlreadyFollowingError(follower_id, target_id)
            self._users.add_follow(follower_id, target_id)
        logger.info("User %d now follows user %d", follower_id, target_id)

    def unfollow(self, follower_id: int, target_id: int) -> None:
        with transaction(self._conn):
            if not self._users.remove_follow(follower_id, target_id):
                raise NotFollowingError(follower_id, target_id)

    def is_following(self, follower_id: int, target_id: int) -> bool:
        return self._users.is_following(follower_id, target_id)

    def followers(self, user_id: int) -> list[User]:
        self.get_user(user_id)
        return self._users.followers(user_id)

    def following(self, user_id: int) -> list[User]:
        self.get_user(user_id)
        return self._users.following(user_id)

    # --- Blocks ---

    def block(self, blocker_id: int, target_id: int) -> None:
        """Block ``target_id`` and drop any follow between the two users.

        Raises:
            SelfBlockError, UserNotFoundError, AlreadyBlockedError.
        """
        if blocker_id == target_id:
            raise SelfBlockError()
        with transaction(self._conn):
            self._require_users(blocker_id, target_id)
            if self._users.is_blocked(blocker_id, target_id):
                raise AlreadyBlockedError(blocker_id, target_id)
            removed = self._users.remove_follows_between(blocker_id, target_id)
            self._users.add_block(blocker_id, target_id)
        logger.info(
            "User %d blocked user %d (%d follow edges removed)", blocker_id, target_id, removed
        )

    def unblock(self, blocker_id: int, target_id: int) -> None:
        with transaction(self._conn):
            if not self._users.remove_block(blocker_id, target_id):
                raise NotBlockedError(blocker_id, target_id)

    def is_blocked(self, blocker_id: int, target_id: int) -> bool:
        return self._users.is_blocked(blocker_id, target_id)

    def _require_users(self, *user_ids: int) -> None:
        for user_id in user_ids:
            if not self._users.exists(user_id):
                raise UserNotFoundError(user_id)


def _clean_username(username: str) -> str:
    cleaned = username.strip()
    if not cleaned:
        raise ValidationError("username must not be blank")
    if len(cleaned) > MAX_USERNAME_LENGTH:
        raise ValidationError(f"username must be at most {MAX_USERNAME_LENGTH} characters")
    return cleaned
