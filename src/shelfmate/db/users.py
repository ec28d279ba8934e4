# ABOUTME: Repository for user accounts and the follow/block edges between them.
# ABOUTME: Edge tables are keyed by ordered pair; constraint failures become conflict errors.

import sqlite3

from shelfmate.db.mapping import User, row_to_user
from shelfmate.errors import AlreadyBlockedError, AlreadyFollowingError


class UserRepository:
    """Typed access to the users, follows and blocks tables."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    # --- Accounts ---

    def create(self, external_uid: str, username: str, email: str) -> User:
        cursor = self._conn.execute(
            "INSERT INTO users (external_uid, username, email) VALUES (?, ?, ?)",
            (external_uid, username, email),
        )
        user = self.get(cursor.lastrowid)  # type: ignore[arg-type]
        assert user is not None
        return user

    def get(self, user_id: int) -> User | None:
        row = self._conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
        return row_to_user(row) if row else None

    def find_by_external_uid(self, external_uid: str) -> User | None:
        row = self._conn.execute(
            "SELECT * FROM users WHERE external_uid = ?", (external_uid,)
        ).fetchone()
        return row_to_user(row) if row else None

    def update(self, user_id: int, **fields: str) -> None:
        set_clause = ", ".join(f"{k} = ?" for k in fields)
        set_clause += ", updated_at = strftime('%Y-%m-%dT%H:%M:%S', 'now')"
        self._conn.execute(
            f"UPDATE users SET {set_clause} WHERE id = ?", [*fields.values(), user_id]
        )

    def exists(self, user_id: int) -> bool:
        row = self._conn.execute("SELECT 1 FROM users WHERE id = ?", (user_id,)).fetchone()
        return row is not None

    # --- Follows ---

    def is_following(self, follower_id: int, following_id: int) -> bool:
        row = self._conn.execute(
            "SELECT 1 FROM follows WHERE follower_id = ? AND following_id = ?",
            (follower_id, following_id),
        ).fetchone()
        return row is not None

    def add_follow(self, follower_id: int, following_id: int) -> None:
        """Insert a follow edge.

        Raises:
            AlreadyFollowingError: If the edge already exists.
        """
        try:
            self._conn.execute(
                "INSERT INTO follows (follower_id, following_id) VALUES (?, ?)",
                (follower_id, following_id),
            )
        except sqlite3.IntegrityError as exc:
            if "UNIQUE constraint failed" in str(exc):
                raise AlreadyFollowingError(follower_id, following_id) from exc
            raise

    def remove_follow(self, follower_id: int, following_id: int) -> bool:
        cursor = self._conn.execute(
            "DELETE FROM follows WHERE follower_id = ? AND following_id = ?",
            (follower_id, following_id),
        )
        return cursor.rowcount > 0

    def remove_follows_between(self, user_a: int, user_b: int) -> int:
        """Delete follow edges in both directions; returns how many were removed."""
        cursor = self._conn.execute(
            "DELETE FROM follows WHERE (follower_id = ? AND following_id = ?) "
            "OR (follower_id = ? AND following_id = ?)",
            (user_a, user_b, user_b, user_a),
        )
        return cursor.rowcount

    def followers(self, user_id: int) -> list[User]:
        cursor = self._conn.execute(
            "SELECT u.* FROM follows f JOIN users u ON u.id = f.follower_id "
            "WHERE f.following_id = ? ORDER BY f.created_at DESC, u.id",
            (user_id,),
        )
        return [row_to_user(row) for row in cursor.fetchall()]

    def following(self, user_id: int) -> list[User]:
        cursor = self._conn.execute(
            "SELECT u.* FROM follows f JOIN users u ON u.id = f.following_id "
            "WHERE f.follower_id = ? ORDER BY f.created_at DESC, u.id",
            (user_id,),
        )
        return [row_to_user(row) for row in cursor.fetchall()]

    def follow_counts(self, user_id: int) -> tuple[int, int]:
        """Return ``(followers, following)`` counts for a user."""
        followers = self._conn.execute(
            "SELECT COUNT(*) FROM follows WHERE following_id = ?", (user_id,)
        ).fetchone()[0]
        following = self._conn.execute(
            "SELECT COUNT(*) FROM follows WHERE follower_id = ?", (user_id,)
        ).fetchone()[0]
        return followers, following

    # --- Blocks ---

    def is_blocked(self, blocker_id: int, blocked_id: int) -> bool:
        row = self._conn.execute(
            "SELECT 1 FROM blocks WHERE blocker_id = ? AND blocked_id = ?",
            (blocker_id, blocked_id),
        ).fetchone()
        return row is not None

    def add_block(self, blocker_id: int, blocked_id: int) -> None:
        """Insert a block edge.

        Raises:
            AlreadyBlockedError: If the edge already exists.
        """
        try:
            self._conn.execute(
                "INSERT INTO blocks (blocker_id, blocked_id) VALUES (?, ?)",
                (blocker_id, blocked_id),
            )
        except sqlite3.IntegrityError as exc:
            if "UNIQUE constraint failed" in str(exc):
                raise AlreadyBlockedError(blocker_id, blocked_id) from exc
            raise

    def remove_block(self, blocker_id: int, blocked_id: int) -> bool:
        cursor = self._conn.execute(
            "DELETE FROM blocks WHERE blocker_id = ? AND blocked_id = ?",
            (blocker_id, blocked_id),
        )
        return cursor.rowcount > 0
