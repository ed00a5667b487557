"""Repository functions for users table."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

import structlog

from writequest.db.database import get_db

logger = structlog.get_logger(__name__)

Role = Literal["student", "teacher", "parent", "admin"]

# Columns a user may change through their profile
PROFILE_FIELDS = ("display_name", "email", "age", "grade", "avatar_url")


@dataclass
class UserRecord:
    """User record from database."""

    id: int
    username: str
    password: str
    display_name: str
    email: str | None
    age: int
    grade: int
    avatar_url: str
    role: Role
    created_at: str

    def to_dict(self) -> dict[str, Any]:
        """Public view of the user (never includes the password hash)."""
        return {
            "id": self.id,
            "username": self.username,
            "displayName": self.display_name,
            "email": self.email,
            "age": self.age,
            "grade": self.grade,
            "avatarUrl": self.avatar_url,
            "role": self.role,
            "createdAt": self.created_at,
        }


def create_user(
    username: str,
    password: str,
    display_name: str,
    role: Role = "student",
    email: str | None = None,
    age: int = 0,
    grade: int = 0,
    avatar_url: str = "",
) -> UserRecord:
    """Insert a new user.

    Args:
        username: Unique login name
        password: Already-hashed password
        display_name: Name shown in dashboards
        role: student, teacher, parent or admin

    Returns:
        The stored UserRecord

    Raises:
        sqlite3.IntegrityError: If the username is taken
    """
    with get_db() as conn:
        cursor = conn.execute(
            """
            INSERT INTO users (
                username, password, display_name, email, age, grade, avatar_url, role
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (username, password, display_name, email, age, grade, avatar_url, role),
        )
        user_id = cursor.lastrowid
        row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()

    logger.debug("users.inserted", user_id=user_id, role=role)
    return _row_to_record(row)


def get_user_by_id(user_id: int) -> UserRecord | None:
    """Get user by ID."""
    with get_db() as conn:
        row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()

    if row is None:
        return None

    return _row_to_record(row)


def get_user_by_username(username: str) -> UserRecord | None:
    """Get user by username (case-sensitive)."""
    with get_db() as conn:
        row = conn.execute(
            "SELECT * FROM users WHERE username = ?", (username,)
        ).fetchone()

    if row is None:
        return None

    return _row_to_record(row)


def update_user_profile(user_id: int, **fields: Any) -> UserRecord:
    """Update profile columns.

    Only keys in PROFILE_FIELDS are written; None values are skipped.

    Raises:
        ValueError: If the user doesn't exist
    """
    updates = {k: v for k, v in fields.items() if k in PROFILE_FIELDS and v is not None}

    with get_db() as conn:
        if updates:
            assignments = ", ".join(f"{column} = ?" for column in updates)
            conn.execute(
                f"UPDATE users SET {assignments} WHERE id = ?",
                (*updates.values(), user_id),
            )
        row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()

    if row is None:
        raise ValueError(f"User not found: {user_id}")

    logger.debug("users.profile_updated", user_id=user_id, fields=sorted(updates))
    return _row_to_record(row)


def update_user_password(user_id: int, password: str) -> None:
    """Replace a user's password hash.

    Raises:
        ValueError: If the user doesn't exist
    """
    with get_db() as conn:
        cursor = conn.execute(
            "UPDATE users SET password = ? WHERE id = ?", (password, user_id)
        )
        if cursor.rowcount == 0:
            raise ValueError(f"User not found: {user_id}")

    logger.debug("users.password_updated", user_id=user_id)


def _row_to_record(row) -> UserRecord:
    """Convert database row to UserRecord."""
    return UserRecord(
        id=row["id"],
        username=row["username"],
        password=row["password"],
        display_name=row["display_name"],
        email=row["email"],
        age=row["age"],
        grade=row["grade"],
        avatar_url=row["avatar_url"],
        role=row["role"],
        created_at=row["created_at"],
    )
