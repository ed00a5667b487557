"""Repository functions for guardian_links table.

A guardian is a teacher or parent account linked to one or more students.
"""

from __future__ import annotations

from typing import Literal

import structlog

from writequest.db.database import get_db
from writequest.db.users_repository import UserRecord, _row_to_record

logger = structlog.get_logger(__name__)

Relation = Literal["teacher", "parent"]


def link_student(guardian_id: int, student_id: int, relation: Relation) -> bool:
    """Link a student to a guardian.

    Returns:
        True if a new link was created, False if it already existed
    """
    with get_db() as conn:
        cursor = conn.execute(
            """
            INSERT OR IGNORE INTO guardian_links (guardian_id, student_id, relation)
            VALUES (?, ?, ?)
            """,
            (guardian_id, student_id, relation),
        )

    created = cursor.rowcount > 0
    if created:
        logger.info("links.created", guardian_id=guardian_id, student_id=student_id, relation=relation)
    return created


def unlink_student(guardian_id: int, student_id: int, relation: Relation) -> bool:
    """Remove a link.

    Returns:
        True if deleted, False if there was no such link
    """
    with get_db() as conn:
        cursor = conn.execute(
            """
            DELETE FROM guardian_links
            WHERE guardian_id = ? AND student_id = ? AND relation = ?
            """,
            (guardian_id, student_id, relation),
        )

    deleted = cursor.rowcount > 0
    if deleted:
        logger.info("links.deleted", guardian_id=guardian_id, student_id=student_id, relation=relation)
    return deleted


def is_linked(guardian_id: int, student_id: int, relation: Relation) -> bool:
    """Check whether the guardian may see the student's work."""
    with get_db() as conn:
        row = conn.execute(
            """
            SELECT 1 FROM guardian_links
            WHERE guardian_id = ? AND student_id = ? AND relation = ?
            """,
            (guardian_id, student_id, relation),
        ).fetchone()

    return row is not None


def get_students_for_guardian(guardian_id: int, relation: Relation) -> list[UserRecord]:
    """Students linked to a guardian, ordered by display name."""
    with get_db() as conn:
        rows = conn.execute(
            """
            SELECT users.* FROM users
            JOIN guardian_links ON guardian_links.student_id = users.id
            WHERE guardian_links.guardian_id = ? AND guardian_links.relation = ?
            ORDER BY users.display_name, users.id
            """,
            (guardian_id, relation),
        ).fetchall()

    return [_row_to_record(row) for row in rows]
