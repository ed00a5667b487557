"""Repository functions for exercise_attempts table."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

import structlog

from writequest.db.database import get_db

logger = structlog.get_logger(__name__)


@dataclass
class AttemptRecord:
    """Exercise attempt record from database."""

    id: int
    user_id: int
    exercise_id: str
    is_correct: bool
    answers: dict[str, Any]
    attempted_at: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "userId": self.user_id,
            "exerciseId": self.exercise_id,
            "isCorrect": self.is_correct,
            "answers": self.answers,
            "attemptedAt": self.attempted_at,
        }


def insert_attempt(
    user_id: int,
    exercise_id: str,
    is_correct: bool,
    answers: dict[str, Any],
) -> AttemptRecord:
    """Store a graded attempt."""
    with get_db() as conn:
        cursor = conn.execute(
            """
            INSERT INTO exercise_attempts (user_id, exercise_id, is_correct, answers)
            VALUES (?, ?, ?, ?)
            """,
            (user_id, exercise_id, int(is_correct), json.dumps(answers)),
        )
        row = conn.execute(
            "SELECT * FROM exercise_attempts WHERE id = ?", (cursor.lastrowid,)
        ).fetchone()

    logger.debug("attempts.inserted", user_id=user_id, exercise_id=exercise_id, is_correct=is_correct)
    return _row_to_record(row)


def get_attempts_by_user(user_id: int) -> list[AttemptRecord]:
    """All attempts by a user, newest first."""
    with get_db() as conn:
        rows = conn.execute(
            "SELECT * FROM exercise_attempts WHERE user_id = ? ORDER BY id DESC",
            (user_id,),
        ).fetchall()

    return [_row_to_record(row) for row in rows]


def _row_to_record(row) -> AttemptRecord:
    """Convert database row to AttemptRecord."""
    return AttemptRecord(
        id=row["id"],
        user_id=row["user_id"],
        exercise_id=row["exercise_id"],
        is_correct=bool(row["is_correct"]),
        answers=json.loads(row["answers"]),
        attempted_at=row["attempted_at"],
    )
