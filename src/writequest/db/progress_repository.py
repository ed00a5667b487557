"""Repository functions for progress table.

One progress row per user. Mastery, completed-item lists, achievements and
history are JSON text columns.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

import structlog

from writequest.core.skills import SkillMastery
from writequest.db.database import get_db

logger = structlog.get_logger(__name__)


@dataclass
class ProgressRecord:
    """Progress record from database."""

    user_id: int
    skill_mastery: SkillMastery
    completed_exercises: list[str] = field(default_factory=list)
    completed_quests: list[str] = field(default_factory=list)
    unlocked_locations: list[str] = field(default_factory=list)
    level: int = 1
    currency: int = 0
    achievements: list[str] = field(default_factory=list)
    current_streak: int = 0
    longest_streak: int = 0
    last_writing_date: str | None = None
    daily_challenge_id: str | None = None
    daily_challenge_completed: bool = False
    progress_history: list[dict[str, Any]] = field(default_factory=list)
    id: int | None = None
    updated_at: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to camelCase dictionary for API responses."""
        return {
            "id": self.id,
            "userId": self.user_id,
            "skillMastery": self.skill_mastery.to_dict(),
            "completedExercises": list(self.completed_exercises),
            "completedQuests": list(self.completed_quests),
            "unlockedLocations": list(self.unlocked_locations),
            "level": self.level,
            "currency": self.currency,
            "achievements": list(self.achievements),
            "currentStreak": self.current_streak,
            "longestStreak": self.longest_streak,
            "lastWritingDate": self.last_writing_date,
            "dailyChallengeId": self.daily_challenge_id,
            "dailyChallengeCompleted": self.daily_challenge_completed,
            "progressHistory": list(self.progress_history),
            "updatedAt": self.updated_at,
        }


def insert_progress(progress: ProgressRecord) -> ProgressRecord:
    """Insert a progress row for a user.

    Raises:
        sqlite3.IntegrityError: If the user already has progress or doesn't exist
    """
    with get_db() as conn:
        conn.execute(
            """
            INSERT INTO progress (
                user_id, skill_mastery, completed_exercises, completed_quests,
                unlocked_locations, level, currency, achievements,
                current_streak, longest_streak, last_writing_date,
                daily_challenge_id, daily_challenge_completed, progress_history
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (progress.user_id, *_column_values(progress)),
        )
        row = conn.execute(
            "SELECT * FROM progress WHERE user_id = ?", (progress.user_id,)
        ).fetchone()

    logger.debug("progress.inserted", user_id=progress.user_id)
    return _row_to_record(row)


def get_progress_by_user_id(user_id: int) -> ProgressRecord | None:
    """Get a user's progress."""
    with get_db() as conn:
        row = conn.execute(
            "SELECT * FROM progress WHERE user_id = ?", (user_id,)
        ).fetchone()

    if row is None:
        return None

    return _row_to_record(row)


def save_progress(progress: ProgressRecord) -> ProgressRecord:
    """Write every progress column back.

    Raises:
        ValueError: If the user has no progress row
    """
    with get_db() as conn:
        cursor = conn.execute(
            """
            UPDATE progress SET
                skill_mastery = ?,
                completed_exercises = ?,
                completed_quests = ?,
                unlocked_locations = ?,
                level = ?,
                currency = ?,
                achievements = ?,
                current_streak = ?,
                longest_streak = ?,
                last_writing_date = ?,
                daily_challenge_id = ?,
                daily_challenge_completed = ?,
                progress_history = ?,
                updated_at = datetime('now')
            WHERE user_id = ?
            """,
            (*_column_values(progress), progress.user_id),
        )
        if cursor.rowcount == 0:
            raise ValueError(f"Progress not found for user: {progress.user_id}")
        row = conn.execute(
            "SELECT * FROM progress WHERE user_id = ?", (progress.user_id,)
        ).fetchone()

    logger.debug("progress.saved", user_id=progress.user_id)
    return _row_to_record(row)


def _column_values(progress: ProgressRecord) -> tuple:
    return (
        json.dumps(progress.skill_mastery.to_dict()),
        json.dumps(progress.completed_exercises),
        json.dumps(progress.completed_quests),
        json.dumps(progress.unlocked_locations),
        progress.level,
        progress.currency,
        json.dumps(progress.achievements),
        progress.current_streak,
        progress.longest_streak,
        progress.last_writing_date,
        progress.daily_challenge_id,
        int(progress.daily_challenge_completed),
        json.dumps(progress.progress_history),
    )


def _row_to_record(row) -> ProgressRecord:
    """Convert database row to ProgressRecord."""
    return ProgressRecord(
        id=row["id"],
        user_id=row["user_id"],
        skill_mastery=SkillMastery.from_dict(json.loads(row["skill_mastery"])),
        completed_exercises=json.loads(row["completed_exercises"]),
        completed_quests=json.loads(row["completed_quests"]),
        unlocked_locations=json.loads(row["unlocked_locations"]),
        level=row["level"],
        currency=row["currency"],
        achievements=json.loads(row["achievements"]),
        current_streak=row["current_streak"],
        longest_streak=row["longest_streak"],
        last_writing_date=row["last_writing_date"],
        daily_challenge_id=row["daily_challenge_id"],
        daily_challenge_completed=bool(row["daily_challenge_completed"]),
        progress_history=json.loads(row["progress_history"]),
        updated_at=row["updated_at"],
    )
