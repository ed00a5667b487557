"""Repository functions for daily_challenges table.

Timestamps are stored as ISO-8601 UTC text so they compare correctly as
strings.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

import structlog

from writequest.core.daily_challenge import ChallengeProposal, challenge_expiry
from writequest.db.database import get_db

logger = structlog.get_logger(__name__)


@dataclass
class ChallengeRecord:
    """Daily challenge record from database."""

    id: int
    challenge_date: str
    prompt: str
    title: str
    description: str
    word_minimum: int
    skill_focus: str
    difficulty: int
    expires_at: str | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "challengeDate": self.challenge_date,
            "prompt": self.prompt,
            "title": self.title,
            "description": self.description,
            "wordMinimum": self.word_minimum,
            "skillFocus": self.skill_focus,
            "difficulty": self.difficulty,
            "expiresAt": self.expires_at,
        }

    def is_expired(self, now: datetime | None = None) -> bool:
        """Whether the challenge is past its expiry time."""
        if self.expires_at is None:
            return False
        return datetime.fromisoformat(self.expires_at) < (now or _utcnow())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def insert_challenge(
    proposal: ChallengeProposal,
    created_at: datetime | None = None,
    expiry_hours: int = 24,
) -> ChallengeRecord:
    """Store a challenge that expires ``expiry_hours`` after creation."""
    created_at = created_at or _utcnow()
    expires_at = challenge_expiry(created_at, expiry_hours)

    with get_db() as conn:
        cursor = conn.execute(
            """
            INSERT INTO daily_challenges (
                challenge_date, prompt, title, description,
                word_minimum, skill_focus, difficulty, expires_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                created_at.isoformat(),
                proposal.prompt,
                proposal.title,
                proposal.description,
                proposal.word_minimum,
                proposal.skill_focus,
                proposal.difficulty,
                expires_at.isoformat(),
            ),
        )
        row = conn.execute(
            "SELECT * FROM daily_challenges WHERE id = ?", (cursor.lastrowid,)
        ).fetchone()

    logger.info("daily_challenges.inserted", challenge_id=row["id"], expires_at=row["expires_at"])
    return _row_to_record(row)


def get_current_challenge(now: datetime | None = None) -> ChallengeRecord | None:
    """Most recent challenge that has not expired."""
    now = now or _utcnow()
    with get_db() as conn:
        row = conn.execute(
            """
            SELECT * FROM daily_challenges
            WHERE expires_at IS NULL OR expires_at >= ?
            ORDER BY challenge_date DESC, id DESC
            LIMIT 1
            """,
            (now.isoformat(),),
        ).fetchone()

    if row is None:
        return None

    return _row_to_record(row)


def get_challenge_by_id(challenge_id: int) -> ChallengeRecord | None:
    """Get challenge by ID, expired or not."""
    with get_db() as conn:
        row = conn.execute(
            "SELECT * FROM daily_challenges WHERE id = ?", (challenge_id,)
        ).fetchone()

    if row is None:
        return None

    return _row_to_record(row)


def _row_to_record(row) -> ChallengeRecord:
    """Convert database row to ChallengeRecord."""
    return ChallengeRecord(
        id=row["id"],
        challenge_date=row["challenge_date"],
        prompt=row["prompt"],
        title=row["title"],
        description=row["description"],
        word_minimum=row["word_minimum"],
        skill_focus=row["skill_focus"],
        difficulty=row["difficulty"],
        expires_at=row["expires_at"],
    )
