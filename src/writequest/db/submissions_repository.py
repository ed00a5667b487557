"""Repository functions for writing_submissions table.

Submission lifecycle: draft -> submitted -> reviewed -> approved. Drafts
are kept one per (user, quest) and promoted in place when submitted.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Literal

import structlog

from writequest.db.database import get_db

logger = structlog.get_logger(__name__)

SubmissionStatus = Literal["draft", "submitted", "reviewed", "approved"]


@dataclass
class SubmissionRecord:
    """Writing submission record from database."""

    id: int
    user_id: int
    quest_id: str
    title: str
    content: str
    feedback: str
    ai_feedback: dict[str, Any] | None
    status: SubmissionStatus
    submitted_at: str
    skills_assessed: dict[str, Any] | None
    suggested_exercises: list[str] | None

    def to_dict(self) -> dict[str, Any]:
        """Convert to camelCase dictionary for API responses."""
        return {
            "id": self.id,
            "userId": self.user_id,
            "questId": self.quest_id,
            "title": self.title,
            "content": self.content,
            "feedback": self.feedback,
            "aiFeedback": self.ai_feedback,
            "status": self.status,
            "submittedAt": self.submitted_at,
            "skillsAssessed": self.skills_assessed,
            "suggestedExercises": self.suggested_exercises,
        }


def insert_submission(
    user_id: int,
    quest_id: str,
    title: str,
    content: str,
    status: SubmissionStatus = "submitted",
) -> SubmissionRecord:
    """Insert a submission."""
    with get_db() as conn:
        cursor = conn.execute(
            """
            INSERT INTO writing_submissions (user_id, quest_id, title, content, status)
            VALUES (?, ?, ?, ?, ?)
            """,
            (user_id, quest_id, title, content, status),
        )
        row = conn.execute(
            "SELECT * FROM writing_submissions WHERE id = ?", (cursor.lastrowid,)
        ).fetchone()

    logger.debug("submissions.inserted", submission_id=row["id"], user_id=user_id, status=status)
    return _row_to_record(row)


def get_submission_by_id(submission_id: int) -> SubmissionRecord | None:
    """Get submission by ID."""
    with get_db() as conn:
        row = conn.execute(
            "SELECT * FROM writing_submissions WHERE id = ?", (submission_id,)
        ).fetchone()

    if row is None:
        return None

    return _row_to_record(row)


def get_submissions_by_user(
    user_id: int,
    include_drafts: bool = True,
) -> list[SubmissionRecord]:
    """A user's submissions, newest first."""
    query = "SELECT * FROM writing_submissions WHERE user_id = ?"
    if not include_drafts:
        query += " AND status != 'draft'"
    query += " ORDER BY submitted_at DESC, id DESC"

    with get_db() as conn:
        rows = conn.execute(query, (user_id,)).fetchall()

    return [_row_to_record(row) for row in rows]


def get_draft(user_id: int, quest_id: str) -> SubmissionRecord | None:
    """The user's draft for a quest, if any."""
    with get_db() as conn:
        row = conn.execute(
            """
            SELECT * FROM writing_submissions
            WHERE user_id = ? AND quest_id = ? AND status = 'draft'
            ORDER BY id DESC LIMIT 1
            """,
            (user_id, quest_id),
        ).fetchone()

    if row is None:
        return None

    return _row_to_record(row)


def save_draft(user_id: int, quest_id: str, title: str, content: str) -> SubmissionRecord:
    """Create or overwrite the user's draft for a quest."""
    existing = get_draft(user_id, quest_id)
    if existing is None:
        return insert_submission(user_id, quest_id, title, content, status="draft")

    with get_db() as conn:
        conn.execute(
            """
            UPDATE writing_submissions
            SET title = ?, content = ?, submitted_at = datetime('now')
            WHERE id = ?
            """,
            (title, content, existing.id),
        )
        row = conn.execute(
            "SELECT * FROM writing_submissions WHERE id = ?", (existing.id,)
        ).fetchone()

    logger.debug("submissions.draft_saved", submission_id=existing.id)
    return _row_to_record(row)


def submit_writing(user_id: int, quest_id: str, title: str, content: str) -> SubmissionRecord:
    """Submit writing for a quest, promoting an existing draft if there is one."""
    draft = get_draft(user_id, quest_id)
    if draft is None:
        return insert_submission(user_id, quest_id, title, content)

    with get_db() as conn:
        conn.execute(
            """
            UPDATE writing_submissions
            SET title = ?, content = ?, status = 'submitted', submitted_at = datetime('now')
            WHERE id = ?
            """,
            (title, content, draft.id),
        )
        row = conn.execute(
            "SELECT * FROM writing_submissions WHERE id = ?", (draft.id,)
        ).fetchone()

    logger.debug("submissions.draft_submitted", submission_id=draft.id)
    return _row_to_record(row)


def record_review(
    submission_id: int,
    feedback: str,
    ai_feedback: dict[str, Any],
    skills_assessed: dict[str, Any],
    suggested_exercises: list[str],
) -> SubmissionRecord:
    """Attach AI feedback and mark the submission reviewed.

    Raises:
        ValueError: If the submission doesn't exist
    """
    with get_db() as conn:
        cursor = conn.execute(
            """
            UPDATE writing_submissions SET
                feedback = ?,
                ai_feedback = ?,
                skills_assessed = ?,
                suggested_exercises = ?,
                status = 'reviewed'
            WHERE id = ?
            """,
            (
                feedback,
                json.dumps(ai_feedback),
                json.dumps(skills_assessed),
                json.dumps(suggested_exercises),
                submission_id,
            ),
        )
        if cursor.rowcount == 0:
            raise ValueError(f"Submission not found: {submission_id}")
        row = conn.execute(
            "SELECT * FROM writing_submissions WHERE id = ?", (submission_id,)
        ).fetchone()

    logger.debug("submissions.reviewed", submission_id=submission_id)
    return _row_to_record(row)


def _load(value: str | None) -> Any:
    return json.loads(value) if value is not None else None


def _row_to_record(row) -> SubmissionRecord:
    """Convert database row to SubmissionRecord."""
    return SubmissionRecord(
        id=row["id"],
        user_id=row["user_id"],
        quest_id=row["quest_id"],
        title=row["title"],
        content=row["content"],
        feedback=row["feedback"],
        ai_feedback=_load(row["ai_feedback"]),
        status=row["status"],
        submitted_at=row["submitted_at"],
        skills_assessed=_load(row["skills_assessed"]),
        suggested_exercises=_load(row["suggested_exercises"]),
    )
