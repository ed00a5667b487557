"""Writing submission review pipeline.

Runs AI analysis on a stored submission, attaches the feedback and
recommended exercises, and credits the student's progress.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import structlog

from writequest.config.app_config import GameSettings
from writequest.core.feedback import (
    WritingAnalysis,
    analyze_writing,
    generate_suggested_exercises,
)
from writequest.core.progress_service import (
    award_achievements,
    complete_quest,
    get_or_create_progress,
)
from writequest.core.quests import get_quest_by_id
from writequest.db import progress_repository, submissions_repository
from writequest.db.submissions_repository import SubmissionRecord
from writequest.db.users_repository import UserRecord
from writequest.llm.client import LLMClient

logger = structlog.get_logger(__name__)


@dataclass
class ReviewResult:
    """Outcome of reviewing one submission."""

    submission: SubmissionRecord
    analysis: WritingAnalysis
    suggested_exercises: list[str]
    unlocked_locations: list[str] = field(default_factory=list)
    new_achievements: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "submission": self.submission.to_dict(),
            "analysis": {
                **self.analysis.to_dict(),
                "suggestedExercises": list(self.suggested_exercises),
            },
            "unlockedLocations": list(self.unlocked_locations),
            "newAchievements": list(self.new_achievements),
        }


def resolve_grade(requested: int | None, user: UserRecord, settings: GameSettings) -> int:
    """Grade used to calibrate feedback: request, then profile, then default."""
    return requested or user.grade or settings.default_grade


def review_submission(
    submission: SubmissionRecord,
    user: UserRecord,
    client: LLMClient,
    settings: GameSettings | None = None,
    title: str | None = None,
    content: str | None = None,
    grade: int | None = None,
) -> ReviewResult:
    """Analyze a submission and record the results.

    Args:
        submission: Stored submission to review
        user: Submission owner
        client: LLM client
        settings: Game settings (rewards, default grade)
        title: Title to analyze instead of the stored one
        content: Text to analyze instead of the stored one
        grade: Grade override

    Returns:
        ReviewResult with the updated submission

    Raises:
        WritingAnalysisError: If the model call fails; nothing is recorded
    """
    settings = settings or GameSettings()
    progress = get_or_create_progress(user.id)

    analysis = analyze_writing(
        title or submission.title,
        content or submission.content,
        submission.quest_id,
        resolve_grade(grade, user, settings),
        client,
    )
    suggested = generate_suggested_exercises(analysis.feedback, progress.skill_mastery, client)

    updated = submissions_repository.record_review(
        submission.id,
        feedback=analysis.feedback.overall_feedback,
        ai_feedback=analysis.feedback.to_dict(),
        skills_assessed=analysis.skills_assessed.to_dict(),
        suggested_exercises=suggested,
    )

    unlocked: list[str] = []
    if get_quest_by_id(submission.quest_id) is not None:
        unlocked = complete_quest(progress, submission.quest_id, settings)
    new_achievements = award_achievements(progress, settings.achievement_reward)
    progress_repository.save_progress(progress)

    logger.info(
        "review.completed",
        submission_id=submission.id,
        user_id=user.id,
        suggested=suggested,
        unlocked_locations=unlocked,
    )
    return ReviewResult(
        submission=updated,
        analysis=analysis,
        suggested_exercises=suggested,
        unlocked_locations=unlocked,
        new_achievements=new_achievements,
    )
