"""Pydantic schemas for Web API.

Request bodies use camelCase field names on the wire; Python code sees
snake_case attributes.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from writequest.utils.security import MAX_PASSWORD_LENGTH


class CamelModel(BaseModel):
    """Base for bodies exchanged with the web client (camelCase on the wire)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# USER SCHEMAS
# =============================================================================


class RegisterRequest(CamelModel):
    """Request body for creating an account."""

    username: str = Field(..., min_length=3, max_length=50, pattern=r"^[A-Za-z0-9_.-]+$")
    password: str = Field(..., min_length=6, max_length=MAX_PASSWORD_LENGTH)
    display_name: str = Field(..., min_length=1, max_length=100)
    role: Literal["student", "teacher", "parent"] = "student"
    email: str | None = Field(default=None, max_length=200)
    age: int = Field(default=0, ge=0, le=120)
    grade: int = Field(default=0, ge=0, le=12)
    avatar_url: str = Field(default="", max_length=500)


class LoginRequest(CamelModel):
    """Request body for checking credentials."""

    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class ProfileUpdate(CamelModel):
    """Partial profile update."""

    display_name: str | None = Field(default=None, min_length=1, max_length=100)
    email: str | None = Field(default=None, max_length=200)
    age: int | None = Field(default=None, ge=0, le=120)
    grade: int | None = Field(default=None, ge=0, le=12)
    avatar_url: str | None = Field(default=None, max_length=500)


class PasswordChange(CamelModel):
    """Request body for changing a password."""

    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=6, max_length=MAX_PASSWORD_LENGTH)


class UserResponse(CamelModel):
    """Public view of a user."""

    id: int
    username: str
    display_name: str
    email: str | None = None
    age: int | None = None
    grade: int | None = None
    avatar_url: str | None = None
    role: str
    created_at: str | None = None


class MessageResponse(BaseModel):
    """Plain confirmation message."""

    message: str


# =============================================================================
# PROGRESS SCHEMAS
# =============================================================================


class SkillMasteryUpdate(CamelModel):
    """Per-skill mastery values; omitted skills keep their value."""

    mechanics: float | None = Field(default=None, ge=0, le=100)
    sequencing: float | None = Field(default=None, ge=0, le=100)
    voice: float | None = Field(default=None, ge=0, le=100)


class ProgressUpdate(CamelModel):
    """Partial progress update."""

    skill_mastery: SkillMasteryUpdate | None = None
    completed_exercises: list[str] | None = None
    completed_quests: list[str] | None = None
    unlocked_locations: list[str] | None = None
    currency: int | None = Field(default=None, ge=0)
    achievements: list[str] | None = None


class ExerciseAttemptRequest(CamelModel):
    """An answer to one exercise."""

    exercise_id: str = Field(..., min_length=1)
    answers: dict[str, Any]


class ProgressResponse(CamelModel):
    """A student's progress snapshot."""

    id: int | None = None
    user_id: int
    skill_mastery: dict[str, int | float]
    completed_exercises: list[str]
    completed_quests: list[str]
    unlocked_locations: list[str]
    level: int
    currency: int
    achievements: list[str]
    current_streak: int
    longest_streak: int
    last_writing_date: str | None = None
    daily_challenge_id: str | None = None
    daily_challenge_completed: bool = False
    progress_history: list[dict[str, Any]]
    updated_at: str | None = None


class AchievementListResponse(CamelModel):
    """Achievement catalogue with earned flags."""

    achievements: list[dict[str, Any]]
    count: int
    unlocked_count: int


# =============================================================================
# WRITING SCHEMAS
# =============================================================================


class WritingSubmitRequest(CamelModel):
    """Writing submitted for a quest."""

    quest_id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1)


class WritingAnalyzeRequest(CamelModel):
    """Request to (re)analyze a stored submission."""

    submission_id: int
    content: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1, max_length=200)
    grade: int | None = Field(default=None, ge=1, le=12)


class DraftRequest(CamelModel):
    """Work in progress for a quest."""

    quest_id: str = Field(..., min_length=1)
    title: str = Field(default="", max_length=200)
    content: str = ""


class WritersBlockRequest(CamelModel):
    """A stuck student's description of the problem."""

    quest_id: str | None = None
    title: str = Field(default="", max_length=200)
    prompt: str = Field(..., min_length=1, max_length=2000)
    current_content: str = ""


class GeneratePromptRequest(CamelModel):
    """Request for a location-specific writing prompt."""

    location_id: str = Field(..., min_length=1)


class SubmissionResponse(CamelModel):
    """A stored submission with any review results."""

    id: int
    user_id: int
    quest_id: str
    title: str
    content: str
    feedback: str | None = None
    ai_feedback: dict[str, Any] | None = None
    status: str
    submitted_at: str | None = None
    skills_assessed: dict[str, Any] | None = None
    suggested_exercises: list[str] | None = None


class SubmissionListResponse(BaseModel):
    """Submissions, newest first."""

    submissions: list[SubmissionResponse]
    count: int


class DraftSavedResponse(BaseModel):
    """Confirmation for a saved draft."""

    message: str = "Draft saved successfully"
    draft: SubmissionResponse


# =============================================================================
# DAILY CHALLENGE SCHEMAS
# =============================================================================


class ChallengeSubmitRequest(CamelModel):
    """Writing submitted for a daily challenge."""

    challenge_id: int
    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1)


class ChallengeDraftRequest(CamelModel):
    """Work in progress for a daily challenge."""

    challenge_id: int
    title: str = Field(default="", max_length=200)
    content: str = ""


class ChallengeResponse(CamelModel):
    """A stored daily challenge."""

    id: int
    challenge_date: str
    prompt: str
    title: str
    description: str
    word_minimum: int
    skill_focus: str
    difficulty: int
    expires_at: str | None = None


class ChallengeStatusResponse(ChallengeResponse):
    """A challenge with whether the current user has completed it."""

    completed: bool


class StreakResponse(CamelModel):
    """Streak counters after a writing day."""

    current_streak: int
    longest_streak: int
    last_writing_date: str | None = None


class ChallengeSubmitResponse(CamelModel):
    """Outcome of a challenge submission."""

    submission: SubmissionResponse
    streak: StreakResponse
    new_achievements: list[str]


# =============================================================================
# GUARDIAN SCHEMAS
# =============================================================================


class LinkStudentRequest(CamelModel):
    """Request to link a student account by username."""

    student_username: str = Field(..., min_length=1)


class StudentSummaryResponse(UserResponse):
    """A linked student with their progress."""

    progress: ProgressResponse | None = None


class StudentDetailResponse(StudentSummaryResponse):
    """A linked student with progress and earned achievements."""

    achievements: list[dict[str, Any]]


class StudentListResponse(BaseModel):
    """Students linked to a guardian."""

    students: list[StudentSummaryResponse]
    count: int


class LinkStudentResponse(CamelModel):
    """Result of linking a student."""

    student: StudentSummaryResponse
    already_linked: bool


# =============================================================================
# HEALTH SCHEMAS
# =============================================================================


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    version: str = "0.1.0"
    llm_configured: bool = False
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
