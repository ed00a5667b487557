"""Daily challenge and streak endpoints."""

from __future__ import annotations

from datetime import date
import structlog
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status

from writequest.config.app_config import AppConfig
from writequest.core.daily_challenge import generate_daily_challenge
from writequest.core.exercises import count_words
from writequest.core.progress_service import (
    award_achievements,
    get_or_create_progress,
    record_writing_day,
)
from writequest.db import challenges_repository, progress_repository, submissions_repository
from writequest.db.challenges_repository import ChallengeRecord
from writequest.db.progress_repository import ProgressRecord
from writequest.db.users_repository import UserRecord
from writequest.llm.client import LLMClient
from writequest.web.deps import (
    get_app_config,
    get_current_user,
    get_llm_client,
    get_today,
    require_role,
)
from writequest.web.routes.writing import run_background_review
from writequest.web.schemas import (
    ChallengeDraftRequest,
    ChallengeResponse,
    ChallengeStatusResponse,
    ChallengeSubmitRequest,
    ChallengeSubmitResponse,
    DraftSavedResponse,
    StreakResponse,
    SubmissionResponse,
)

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/daily-challenge", tags=["daily-challenge"])
streak_router = APIRouter(prefix="/api/streak", tags=["streak"])


def challenge_quest_id(challenge_id: int) -> str:
    """Submissions for a daily challenge are filed under this quest ID."""
    return f"daily-{challenge_id}"


def _challenge_view(challenge: ChallengeRecord, progress: ProgressRecord) -> ChallengeStatusResponse:
    completed = (
        progress.daily_challenge_id == str(challenge.id)
        and progress.daily_challenge_completed
    )
    return ChallengeStatusResponse.model_validate({**challenge.to_dict(), "completed": completed})


def _create_challenge(client: LLMClient, today: date, config: AppConfig) -> ChallengeRecord:
    proposal = generate_daily_challenge(client, today)
    return challenges_repository.insert_challenge(
        proposal, expiry_hours=config.game.challenge_expiry_hours
    )


def _get_challenge(challenge_id: int) -> ChallengeRecord:
    challenge = challenges_repository.get_challenge_by_id(challenge_id)
    if challenge is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Daily challenge {challenge_id} not found",
        )
    return challenge


@router.get("", response_model=ChallengeStatusResponse)
def get_current_challenge(
    user: UserRecord = Depends(get_current_user),
    client: LLMClient = Depends(get_llm_client),
    today: date = Depends(get_today),
    config: AppConfig = Depends(get_app_config),
) -> ChallengeStatusResponse:
    """Today's challenge; one is generated if none is current."""
    challenge = challenges_repository.get_current_challenge()
    if challenge is None:
        challenge = _create_challenge(client, today, config)

    return _challenge_view(challenge, get_or_create_progress(user.id))


@router.post("/generate", response_model=ChallengeResponse, status_code=status.HTTP_201_CREATED)
def generate_challenge(
    user: UserRecord = Depends(require_role("teacher")),
    client: LLMClient = Depends(get_llm_client),
    today: date = Depends(get_today),
    config: AppConfig = Depends(get_app_config),
) -> ChallengeResponse:
    """Create a new challenge, replacing the current one."""
    challenge = _create_challenge(client, today, config)
    logger.info("daily_challenge.created_by", user_id=user.id, challenge_id=challenge.id)
    return ChallengeResponse.model_validate(challenge.to_dict())


@router.post("/submit", response_model=ChallengeSubmitResponse, status_code=status.HTTP_201_CREATED)
async def submit_challenge(
    data: ChallengeSubmitRequest,
    background_tasks: BackgroundTasks,
    user: UserRecord = Depends(get_current_user),
    client: LLMClient = Depends(get_llm_client),
    today: date = Depends(get_today),
    config: AppConfig = Depends(get_app_config),
) -> ChallengeSubmitResponse:
    """Submit writing for a challenge and extend the streak."""
    challenge = _get_challenge(data.challenge_id)
    if challenge.is_expired():
        raise HTTPException(
            status_code=status.HTTP_410_GONE,
            detail=f"Daily challenge {challenge.id} has expired",
        )

    words = count_words(data.content)
    if words < challenge.word_minimum:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Challenge needs at least {challenge.word_minimum} words, got {words}",
        )

    submission = submissions_repository.submit_writing(
        user.id, challenge_quest_id(challenge.id), data.title, data.content
    )

    progress = get_or_create_progress(user.id)
    progress.daily_challenge_id = str(challenge.id)
    progress.daily_challenge_completed = True
    streak = record_writing_day(progress, today, config.game.history_days)
    new_achievements = award_achievements(progress, config.game.achievement_reward)
    progress = progress_repository.save_progress(progress)

    logger.info(
        "daily_challenge.submitted",
        challenge_id=challenge.id,
        user_id=user.id,
        current_streak=streak.current_streak,
    )

    background_tasks.add_task(
        run_background_review, submission.id, user.id, client, config.game
    )
    return ChallengeSubmitResponse(
        submission=SubmissionResponse.model_validate(submission.to_dict()),
        streak=StreakResponse.model_validate(streak.to_dict()),
        new_achievements=new_achievements,
    )


@router.post("/draft", response_model=DraftSavedResponse)
async def save_challenge_draft(
    data: ChallengeDraftRequest,
    user: UserRecord = Depends(get_current_user),
) -> DraftSavedResponse:
    """Save work in progress for a challenge."""
    challenge = _get_challenge(data.challenge_id)
    draft = submissions_repository.save_draft(
        user.id, challenge_quest_id(challenge.id), data.title, data.content
    )
    return DraftSavedResponse(draft=SubmissionResponse.model_validate(draft.to_dict()))


@router.get("/{challenge_id}", response_model=ChallengeStatusResponse)
async def get_challenge(
    challenge_id: int,
    user: UserRecord = Depends(get_current_user),
) -> ChallengeStatusResponse:
    """A challenge by ID, current or not."""
    return _challenge_view(_get_challenge(challenge_id), get_or_create_progress(user.id))


@streak_router.post("/update", response_model=StreakResponse)
async def update_streak(
    user: UserRecord = Depends(get_current_user),
    today: date = Depends(get_today),
    config: AppConfig = Depends(get_app_config),
) -> StreakResponse:
    """Record that the user wrote today."""
    progress = get_or_create_progress(user.id)
    streak = record_writing_day(progress, today, config.game.history_days)
    progress_repository.save_progress(progress)
    return StreakResponse.model_validate(streak.to_dict())
