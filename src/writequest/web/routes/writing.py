"""Writing submission, analysis and coaching endpoints."""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status

from writequest.config.app_config import AppConfig, GameSettings
from writequest.core.feedback import WritingAnalysisError
from writequest.core.quests import get_location_by_id, get_quest_by_id
from writequest.core.review_service import review_submission
from writequest.core.writing_coach import generate_writing_prompt, writers_block_help
from writequest.db import submissions_repository, users_repository
from writequest.db.submissions_repository import SubmissionRecord
from writequest.db.users_repository import UserRecord
from writequest.llm.client import LLMClient
from writequest.web.deps import get_app_config, get_current_user, get_llm_client
from writequest.web.schemas import (
    DraftRequest,
    DraftSavedResponse,
    GeneratePromptRequest,
    SubmissionListResponse,
    SubmissionResponse,
    WritersBlockRequest,
    WritingAnalyzeRequest,
    WritingSubmitRequest,
)

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/writing", tags=["writing"])


def run_background_review(
    submission_id: int,
    user_id: int,
    client: LLMClient,
    settings: GameSettings,
) -> None:
    """Review a submission after the response has been sent.

    Analysis failures leave the submission in 'submitted' state.
    """
    submission = submissions_repository.get_submission_by_id(submission_id)
    user = users_repository.get_user_by_id(user_id)
    if submission is None or user is None:
        logger.warning("writing.review_target_missing", submission_id=submission_id, user_id=user_id)
        return

    try:
        review_submission(submission, user, client, settings)
    except WritingAnalysisError as e:
        logger.error("writing.background_review_failed", submission_id=submission_id, error=str(e))


def _submission_response(submission: SubmissionRecord) -> SubmissionResponse:
    return SubmissionResponse.model_validate(submission.to_dict())


def _get_owned_submission(submission_id: int, user: UserRecord) -> SubmissionRecord:
    submission = submissions_repository.get_submission_by_id(submission_id)
    if submission is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Submission {submission_id} not found",
        )
    if submission.user_id != user.id and user.role != "admin":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not authorized to view this submission",
        )
    return submission


@router.post("/submit", response_model=SubmissionResponse, status_code=status.HTTP_201_CREATED)
async def submit_writing(
    data: WritingSubmitRequest,
    background_tasks: BackgroundTasks,
    user: UserRecord = Depends(get_current_user),
    client: LLMClient = Depends(get_llm_client),
    config: AppConfig = Depends(get_app_config),
) -> SubmissionResponse:
    """Store a submission and queue its AI review."""
    if get_quest_by_id(data.quest_id) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Quest '{data.quest_id}' not found",
        )

    submission = submissions_repository.submit_writing(
        user.id, data.quest_id, data.title, data.content
    )
    logger.info(
        "writing.submitted",
        submission_id=submission.id,
        user_id=user.id,
        quest_id=data.quest_id,
        content_length=len(data.content),
    )

    background_tasks.add_task(
        run_background_review, submission.id, user.id, client, config.game
    )
    return _submission_response(submission)


@router.post("/analyze")
def analyze_submission(
    data: WritingAnalyzeRequest,
    user: UserRecord = Depends(get_current_user),
    client: LLMClient = Depends(get_llm_client),
    config: AppConfig = Depends(get_app_config),
) -> dict[str, Any]:
    """Analyze a submission now and return the feedback."""
    submission = _get_owned_submission(data.submission_id, user)
    if submission.status == "draft":
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Drafts must be submitted before they can be analyzed",
        )

    try:
        result = review_submission(
            submission,
            user,
            client,
            config.game,
            title=data.title,
            content=data.content,
            grade=data.grade,
        )
    except WritingAnalysisError as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=str(e),
        ) from e

    return result.to_dict()


@router.post("/draft", response_model=DraftSavedResponse)
async def save_draft(
    data: DraftRequest,
    user: UserRecord = Depends(get_current_user),
) -> DraftSavedResponse:
    """Save work in progress for a quest."""
    draft = submissions_repository.save_draft(user.id, data.quest_id, data.title, data.content)
    return DraftSavedResponse(draft=_submission_response(draft))


@router.get("/submissions", response_model=SubmissionListResponse)
async def list_submissions(user: UserRecord = Depends(get_current_user)) -> SubmissionListResponse:
    """The current user's submissions and drafts, newest first."""
    submissions = submissions_repository.get_submissions_by_user(user.id)
    return SubmissionListResponse(
        submissions=[_submission_response(s) for s in submissions],
        count=len(submissions),
    )


@router.get("/submissions/{submission_id}", response_model=SubmissionResponse)
async def get_submission(
    submission_id: int,
    user: UserRecord = Depends(get_current_user),
) -> SubmissionResponse:
    """One of the current user's submissions."""
    return _submission_response(_get_owned_submission(submission_id, user))


@router.post("/writers-block-help")
def get_writers_block_help(
    data: WritersBlockRequest,
    user: UserRecord = Depends(get_current_user),
    client: LLMClient = Depends(get_llm_client),
) -> dict[str, str]:
    """Coaching hints for a stuck student."""
    title = data.title
    if not title and data.quest_id:
        quest = get_quest_by_id(data.quest_id)
        title = quest.title if quest is not None else ""

    response = writers_block_help(title, data.prompt, data.current_content, client)
    return {"response": response}


@router.post("/generate-prompt")
def generate_prompt(
    data: GeneratePromptRequest,
    user: UserRecord = Depends(get_current_user),
    client: LLMClient = Depends(get_llm_client),
) -> dict[str, Any]:
    """A fresh writing prompt for a town location."""
    location = get_location_by_id(data.location_id)
    if location is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Location '{data.location_id}' not found",
        )

    return generate_writing_prompt(location, client).to_dict()
