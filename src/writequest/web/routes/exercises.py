"""Exercise map and attempt endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status

from writequest.config.app_config import AppConfig
from writequest.core.exercises import (
    ExerciseAnswerError,
    exercise_nodes,
    exercise_status,
    get_exercise_by_id,
    grade_attempt,
)
from writequest.core.progress_service import (
    award_achievements,
    get_or_create_progress,
    record_exercise_attempt,
    unlock_locations,
)
from writequest.db import attempts_repository, progress_repository
from writequest.db.users_repository import UserRecord
from writequest.web.deps import get_app_config, get_current_user
from writequest.web.schemas import ExerciseAttemptRequest

router = APIRouter(prefix="/api/exercises", tags=["exercises"])


@router.get("")
async def list_exercises(user: UserRecord = Depends(get_current_user)) -> dict[str, Any]:
    """Exercise map for the current user."""
    progress = get_or_create_progress(user.id)
    nodes = exercise_nodes(progress.skill_mastery, frozenset(progress.completed_exercises))
    return {"exercises": nodes, "count": len(nodes)}


@router.get("/{exercise_id}")
async def get_exercise(
    exercise_id: str,
    user: UserRecord = Depends(get_current_user),
) -> dict[str, Any]:
    """One exercise with its status for the current user."""
    exercise = get_exercise_by_id(exercise_id)
    if exercise is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Exercise '{exercise_id}' not found",
        )

    progress = get_or_create_progress(user.id)
    return {
        **exercise.to_dict(),
        "status": exercise_status(
            exercise, progress.skill_mastery, frozenset(progress.completed_exercises)
        ),
    }


@router.post("/attempt", status_code=status.HTTP_201_CREATED)
async def attempt_exercise(
    data: ExerciseAttemptRequest,
    user: UserRecord = Depends(get_current_user),
    config: AppConfig = Depends(get_app_config),
) -> dict[str, Any]:
    """Grade and store an attempt, then credit progress."""
    exercise = get_exercise_by_id(data.exercise_id)
    if exercise is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Exercise '{data.exercise_id}' not found",
        )

    try:
        grade = grade_attempt(exercise, data.answers)
    except ExerciseAnswerError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        ) from e

    attempt = attempts_repository.insert_attempt(
        user.id, exercise.id, grade.is_correct, data.answers
    )

    progress = get_or_create_progress(user.id)
    record_exercise_attempt(progress, exercise, grade.is_correct, config.game)
    unlocked = unlock_locations(progress)
    new_achievements = award_achievements(progress, config.game.achievement_reward)
    progress = progress_repository.save_progress(progress)

    return {
        "attempt": attempt.to_dict(),
        "result": grade.to_dict(),
        "progress": progress.to_dict(),
        "unlockedLocations": unlocked,
        "newAchievements": new_achievements,
    }
