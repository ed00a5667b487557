"""Progress and achievement endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from writequest.config.app_config import AppConfig
from writequest.core.achievements import get_all_achievements
from writequest.core.progress_service import (
    award_achievements,
    get_or_create_progress,
    merge_progress_update,
    unlock_locations,
)
from writequest.db import progress_repository
from writequest.db.users_repository import UserRecord
from writequest.web.deps import get_app_config, get_current_user
from writequest.web.schemas import AchievementListResponse, ProgressResponse, ProgressUpdate

router = APIRouter(prefix="/api/progress", tags=["progress"])
achievements_router = APIRouter(prefix="/api/achievements", tags=["achievements"])


@router.get("", response_model=ProgressResponse)
async def get_progress(user: UserRecord = Depends(get_current_user)) -> ProgressResponse:
    """Current user's progress, created with defaults on first access."""
    return ProgressResponse.model_validate(get_or_create_progress(user.id).to_dict())


@router.patch("", response_model=ProgressResponse)
async def update_progress(
    data: ProgressUpdate,
    user: UserRecord = Depends(get_current_user),
    config: AppConfig = Depends(get_app_config),
) -> ProgressResponse:
    """Merge a partial update, then re-check locations and achievements."""
    progress = get_or_create_progress(user.id)
    merge_progress_update(progress, data.model_dump(exclude_none=True))
    unlock_locations(progress)
    award_achievements(progress, config.game.achievement_reward)
    return ProgressResponse.model_validate(progress_repository.save_progress(progress).to_dict())


@achievements_router.get("", response_model=AchievementListResponse)
async def list_achievements(user: UserRecord = Depends(get_current_user)) -> AchievementListResponse:
    """Achievement catalogue with the current user's earned flags."""
    progress = get_or_create_progress(user.id)
    earned = set(progress.achievements)
    achievements = [
        {**achievement.to_dict(), "unlocked": achievement.id in earned}
        for achievement in get_all_achievements()
    ]
    return AchievementListResponse(
        achievements=achievements,
        count=len(achievements),
        unlocked_count=sum(1 for a in achievements if a["unlocked"]),
    )
