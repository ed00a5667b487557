"""Town map and quest endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status

from writequest.core.progress_service import get_or_create_progress
from writequest.core.quests import (
    WritingQuest,
    get_quest_by_id,
    get_quests_for_location,
    get_town_locations,
    is_quest_unlocked,
)
from writequest.db.progress_repository import ProgressRecord
from writequest.db.users_repository import UserRecord
from writequest.web.deps import get_current_user

router = APIRouter(prefix="/api/quests", tags=["quests"])


def _quest_view(quest: WritingQuest, progress: ProgressRecord) -> dict[str, Any]:
    return {
        **quest.to_dict(),
        "unlocked": is_quest_unlocked(quest, progress.skill_mastery, progress.completed_quests),
        "completed": quest.id in progress.completed_quests,
    }


@router.get("/locations")
async def list_locations(user: UserRecord = Depends(get_current_user)) -> dict[str, Any]:
    """Town locations with their quests and the user's unlock state."""
    progress = get_or_create_progress(user.id)
    locations = [
        {
            **location.to_dict(),
            "unlocked": location.id in progress.unlocked_locations,
            "quests": [_quest_view(q, progress) for q in get_quests_for_location(location.id)],
        }
        for location in get_town_locations()
    ]
    return {"locations": locations, "count": len(locations)}


@router.get("/{quest_id}")
async def get_quest(
    quest_id: str,
    user: UserRecord = Depends(get_current_user),
) -> dict[str, Any]:
    """One quest with the user's unlock state."""
    quest = get_quest_by_id(quest_id)
    if quest is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Quest '{quest_id}' not found",
        )

    return _quest_view(quest, get_or_create_progress(user.id))
