"""Progress bookkeeping.

Responsibilities:
- Create default progress for new students
- Apply partial updates, exercise attempts and quest completions
- Unlock town locations and award achievements as progress changes
- Track daily writing streaks and the progress history

Functions that take a ProgressRecord mutate it in place; callers persist it
with progress_repository.save_progress.
"""

from __future__ import annotations

from datetime import date
from typing import Any

import structlog

from writequest.config.app_config import GameSettings
from writequest.core.achievements import ProgressSnapshot, unlocked_achievement_ids
from writequest.core.exercises import Exercise
from writequest.core.quests import STARTING_LOCATION, determine_locations_to_unlock
from writequest.core.skills import SkillMastery
from writequest.core.streaks import StreakState, advance_streak, history_entry, record_history
from writequest.db import progress_repository
from writequest.db.progress_repository import ProgressRecord

logger = structlog.get_logger(__name__)

DEFAULT_MASTERY = SkillMastery(mechanics=10, sequencing=10, voice=10)

MAX_LEVEL = 10


def default_progress(user_id: int) -> ProgressRecord:
    """Progress for a student who has not started yet."""
    return ProgressRecord(
        user_id=user_id,
        skill_mastery=DEFAULT_MASTERY,
        unlocked_locations=[STARTING_LOCATION],
        level=level_for(DEFAULT_MASTERY),
    )


def get_or_create_progress(user_id: int) -> ProgressRecord:
    """Load a user's progress, creating the default row on first access."""
    progress = progress_repository.get_progress_by_user_id(user_id)
    if progress is None:
        progress = progress_repository.insert_progress(default_progress(user_id))
        logger.info("progress.created", user_id=user_id)
    return progress


def level_for(mastery: SkillMastery) -> int:
    """One level per 10 points of mean mastery, between 1 and 10."""
    return min(MAX_LEVEL, max(1, int(mastery.average() // 10)))


def _add_unique(items: list[str], item: str) -> bool:
    if item in items:
        return False
    items.append(item)
    return True


def _raise_mastery(progress: ProgressRecord, gains: dict[str, float]) -> None:
    current = progress.skill_mastery
    progress.skill_mastery = current.merged(
        {skill: min(100, current.get(skill) + gain) for skill, gain in gains.items()}
    )
    progress.level = level_for(progress.skill_mastery)


def merge_progress_update(progress: ProgressRecord, updates: dict[str, Any]) -> ProgressRecord:
    """Apply a partial update.

    Keys left out (or None) keep their current value. ``skill_mastery`` is
    merged per skill.
    """
    mastery = updates.get("skill_mastery")
    if mastery is not None:
        progress.skill_mastery = progress.skill_mastery.merged(mastery)
        progress.level = level_for(progress.skill_mastery)

    for key in ("completed_exercises", "completed_quests", "unlocked_locations", "achievements"):
        value = updates.get(key)
        if value is not None:
            setattr(progress, key, list(dict.fromkeys(value)))

    if updates.get("currency") is not None:
        progress.currency = updates["currency"]

    return progress


def snapshot_for(progress: ProgressRecord) -> ProgressSnapshot:
    """The part of progress that achievements are evaluated against."""
    return ProgressSnapshot.build(
        skill_mastery=progress.skill_mastery,
        completed_exercises=progress.completed_exercises,
        completed_quests=progress.completed_quests,
    )


def award_achievements(progress: ProgressRecord, reward: int = 10) -> list[str]:
    """Add every newly satisfied achievement.

    Returns:
        IDs awarded by this call, in catalogue order
    """
    awarded = [
        achievement_id
        for achievement_id in unlocked_achievement_ids(snapshot_for(progress))
        if achievement_id not in progress.achievements
    ]
    for achievement_id in awarded:
        progress.achievements.append(achievement_id)
        progress.currency += reward

    if awarded:
        logger.info("progress.achievements_awarded", user_id=progress.user_id, achievements=awarded)
    return awarded


def unlock_locations(progress: ProgressRecord) -> list[str]:
    """Open every locked location that now has an available quest."""
    newly_open = determine_locations_to_unlock(
        progress.skill_mastery,
        progress.completed_quests,
        progress.unlocked_locations,
    )
    progress.unlocked_locations.extend(newly_open)
    if newly_open:
        logger.info("progress.locations_unlocked", user_id=progress.user_id, locations=newly_open)
    return newly_open


def record_exercise_attempt(
    progress: ProgressRecord,
    exercise: Exercise,
    is_correct: bool,
    settings: GameSettings | None = None,
) -> None:
    """Credit an exercise attempt.

    Correct answers mark the exercise completed; every attempt earns some
    mastery in the exercise's skill and some currency.
    """
    settings = settings or GameSettings()
    if is_correct:
        gain, reward = settings.exercise_gain_correct, settings.exercise_reward_correct
        _add_unique(progress.completed_exercises, exercise.id)
    else:
        gain, reward = settings.exercise_gain_incorrect, settings.exercise_reward_incorrect

    _raise_mastery(progress, {exercise.skill_type: gain})
    progress.currency += reward


def complete_quest(
    progress: ProgressRecord,
    quest_id: str,
    settings: GameSettings | None = None,
) -> list[str]:
    """Mark a quest completed and open any locations it leads to.

    Completing the same quest twice only re-checks locations.

    Returns:
        Locations unlocked by this call
    """
    settings = settings or GameSettings()
    if _add_unique(progress.completed_quests, quest_id):
        _raise_mastery(progress, settings.quest_mastery_gain)
        progress.currency += settings.quest_reward
        logger.info("progress.quest_completed", user_id=progress.user_id, quest_id=quest_id)
    return unlock_locations(progress)


def record_writing_day(
    progress: ProgressRecord,
    today: date,
    history_days: int = 90,
) -> StreakState:
    """Advance the streak and record today's history point."""
    state = advance_streak(
        progress.current_streak,
        progress.longest_streak,
        progress.last_writing_date,
        today,
    )
    progress.current_streak = state.current_streak
    progress.longest_streak = state.longest_streak
    progress.last_writing_date = state.last_writing_date.isoformat()
    progress.progress_history = record_history(
        progress.progress_history,
        history_entry(
            today,
            progress.skill_mastery,
            progress.level,
            len(progress.completed_exercises) + len(progress.completed_quests),
        ),
        max_entries=history_days,
    )
    return state
