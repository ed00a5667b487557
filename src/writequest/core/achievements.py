"""Achievement catalogue and unlock evaluation.

An achievement carries a declarative requirement record. Evaluation is a
plain AND over every requirement field that is present; a field that is
absent places no constraint. Evaluation never mutates the snapshot.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Literal

from writequest.core.skills import SKILL_AREAS, SkillMastery

AchievementCategory = Literal["exercises", "quests", "mastery", "general"]


# =============================================================================
# DATA CLASSES
# =============================================================================


@dataclass(frozen=True)
class MasteryRequirement:
    """Minimum mastery per skill and/or on the unweighted mean."""

    mechanics: float | None = None
    sequencing: float | None = None
    voice: float | None = None
    total: float | None = None

    def is_met(self, mastery: SkillMastery) -> bool:
        """Check every present threshold against the mastery triple."""
        for skill in SKILL_AREAS:
            minimum = getattr(self, skill)
            if minimum is not None and mastery.get(skill) < minimum:
                return False
        if self.total is not None and mastery.average() < self.total:
            return False
        return True

    def to_dict(self) -> dict[str, float]:
        """Convert to dictionary, omitting absent thresholds."""
        values = {
            "mechanics": self.mechanics,
            "sequencing": self.sequencing,
            "voice": self.voice,
            "total": self.total,
        }
        return {k: v for k, v in values.items() if v is not None}


@dataclass(frozen=True)
class Requirements:
    """Declarative unlock conditions for an achievement."""

    completed_exercises: int | None = None
    completed_quests: int | None = None
    skill_mastery: MasteryRequirement | None = None
    specific_exercises: tuple[str, ...] | None = None
    specific_quests: tuple[str, ...] | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Requirements:
        """Parse a camelCase requirement record."""
        mastery = data.get("skillMastery")
        specific_exercises = data.get("specificExercises")
        specific_quests = data.get("specificQuests")
        return cls(
            completed_exercises=data.get("completedExercises"),
            completed_quests=data.get("completedQuests"),
            skill_mastery=MasteryRequirement(**mastery) if mastery is not None else None,
            specific_exercises=tuple(specific_exercises) if specific_exercises is not None else None,
            specific_quests=tuple(specific_quests) if specific_quests is not None else None,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to camelCase dictionary, omitting absent fields."""
        result: dict[str, Any] = {}
        if self.completed_exercises is not None:
            result["completedExercises"] = self.completed_exercises
        if self.completed_quests is not None:
            result["completedQuests"] = self.completed_quests
        if self.skill_mastery is not None:
            result["skillMastery"] = self.skill_mastery.to_dict()
        if self.specific_exercises is not None:
            result["specificExercises"] = list(self.specific_exercises)
        if self.specific_quests is not None:
            result["specificQuests"] = list(self.specific_quests)
        return result


@dataclass(frozen=True)
class ProgressSnapshot:
    """The slice of a student's progress that achievements look at.

    A field left as None means the progress record did not carry it.
    """

    skill_mastery: SkillMastery | None = None
    completed_exercises: frozenset[str] | None = None
    completed_quests: frozenset[str] | None = None

    @classmethod
    def build(
        cls,
        skill_mastery: SkillMastery | None,
        completed_exercises: Iterable[str] | None,
        completed_quests: Iterable[str] | None,
    ) -> ProgressSnapshot:
        return cls(
            skill_mastery=skill_mastery,
            completed_exercises=frozenset(completed_exercises) if completed_exercises is not None else None,
            completed_quests=frozenset(completed_quests) if completed_quests is not None else None,
        )


@dataclass(frozen=True)
class Achievement:
    """A badge a student can earn."""

    id: str
    title: str
    description: str
    icon: str
    category: AchievementCategory
    requirements: Requirements = field(default_factory=Requirements)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for API responses."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "icon": self.icon,
            "category": self.category,
            "requirements": self.requirements.to_dict(),
        }


# =============================================================================
# EVALUATION
# =============================================================================


def _count_met(minimum: int | None, items: frozenset[str] | None) -> bool:
    if minimum is None:
        return True
    if items is None:
        return False
    return len(items) >= minimum


def _ids_met(required: tuple[str, ...] | None, items: frozenset[str] | None) -> bool:
    if required is None:
        return True
    if items is None:
        return False
    return all(item_id in items for item_id in required)


def is_unlocked(requirements: Requirements, snapshot: ProgressSnapshot) -> bool:
    """Decide whether a snapshot satisfies a requirement record.

    Args:
        requirements: Declarative unlock conditions
        snapshot: Student progress

    Returns:
        True only if every present requirement field is satisfied. A
        requirement that refers to a progress field the snapshot lacks
        is never satisfied.
    """
    if not _count_met(requirements.completed_exercises, snapshot.completed_exercises):
        return False

    if not _count_met(requirements.completed_quests, snapshot.completed_quests):
        return False

    if requirements.skill_mastery is not None:
        if snapshot.skill_mastery is None:
            return False
        if not requirements.skill_mastery.is_met(snapshot.skill_mastery):
            return False

    if not _ids_met(requirements.specific_exercises, snapshot.completed_exercises):
        return False

    if not _ids_met(requirements.specific_quests, snapshot.completed_quests):
        return False

    return True


# =============================================================================
# CATALOGUE
# =============================================================================


def _achievement(
    id: str,
    title: str,
    description: str,
    icon: str,
    category: AchievementCategory,
    requirements: dict[str, Any],
) -> Achievement:
    return Achievement(
        id=id,
        title=title,
        description=description,
        icon=icon,
        category=category,
        requirements=Requirements.from_dict(requirements),
    )


ACHIEVEMENTS: tuple[Achievement, ...] = (
    # Beginner
    _achievement("first-steps", "First Steps", "Complete your first exercise",
                 "🏆", "exercises", {"completedExercises": 1}),
    _achievement("quest-beginner", "Novice Writer", "Complete your first writing quest",
                 "✍️", "quests", {"completedQuests": 1}),
    _achievement("mechanics-apprentice", "Mechanics Apprentice", "Reach 25% mastery in Mechanics skills",
                 "🔧", "mastery", {"skillMastery": {"mechanics": 25}}),
    _achievement("sequencing-apprentice", "Sequencing Apprentice", "Reach 25% mastery in Sequencing skills",
                 "📋", "mastery", {"skillMastery": {"sequencing": 25}}),
    _achievement("voice-apprentice", "Voice Apprentice", "Reach 25% mastery in Voice skills",
                 "🔊", "mastery", {"skillMastery": {"voice": 25}}),
    # Intermediate
    _achievement("exercise-enthusiast", "Exercise Enthusiast", "Complete 10 exercises",
                 "🎯", "exercises", {"completedExercises": 10}),
    _achievement("quest-adept", "Adept Writer", "Complete 5 writing quests",
                 "📝", "quests", {"completedQuests": 5}),
    _achievement("mechanics-master", "Mechanics Master", "Reach 75% mastery in Mechanics skills",
                 "⚙️", "mastery", {"skillMastery": {"mechanics": 75}}),
    _achievement("sequencing-master", "Sequencing Master", "Reach 75% mastery in Sequencing skills",
                 "🔗", "mastery", {"skillMastery": {"sequencing": 75}}),
    _achievement("voice-master", "Voice Master", "Reach 75% mastery in Voice skills",
                 "🎭", "mastery", {"skillMastery": {"voice": 75}}),
    # Advanced
    _achievement("all-around-writer", "All-Around Writer",
                 "Reach at least 50% mastery in all three skill areas",
                 "🌟", "mastery", {"skillMastery": {"mechanics": 50, "sequencing": 50, "voice": 50}}),
    _achievement("exercise-master", "Exercise Master",
                 "Complete all exercises in at least one skill path",
                 "🔥", "exercises",
                 {"specificExercises": ["mechanics-1", "mechanics-2", "mechanics-3", "mechanics-4", "mechanics-5"]}),
    _achievement("town-explorer", "Town Explorer",
                 "Complete at least one quest from each starting location",
                 "🧭", "quests", {"specificQuests": ["town-hall-1", "library-1", "music-hall-1"]}),
    _achievement("writing-virtuoso", "Writing Virtuoso", "Reach 90% mastery in all three skill areas",
                 "👑", "mastery", {"skillMastery": {"mechanics": 90, "sequencing": 90, "voice": 90}}),
    _achievement("master-wordsmith", "Master Wordsmith",
                 "Complete at least 20 exercises and 10 quests with high mastery",
                 "📚", "general",
                 {"completedExercises": 20, "completedQuests": 10, "skillMastery": {"total": 80}}),
)

_BY_ID: dict[str, Achievement] = {a.id: a for a in ACHIEVEMENTS}


def get_all_achievements() -> list[Achievement]:
    """Return every achievement in catalogue order."""
    return list(ACHIEVEMENTS)


def get_achievement_by_id(achievement_id: str) -> Achievement | None:
    """Look up an achievement by ID."""
    return _BY_ID.get(achievement_id)


def check_achievement_unlocked(achievement_id: str, snapshot: ProgressSnapshot) -> bool:
    """Evaluate a catalogue achievement; unknown IDs are never unlocked."""
    achievement = get_achievement_by_id(achievement_id)
    if achievement is None:
        return False
    return is_unlocked(achievement.requirements, snapshot)


def unlocked_achievement_ids(snapshot: ProgressSnapshot) -> list[str]:
    """IDs of every catalogue achievement the snapshot satisfies, in catalogue order."""
    return [a.id for a in ACHIEVEMENTS if is_unlocked(a.requirements, snapshot)]
