"""Tests for progress bookkeeping."""

from datetime import date

import pytest

from writequest.config.app_config import GameSettings
from writequest.core.exercises import get_exercise_by_id
from writequest.core.progress_service import (
    award_achievements,
    complete_quest,
    default_progress,
    get_or_create_progress,
    level_for,
    merge_progress_update,
    record_exercise_attempt,
    record_writing_day,
    unlock_locations,
)
from writequest.core.skills import SkillMastery
from writequest.db import progress_repository


class TestDefaults:
    """Tests for default progress and levels."""

    def test_default_progress(self):
        """New students start at 10 mastery with the town hall open."""
        progress = default_progress(7)

        assert progress.skill_mastery == SkillMastery(10, 10, 10)
        assert progress.unlocked_locations == ["townHall"]
        assert progress.level == 1
        assert progress.currency == 0
        assert progress.achievements == []

    @pytest.mark.parametrize(
        "mastery,expected",
        [((0, 0, 0), 1), ((10, 10, 10), 1), ((20, 20, 20), 2), ((55, 60, 65), 6), ((100, 100, 100), 10)],
    )
    def test_level_for(self, mastery, expected):
        """One level per ten points of mean mastery, between 1 and 10."""
        assert level_for(SkillMastery(*mastery)) == expected

    def test_get_or_create_progress(self, make_user):
        """Progress is created once and then reused."""
        user = make_user()

        first = get_or_create_progress(user.id)
        second = get_or_create_progress(user.id)

        assert first.id == second.id
        assert progress_repository.get_progress_by_user_id(user.id) is not None


class TestMergeProgressUpdate:
    """Tests for partial updates."""

    def test_mastery_merged_per_skill(self):
        """Unmentioned skills keep their value; level follows."""
        progress = default_progress(1)

        merge_progress_update(progress, {"skill_mastery": {"voice": 70}})

        assert progress.skill_mastery == SkillMastery(10, 10, 70)
        assert progress.level == 3

    def test_lists_deduplicated(self):
        """List fields are replaced and deduplicated in order."""
        progress = default_progress(1)

        merge_progress_update(progress, {"completed_exercises": ["voice-1", "voice-2", "voice-1"]})

        assert progress.completed_exercises == ["voice-1", "voice-2"]

    def test_missing_keys_untouched(self):
        """Keys that aren't given are left alone."""
        progress = default_progress(1)
        progress.currency = 40

        merge_progress_update(progress, {"achievements": ["first-steps"]})

        assert progress.currency == 40
        assert progress.unlocked_locations == ["townHall"]


class TestAwardAchievements:
    """Tests for award_achievements."""

    def test_awards_once(self):
        """Newly met achievements are added with a currency reward, once."""
        progress = default_progress(1)
        progress.completed_exercises = ["mechanics-1"]

        assert award_achievements(progress, reward=10) == ["first-steps"]
        assert progress.currency == 10
        assert award_achievements(progress, reward=10) == []
        assert progress.currency == 10

    def test_earned_achievements_never_revoked(self):
        """Badges stay even if progress would no longer qualify."""
        progress = default_progress(1)
        progress.achievements = ["voice-master"]

        award_achievements(progress)

        assert "voice-master" in progress.achievements


class TestExerciseAttempts:
    """Tests for record_exercise_attempt."""

    def test_correct(self):
        """Correct answers complete the exercise and credit the skill."""
        progress = default_progress(1)

        record_exercise_attempt(progress, get_exercise_by_id("voice-1"), True)

        assert progress.completed_exercises == ["voice-1"]
        assert progress.skill_mastery.voice == 20
        assert progress.currency == 5

    def test_incorrect(self):
        """Wrong answers still earn a little."""
        progress = default_progress(1)

        record_exercise_attempt(progress, get_exercise_by_id("voice-1"), False)

        assert progress.completed_exercises == []
        assert progress.skill_mastery.voice == 12
        assert progress.currency == 1

    def test_mastery_capped(self):
        """Mastery never passes 100."""
        progress = default_progress(1)
        progress.skill_mastery = SkillMastery(95, 10, 10)

        record_exercise_attempt(progress, get_exercise_by_id("mechanics-1"), True)

        assert progress.skill_mastery.mechanics == 100

    def test_custom_settings(self):
        """Rewards come from the game settings."""
        progress = default_progress(1)
        settings = GameSettings(exercise_reward_correct=50, exercise_gain_correct=1)

        record_exercise_attempt(progress, get_exercise_by_id("sequencing-1"), True, settings)

        assert progress.currency == 50
        assert progress.skill_mastery.sequencing == 11


class TestCompleteQuest:
    """Tests for complete_quest."""

    def test_first_quest(self):
        """Completing a quest raises mastery and opens new locations."""
        progress = default_progress(1)

        unlocked = complete_quest(progress, "town-hall-1")

        assert progress.completed_quests == ["town-hall-1"]
        assert progress.skill_mastery == SkillMastery(15, 15, 25)
        assert progress.currency == 15
        assert unlocked == ["library", "amphitheater"]
        assert progress.unlocked_locations == ["townHall", "library", "amphitheater"]

    def test_idempotent(self):
        """Completing the same quest again changes nothing."""
        progress = default_progress(1)
        complete_quest(progress, "town-hall-1")

        unlocked = complete_quest(progress, "town-hall-1")

        assert unlocked == []
        assert progress.completed_quests == ["town-hall-1"]
        assert progress.currency == 15

    def test_gains_from_settings(self):
        """Quest mastery gains and reward come from the game settings."""
        progress = default_progress(1)
        settings = GameSettings(
            quest_reward=40,
            quest_gain_mechanics=1,
            quest_gain_sequencing=2,
            quest_gain_voice=95,
        )

        complete_quest(progress, "town-hall-1", settings)

        assert progress.skill_mastery == SkillMastery(11, 12, 100)
        assert progress.currency == 40

    def test_unlock_locations_directly(self):
        """Raising mastery by other means also opens locations."""
        progress = default_progress(1)
        progress.skill_mastery = SkillMastery(40, 30, 30)

        assert unlock_locations(progress) == ["library", "amphitheater", "cafe", "park"]


class TestRecordWritingDay:
    """Tests for record_writing_day."""

    def test_updates_streak_and_history(self):
        """The streak advances and today's history point is stored."""
        progress = default_progress(1)
        progress.current_streak = 2
        progress.longest_streak = 2
        progress.last_writing_date = "2026-03-09"

        state = record_writing_day(progress, date(2026, 3, 10))

        assert state.current_streak == 3
        assert progress.current_streak == 3
        assert progress.longest_streak == 3
        assert progress.last_writing_date == "2026-03-10"
        assert progress.progress_history[-1]["date"] == "2026-03-10"
        assert progress.progress_history[-1]["completedItems"] == 0
