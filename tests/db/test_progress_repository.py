"""Tests for the progress repository."""

import sqlite3

import pytest

from writequest.core.progress_service import default_progress
from writequest.core.skills import SkillMastery
from writequest.db import progress_repository


class TestProgressRepository:
    """Tests for progress persistence."""

    def test_insert_and_get(self, make_user):
        """JSON columns round-trip."""
        user = make_user()
        progress = default_progress(user.id)
        progress.completed_exercises = ["voice-1"]
        progress.progress_history = [{"date": "2026-03-10", "level": 1}]

        stored = progress_repository.insert_progress(progress)
        loaded = progress_repository.get_progress_by_user_id(user.id)

        assert stored.id is not None
        assert loaded.skill_mastery == SkillMastery(10, 10, 10)
        assert loaded.completed_exercises == ["voice-1"]
        assert loaded.unlocked_locations == ["townHall"]
        assert loaded.progress_history == [{"date": "2026-03-10", "level": 1}]
        assert loaded.daily_challenge_completed is False

    def test_one_row_per_user(self, make_user):
        """A second insert for the same user fails."""
        user = make_user()
        progress_repository.insert_progress(default_progress(user.id))

        with pytest.raises(sqlite3.IntegrityError):
            progress_repository.insert_progress(default_progress(user.id))

    def test_save(self, make_user):
        """Saving writes every field back."""
        user = make_user()
        progress = progress_repository.insert_progress(default_progress(user.id))
        progress.skill_mastery = SkillMastery(30, 40, 50)
        progress.currency = 25
        progress.achievements = ["first-steps"]
        progress.daily_challenge_id = "4"
        progress.daily_challenge_completed = True
        progress.last_writing_date = "2026-03-10"

        progress_repository.save_progress(progress)
        loaded = progress_repository.get_progress_by_user_id(user.id)

        assert loaded.skill_mastery == SkillMastery(30, 40, 50)
        assert loaded.currency == 25
        assert loaded.achievements == ["first-steps"]
        assert loaded.daily_challenge_id == "4"
        assert loaded.daily_challenge_completed is True
        assert loaded.last_writing_date == "2026-03-10"

    def test_save_missing(self, db_path):
        """Saving progress that was never inserted raises ValueError."""
        with pytest.raises(ValueError):
            progress_repository.save_progress(default_progress(12345))

    def test_to_dict(self, make_user):
        """Wire format is camelCase."""
        user = make_user()
        data = progress_repository.insert_progress(default_progress(user.id)).to_dict()

        assert data["userId"] == user.id
        assert data["skillMastery"] == {"mechanics": 10, "sequencing": 10, "voice": 10}
        assert data["currentStreak"] == 0
