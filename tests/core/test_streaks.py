"""Tests for writing streaks and progress history."""

from datetime import date, datetime

import pytest

from writequest.core.skills import SkillMastery
from writequest.core.streaks import (
    advance_streak,
    history_entry,
    parse_day,
    record_history,
)

TODAY = date(2026, 3, 10)


class TestAdvanceStreak:
    """Tests for advance_streak."""

    def test_first_day(self):
        """A first writing day starts a streak of one."""
        state = advance_streak(0, 0, None, TODAY)

        assert state.current_streak == 1
        assert state.longest_streak == 1
        assert state.last_writing_date == TODAY

    def test_consecutive_day(self):
        """Writing the day after extends the streak."""
        state = advance_streak(4, 6, "2026-03-09", TODAY)

        assert state.current_streak == 5
        assert state.longest_streak == 6

    def test_new_record(self):
        """The longest streak follows the current one upward."""
        state = advance_streak(6, 6, date(2026, 3, 9), TODAY)

        assert state.longest_streak == 7

    def test_same_day_unchanged(self):
        """Writing twice in one day doesn't raise the streak."""
        state = advance_streak(3, 5, "2026-03-10", TODAY)

        assert state.current_streak == 3
        assert state.longest_streak == 5

    def test_gap_resets(self):
        """Missing a day starts over."""
        state = advance_streak(9, 9, "2026-03-07", TODAY)

        assert state.current_streak == 1
        assert state.longest_streak == 9

    def test_to_dict(self):
        """Wire format uses camelCase and ISO dates."""
        assert advance_streak(0, 0, None, TODAY).to_dict() == {
            "currentStreak": 1,
            "longestStreak": 1,
            "lastWritingDate": "2026-03-10",
        }


class TestParseDay:
    """Tests for parse_day."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (None, None),
            ("", None),
            ("2026-03-09", date(2026, 3, 9)),
            ("2026-03-09T23:15:00", date(2026, 3, 9)),
            (datetime(2026, 3, 9, 8, 0), date(2026, 3, 9)),
        ],
    )
    def test_parse(self, value, expected):
        """Dates, datetimes and ISO text are accepted."""
        assert parse_day(value) == expected


class TestRecordHistory:
    """Tests for record_history."""

    def _entry(self, day):
        return history_entry(day, SkillMastery(10, 20, 30), 2, 4)

    def test_entry_shape(self):
        """History points record mastery, level and completed items."""
        assert self._entry(TODAY) == {
            "date": "2026-03-10",
            "skillMastery": {"mechanics": 10, "sequencing": 20, "voice": 30},
            "level": 2,
            "completedItems": 4,
        }

    def test_same_day_replaced(self):
        """A second point on the same date replaces the first."""
        history = record_history([], self._entry(TODAY))
        newer = history_entry(TODAY, SkillMastery(50, 50, 50), 5, 9)

        history = record_history(history, newer)

        assert history == [newer]

    def test_trimmed_to_limit(self):
        """Only the newest entries are kept."""
        history = []
        for day in range(1, 6):
            history = record_history(history, self._entry(date(2026, 3, day)), max_entries=3)

        assert [h["date"] for h in history] == ["2026-03-03", "2026-03-04", "2026-03-05"]

    def test_limit_of_one(self):
        """A limit of one keeps only the newest entry."""
        history = record_history([self._entry(date(2026, 3, 1))], self._entry(TODAY), max_entries=1)

        assert [h["date"] for h in history] == ["2026-03-10"]

    @pytest.mark.parametrize("limit", [0, -5])
    def test_limit_below_one(self, limit):
        """Limits below one are rejected instead of keeping everything."""
        with pytest.raises(ValueError, match="at least 1"):
            record_history([self._entry(date(2026, 3, 1))], self._entry(TODAY), max_entries=limit)

    def test_input_not_mutated(self):
        """The input list is left alone."""
        history = [self._entry(date(2026, 3, 1))]

        record_history(history, self._entry(TODAY))

        assert len(history) == 1
