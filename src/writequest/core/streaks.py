"""Daily writing streaks and progress history."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any

from writequest.core.skills import SkillMastery

MAX_HISTORY_ENTRIES = 90


@dataclass(frozen=True)
class StreakState:
    """Streak counters after a writing day is recorded."""

    current_streak: int
    longest_streak: int
    last_writing_date: date

    def to_dict(self) -> dict[str, Any]:
        return {
            "currentStreak": self.current_streak,
            "longestStreak": self.longest_streak,
            "lastWritingDate": self.last_writing_date.isoformat(),
        }


def parse_day(value: str | date | datetime | None) -> date | None:
    """Read a stored writing date (ISO date or datetime text)."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.fromisoformat(value).date()


def advance_streak(
    current: int,
    longest: int,
    last_writing_date: str | date | None,
    today: date,
) -> StreakState:
    """Record that the student wrote today.

    Writing again on the same day never raises the streak, writing on the
    day after the last writing day extends it, and any gap starts over at 1.
    """
    last = parse_day(last_writing_date)

    if last == today:
        current = max(current, 1)
    elif last == today - timedelta(days=1):
        current += 1
    else:
        current = 1

    return StreakState(
        current_streak=current,
        longest_streak=max(current, longest),
        last_writing_date=today,
    )


def history_entry(
    day: date,
    mastery: SkillMastery,
    level: int,
    completed_items: int,
) -> dict[str, Any]:
    """Build one progress history point."""
    return {
        "date": day.isoformat(),
        "skillMastery": mastery.to_dict(),
        "level": level,
        "completedItems": completed_items,
    }


def record_history(
    history: list[dict[str, Any]],
    entry: dict[str, Any],
    max_entries: int = MAX_HISTORY_ENTRIES,
) -> list[dict[str, Any]]:
    """Return history with ``entry`` recorded.

    An entry for the same date is replaced in place; otherwise the entry is
    appended and the oldest entries are dropped beyond ``max_entries``.

    Raises:
        ValueError: If ``max_entries`` is below 1
    """
    if max_entries < 1:
        raise ValueError(f"max_entries must be at least 1, got {max_entries}")

    updated = list(history)
    for index, existing in enumerate(updated):
        if existing.get("date") == entry["date"]:
            updated[index] = entry
            return updated

    updated.append(entry)
    if len(updated) > max_entries:
        updated = updated[-max_entries:]
    return updated
