"""Skill mastery model.

Every student is scored 0-100 along three writing-skill axes:
mechanics, sequencing and voice.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

SkillName = Literal["mechanics", "sequencing", "voice"]

SKILL_AREAS: tuple[SkillName, ...] = ("mechanics", "sequencing", "voice")

MIN_SCORE = 0
MAX_SCORE = 100


class SkillValidationError(ValueError):
    """Raised when a mastery score is outside 0-100."""

    pass


def clamp_score(value: float) -> int:
    """Round and clamp a score into 0-100."""
    return int(max(MIN_SCORE, min(MAX_SCORE, round(value))))


@dataclass(frozen=True)
class SkillMastery:
    """Per-skill mastery triple."""

    mechanics: float = 0
    sequencing: float = 0
    voice: float = 0

    def __post_init__(self) -> None:
        for name in SKILL_AREAS:
            value = getattr(self, name)
            if not MIN_SCORE <= value <= MAX_SCORE:
                raise SkillValidationError(
                    f"{name} mastery must be between {MIN_SCORE} and {MAX_SCORE}, got {value}"
                )

    def get(self, skill: str) -> float:
        """Score for a skill name."""
        if skill not in SKILL_AREAS:
            raise KeyError(skill)
        return getattr(self, skill)

    def average(self) -> float:
        """Unweighted mean of the three scores."""
        return (self.mechanics + self.sequencing + self.voice) / 3

    def ranked(self) -> list[tuple[SkillName, float]]:
        """Skills ordered weakest first; ties keep mechanics/sequencing/voice order."""
        return sorted(
            ((name, self.get(name)) for name in SKILL_AREAS),
            key=lambda item: item[1],
        )

    def merged(self, updates: dict[str, Any]) -> SkillMastery:
        """Return a copy with the given skills replaced (None values are ignored)."""
        values = self.to_dict()
        for name in SKILL_AREAS:
            if updates.get(name) is not None:
                values[name] = updates[name]
        return SkillMastery(**values)

    def to_dict(self) -> dict[str, float]:
        """Convert to dictionary for JSON serialization."""
        return {
            "mechanics": self.mechanics,
            "sequencing": self.sequencing,
            "voice": self.voice,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> SkillMastery:
        """Build from a (possibly partial) dictionary; missing skills are 0."""
        data = data or {}
        return cls(
            mechanics=data.get("mechanics", 0) or 0,
            sequencing=data.get("sequencing", 0) or 0,
            voice=data.get("voice", 0) or 0,
        )
