"""Daily writing challenge generation.

A challenge is one short prompt shared by every student for a day. The
model proposes it as JSON; the proposal is validated and clamped, and a
built-in template is used whenever the model is unavailable or its reply
is unusable.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any

import structlog

from writequest.core.skills import SKILL_AREAS, SkillName
from writequest.llm.client import LLMClient, Message
from writequest.prompts.registry import get_prompt

logger = structlog.get_logger(__name__)

CHALLENGE_EXPIRY_HOURS = 24

MIN_WORDS = 50
MAX_WORDS = 300
DEFAULT_WORD_MINIMUM = 100

MIN_DIFFICULTY = 1
MAX_DIFFICULTY = 5


class ChallengeError(Exception):
    """Error with a daily challenge."""

    pass


@dataclass(frozen=True)
class ChallengeProposal:
    """A validated challenge ready to be stored."""

    title: str
    description: str
    prompt: str
    word_minimum: int
    skill_focus: SkillName
    difficulty: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "prompt": self.prompt,
            "wordMinimum": self.word_minimum,
            "skillFocus": self.skill_focus,
            "difficulty": self.difficulty,
        }


FALLBACK_CHALLENGES: tuple[ChallengeProposal, ...] = (
    ChallengeProposal(
        title="The Mysterious Door",
        description="Practice punctuation and sentence boundaries in a short scene.",
        prompt="You find a small door in the back of your closet that was never there before. "
        "Describe what happens when you open it. Check every sentence for a capital "
        "letter and end mark.",
        word_minimum=100,
        skill_focus="mechanics",
        difficulty=1,
    ),
    ChallengeProposal(
        title="Step by Step",
        description="Practice ordering events with clear transitions.",
        prompt="Explain how to do something you are good at, from start to finish. "
        "Use transition words like first, next, then and finally.",
        word_minimum=120,
        skill_focus="sequencing",
        difficulty=2,
    ),
    ChallengeProposal(
        title="Letter to Your Future Self",
        description="Practice writing in your own voice for a specific reader.",
        prompt="Write a letter to yourself to open in five years. Tell your future self what "
        "matters to you right now and what you hope has changed.",
        word_minimum=150,
        skill_focus="voice",
        difficulty=2,
    ),
)


def challenge_expiry(created_at: datetime, hours: int = CHALLENGE_EXPIRY_HOURS) -> datetime:
    """When a challenge created at ``created_at`` stops being current."""
    return created_at + timedelta(hours=hours)


def skill_for_day(today: date) -> SkillName:
    """Skill focus rotates day by day."""
    return SKILL_AREAS[today.toordinal() % len(SKILL_AREAS)]


def fallback_challenge(today: date) -> ChallengeProposal:
    """Built-in challenge for a day."""
    return FALLBACK_CHALLENGES[today.toordinal() % len(FALLBACK_CHALLENGES)]


def _clamp_int(value: Any, low: int, high: int, default: int) -> int:
    if isinstance(value, bool):
        return default
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return max(low, min(high, number))


def validate_proposal(raw: Any, today: date) -> ChallengeProposal:
    """Validate a model proposal.

    Raises:
        ChallengeError: If the proposal lacks a title or prompt
    """
    if not isinstance(raw, dict):
        raise ChallengeError("Challenge proposal must be a JSON object")

    title = raw.get("title")
    prompt = raw.get("prompt")
    if not isinstance(title, str) or not title.strip():
        raise ChallengeError("Challenge proposal is missing a title")
    if not isinstance(prompt, str) or not prompt.strip():
        raise ChallengeError("Challenge proposal is missing a prompt")

    description = raw.get("description")
    if not isinstance(description, str) or not description.strip():
        description = "Today's writing challenge."

    skill_focus = raw.get("skillFocus")
    if skill_focus not in SKILL_AREAS:
        skill_focus = skill_for_day(today)

    return ChallengeProposal(
        title=title.strip(),
        description=description.strip(),
        prompt=prompt.strip(),
        word_minimum=_clamp_int(raw.get("wordMinimum"), MIN_WORDS, MAX_WORDS, DEFAULT_WORD_MINIMUM),
        skill_focus=skill_focus,
        difficulty=_clamp_int(raw.get("difficulty"), MIN_DIFFICULTY, MAX_DIFFICULTY, MIN_DIFFICULTY),
    )


def generate_daily_challenge(client: LLMClient, today: date) -> ChallengeProposal:
    """Propose today's challenge, falling back to a built-in one."""
    if not client.is_configured():
        logger.warning("daily_challenge.llm_not_configured", date=today.isoformat())
        return fallback_challenge(today)

    skill = skill_for_day(today)
    messages = [
        Message(role="system", content=get_prompt("challenge/daily_system")),
        Message(
            role="user",
            content=get_prompt("challenge/daily_user", date=today.isoformat(), skill_focus=skill),
        ),
    ]

    try:
        raw = client.chat_json(messages, max_retries=0)
        proposal = validate_proposal(raw, today)
    except Exception as e:
        logger.warning("daily_challenge.generation_failed", date=today.isoformat(), error=str(e))
        return fallback_challenge(today)

    logger.info("daily_challenge.generated", date=today.isoformat(), skill_focus=proposal.skill_focus)
    return proposal
