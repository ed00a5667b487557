"""AI writing feedback.

Responsibilities:
- Build the fixed-shape analysis prompt for a writing sample
- Ask the model for structured JSON and normalize it into AIFeedback,
  substituting documented defaults for anything missing
- Recommend follow-up exercises, degrading to a fixed default list

Output contract (camelCase, see AIFeedback.to_dict):
    {overallFeedback, strengthsAnalysis, areasToImprove,
     mechanicsScore, sequencingScore, voiceScore,
     suggestions: {mechanics[], sequencing[], voice[]}, nextSteps}
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Any

import structlog

from writequest.core.exercises import SUGGESTION_ID_PATTERN
from writequest.core.skills import SKILL_AREAS, SkillMastery, clamp_score
from writequest.llm.client import LLMClient, Message
from writequest.prompts.registry import get_prompt

logger = structlog.get_logger(__name__)

# =============================================================================
# DEFAULTS
# =============================================================================

DEFAULT_SCORE = 70

DEFAULT_OVERALL_FEEDBACK = "Overall good work with some areas to improve."
DEFAULT_STRENGTHS = "Strong effort on completing the assignment."
DEFAULT_AREAS_TO_IMPROVE = "Focus on improving your writing structure."
DEFAULT_NEXT_STEPS = "Practice writing more persuasive paragraphs."

DEFAULT_SUGGESTIONS: dict[str, tuple[str, ...]] = {
    "mechanics": ("Review punctuation rules",),
    "sequencing": ("Practice paragraph transitions",),
    "voice": ("Consider your audience more carefully",),
}

DEFAULT_SUGGESTED_EXERCISES: tuple[str, ...] = ("mechanics-1", "sequencing-1", "voice-1")

MAX_SUGGESTED_EXERCISES = 5

# Used when no model is configured, so students still get a usable report
FALLBACK_SCORE_RANGE = (60, 79)

FALLBACK_TEXT = {
    "overallFeedback": (
        "Your writing shows good effort and contains some interesting ideas. "
        "There are opportunities to strengthen your mechanics and organization."
    ),
    "strengthsAnalysis": (
        "You've demonstrated creativity in your approach. Your voice is beginning "
        "to develop and you have some strong word choices."
    ),
    "areasToImprove": (
        "Focus on improving sentence structure and grammar. Work on organizing your "
        "paragraphs with clearer transitions and topic sentences."
    ),
    "nextSteps": (
        "Practice writing structured paragraphs with clear topic sentences. "
        "Review basic grammar rules for sentence construction."
    ),
}

FALLBACK_SUGGESTIONS: dict[str, list[str]] = {
    "mechanics": [
        "Review your use of punctuation, especially commas and periods",
        "Practice writing complete sentences without fragments",
        "Double-check spelling of key vocabulary words",
    ],
    "sequencing": [
        "Make sure each paragraph has a clear topic sentence",
        "Use transition words between paragraphs",
        "Organize related ideas together within paragraphs",
    ],
    "voice": [
        "Consider your audience when selecting vocabulary",
        "Vary sentence structure to create rhythm",
        "Use descriptive language to enhance your points",
    ],
}


# =============================================================================
# DATA CLASSES
# =============================================================================


@dataclass
class AIFeedback:
    """Normalized feedback for one writing sample."""

    overall_feedback: str = DEFAULT_OVERALL_FEEDBACK
    strengths_analysis: str = DEFAULT_STRENGTHS
    areas_to_improve: str = DEFAULT_AREAS_TO_IMPROVE
    mechanics_score: int = DEFAULT_SCORE
    sequencing_score: int = DEFAULT_SCORE
    voice_score: int = DEFAULT_SCORE
    suggestions: dict[str, list[str]] = field(
        default_factory=lambda: {k: list(v) for k, v in DEFAULT_SUGGESTIONS.items()}
    )
    next_steps: str = DEFAULT_NEXT_STEPS

    def skills_assessed(self) -> SkillMastery:
        """Sub-scores as a mastery triple."""
        return SkillMastery(
            mechanics=self.mechanics_score,
            sequencing=self.sequencing_score,
            voice=self.voice_score,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to the camelCase wire format."""
        return {
            "overallFeedback": self.overall_feedback,
            "strengthsAnalysis": self.strengths_analysis,
            "areasToImprove": self.areas_to_improve,
            "mechanicsScore": self.mechanics_score,
            "sequencingScore": self.sequencing_score,
            "voiceScore": self.voice_score,
            "suggestions": {k: list(v) for k, v in self.suggestions.items()},
            "nextSteps": self.next_steps,
        }


@dataclass
class WritingAnalysis:
    """Feedback plus the skill scores it implies."""

    feedback: AIFeedback
    skills_assessed: SkillMastery
    used_fallback: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "feedback": self.feedback.to_dict(),
            "skillsAssessed": self.skills_assessed.to_dict(),
        }


class WritingAnalysisError(Exception):
    """Error analyzing a writing sample."""

    pass


# =============================================================================
# NORMALIZATION
# =============================================================================


def _text(value: Any, default: str) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return default


def _score(value: Any) -> int:
    """Coerce a sub-score to 0-100; anything unusable becomes DEFAULT_SCORE."""
    if isinstance(value, bool) or value is None:
        return DEFAULT_SCORE
    if isinstance(value, (int, float)):
        return clamp_score(value)
    if isinstance(value, str):
        try:
            return clamp_score(float(value.strip()))
        except ValueError:
            return DEFAULT_SCORE
    return DEFAULT_SCORE


def _suggestion_list(value: Any, default: tuple[str, ...]) -> list[str]:
    if isinstance(value, list):
        items = [item.strip() for item in value if isinstance(item, str) and item.strip()]
        if items:
            return items
    return list(default)


def normalize_feedback(raw: Any) -> AIFeedback:
    """Turn an upstream JSON payload into a complete AIFeedback.

    Every field missing, empty or of the wrong type is replaced by its
    documented default, so the result never has an absent field.
    """
    data = raw if isinstance(raw, dict) else {}
    suggestions = data.get("suggestions")
    if not isinstance(suggestions, dict):
        suggestions = {}

    return AIFeedback(
        overall_feedback=_text(data.get("overallFeedback"), DEFAULT_OVERALL_FEEDBACK),
        strengths_analysis=_text(data.get("strengthsAnalysis"), DEFAULT_STRENGTHS),
        areas_to_improve=_text(data.get("areasToImprove"), DEFAULT_AREAS_TO_IMPROVE),
        mechanics_score=_score(data.get("mechanicsScore")),
        sequencing_score=_score(data.get("sequencingScore")),
        voice_score=_score(data.get("voiceScore")),
        suggestions={
            skill: _suggestion_list(suggestions.get(skill), DEFAULT_SUGGESTIONS[skill])
            for skill in SKILL_AREAS
        },
        next_steps=_text(data.get("nextSteps"), DEFAULT_NEXT_STEPS),
    )


# =============================================================================
# ANALYSIS
# =============================================================================


def build_analysis_messages(
    title: str,
    content: str,
    quest_id: str,
    grade: int,
) -> list[Message]:
    """Build the system/user messages for a writing analysis request."""
    return [
        Message(role="system", content=get_prompt("feedback/analyze_system", grade=grade)),
        Message(
            role="user",
            content=get_prompt(
                "feedback/analyze_user",
                title=title,
                content=content,
                quest_id=quest_id,
            ),
        ),
    ]


def fallback_analysis(rng: random.Random | None = None) -> WritingAnalysis:
    """Generic report used when no model is configured."""
    rng = rng or random.Random()
    low, high = FALLBACK_SCORE_RANGE
    feedback = AIFeedback(
        overall_feedback=FALLBACK_TEXT["overallFeedback"],
        strengths_analysis=FALLBACK_TEXT["strengthsAnalysis"],
        areas_to_improve=FALLBACK_TEXT["areasToImprove"],
        mechanics_score=rng.randint(low, high),
        sequencing_score=rng.randint(low, high),
        voice_score=rng.randint(low, high),
        suggestions={k: list(v) for k, v in FALLBACK_SUGGESTIONS.items()},
        next_steps=FALLBACK_TEXT["nextSteps"],
    )
    return WritingAnalysis(
        feedback=feedback,
        skills_assessed=feedback.skills_assessed(),
        used_fallback=True,
    )


def analyze_writing(
    title: str,
    content: str,
    quest_id: str,
    grade: int,
    client: LLMClient,
) -> WritingAnalysis:
    """Analyze a writing sample with the language model.

    Args:
        title: Submission title
        content: Submission body
        quest_id: Quest the writing answers
        grade: Student grade level used to calibrate the rubric
        client: LLM client

    Returns:
        WritingAnalysis with normalized feedback and assessed skills

    Raises:
        WritingAnalysisError: If the model call or its JSON fails
    """
    if not client.is_configured():
        logger.warning("feedback.llm_not_configured", quest_id=quest_id)
        return fallback_analysis()

    messages = build_analysis_messages(title, content, quest_id, grade)

    try:
        raw = client.chat_json(messages, max_retries=0)
    except Exception as e:
        logger.error("feedback.analysis_failed", quest_id=quest_id, error=str(e))
        raise WritingAnalysisError("Failed to analyze writing sample") from e

    feedback = normalize_feedback(raw)
    logger.info(
        "feedback.analysis_completed",
        quest_id=quest_id,
        mechanics=feedback.mechanics_score,
        sequencing=feedback.sequencing_score,
        voice=feedback.voice_score,
    )
    return WritingAnalysis(feedback=feedback, skills_assessed=feedback.skills_assessed())


# =============================================================================
# EXERCISE SUGGESTIONS
# =============================================================================


def rank_skill_areas(feedback: AIFeedback) -> list[tuple[str, int]]:
    """Skill areas ordered by feedback score, weakest first."""
    return feedback.skills_assessed().ranked()


def build_suggestion_messages(
    feedback: AIFeedback,
    current_mastery: SkillMastery,
) -> list[Message]:
    """Build the messages for the exercise recommendation request."""
    ranked = ", ".join(f"{name} ({score})" for name, score in rank_skill_areas(feedback))
    return [
        Message(role="system", content=get_prompt("feedback/suggest_system")),
        Message(
            role="user",
            content=get_prompt(
                "feedback/suggest_user",
                mechanics_score=feedback.mechanics_score,
                sequencing_score=feedback.sequencing_score,
                voice_score=feedback.voice_score,
                mechanics_mastery=current_mastery.mechanics,
                sequencing_mastery=current_mastery.sequencing,
                voice_mastery=current_mastery.voice,
                ranked_areas=ranked,
                areas_to_improve=feedback.areas_to_improve,
            ),
        ),
    ]


def _extract_exercise_ids(raw: Any) -> list[str]:
    if isinstance(raw, dict):
        raw = raw.get("exercises")
    if not isinstance(raw, list):
        return []

    ids: list[str] = []
    for item in raw:
        if isinstance(item, str) and SUGGESTION_ID_PATTERN.match(item) and item not in ids:
            ids.append(item)
    return ids[:MAX_SUGGESTED_EXERCISES]


def heuristic_suggestions(feedback: AIFeedback, current_mastery: SkillMastery) -> list[str]:
    """Suggest exercises without a model: two for the weakest skill, one each for the rest.

    The level tracks current mastery (one level per 10 points).
    """
    suggestions = []
    for position, (skill, _) in enumerate(rank_skill_areas(feedback)):
        level = min(10, int(current_mastery.get(skill)) // 10 + 1)
        suggestions.append(f"{skill}-{level}")
        if position == 0 and level < 10:
            suggestions.append(f"{skill}-{level + 1}")
    return suggestions


def generate_suggested_exercises(
    feedback: AIFeedback,
    current_mastery: SkillMastery,
    client: LLMClient,
) -> list[str]:
    """Recommend follow-up exercise IDs.

    Never raises: any failure yields DEFAULT_SUGGESTED_EXERCISES.
    """
    try:
        if not client.is_configured():
            logger.warning("feedback.suggestions_llm_not_configured")
            return heuristic_suggestions(feedback, current_mastery)

        raw = client.chat_json(
            build_suggestion_messages(feedback, current_mastery),
            max_retries=0,
        )
        ids = _extract_exercise_ids(raw)
        if not ids:
            logger.warning("feedback.suggestions_unusable", raw=str(raw)[:200])
            return list(DEFAULT_SUGGESTED_EXERCISES)
        return ids
    except Exception as e:
        logger.error("feedback.suggestions_failed", error=str(e))
        return list(DEFAULT_SUGGESTED_EXERCISES)
