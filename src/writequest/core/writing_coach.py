"""Writing coach helpers: writer's-block hints and location prompts."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import structlog

from writequest.core.quests import TownLocation
from writequest.llm.client import LLMClient
from writequest.prompts.registry import get_prompt

logger = structlog.get_logger(__name__)

MAX_CONTEXT_CHARS = 4000

FALLBACK_WRITERS_BLOCK_HELP = (
    "Try one of these to get moving again: "
    "1) Reread your last sentence and ask what your reader wants to know next. "
    "2) Write one sentence about how your main character or idea feels right now. "
    "3) List three details you could add, then pick the most interesting one."
)


@dataclass
class GeneratedPrompt:
    """A writing prompt tailored to a town location."""

    prompt: str
    scenario: str = ""
    guiding_questions: list[str] = field(default_factory=list)
    suggested_elements: list[str] = field(default_factory=list)
    challenge_element: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "prompt": self.prompt,
            "scenario": self.scenario,
            "guidingQuestions": list(self.guiding_questions),
            "suggestedElements": list(self.suggested_elements),
            "challengeElement": self.challenge_element,
        }


FALLBACK_PROMPTS: dict[str, GeneratedPrompt] = {
    "argumentative": GeneratedPrompt(
        prompt="The town council wants to replace the old playground with a parking lot. "
        "Write a speech for the council meeting arguing for or against the plan.",
        scenario="The town hall is packed and it's your turn at the microphone.",
        guiding_questions=["What is your position?", "What evidence supports it?"],
        suggested_elements=["A clear claim", "Two reasons with evidence", "A call to action"],
        challenge_element="Answer one argument the other side might make.",
    ),
    "informative": GeneratedPrompt(
        prompt="The librarian asks you to write a guide for new students explaining one "
        "topic you know a lot about.",
        scenario="A shelf labelled 'Written by Students' has one empty spot.",
        guiding_questions=["What does a beginner need to know first?", "What facts surprise people?"],
        suggested_elements=["An introduction", "Headings or clear sections", "A conclusion"],
        challenge_element="Include a fact you had to look up.",
    ),
    "narrative": GeneratedPrompt(
        prompt="Just before the show starts, the lead actor disappears. Tell the story of "
        "what happens next on the amphitheater stage.",
        scenario="The curtain is about to rise and the crowd is waiting.",
        guiding_questions=["Who steps in?", "What goes wrong, and how is it fixed?"],
        suggested_elements=["A strong opening hook", "Dialogue", "A satisfying ending"],
        challenge_element="Tell part of the story from an unexpected point of view.",
    ),
    "reflective": GeneratedPrompt(
        prompt="Sitting in the café, you overhear someone describe a day that changed their "
        "mind about something. Write about a time your own mind changed.",
        scenario="Rain taps on the café window while you sip something warm.",
        guiding_questions=["What did you believe before?", "What made you see it differently?"],
        suggested_elements=["The moment of change", "How you felt", "What you learned"],
        challenge_element="End with a question you still wonder about.",
    ),
    "descriptive": GeneratedPrompt(
        prompt="Find a quiet spot in the nature park and describe it so clearly that a reader "
        "could find it with their eyes closed.",
        scenario="The path splits and one trail leads somewhere you've never been.",
        guiding_questions=["What do you hear first?", "What does the air smell like?"],
        suggested_elements=["All five senses", "Precise nouns and verbs", "A comparison"],
        challenge_element="Describe the same place at a different time of day.",
    ),
}


def writers_block_help(
    title: str,
    prompt: str,
    current_content: str,
    client: LLMClient,
) -> str:
    """Coach a stuck student without writing the piece for them."""
    if not client.is_configured():
        logger.warning("coach.llm_not_configured", feature="writers_block")
        return FALLBACK_WRITERS_BLOCK_HELP

    try:
        return client.simple_chat(
            system_prompt=get_prompt("coach/writers_block_system"),
            user_message=get_prompt(
                "coach/writers_block_user",
                title=title,
                prompt=prompt,
                current_content=current_content[-MAX_CONTEXT_CHARS:],
            ),
        ).strip() or FALLBACK_WRITERS_BLOCK_HELP
    except Exception as e:
        logger.warning("coach.writers_block_failed", error=str(e))
        return FALLBACK_WRITERS_BLOCK_HELP


def _str_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [item.strip() for item in value if isinstance(item, str) and item.strip()]


def generate_writing_prompt(location: TownLocation, client: LLMClient) -> GeneratedPrompt:
    """Fresh prompt for a town location, or the location type's built-in one."""
    fallback = FALLBACK_PROMPTS[location.type]
    if not client.is_configured():
        logger.warning("coach.llm_not_configured", feature="location_prompt")
        return fallback

    try:
        raw = client.simple_json(
            system_prompt=get_prompt("coach/location_prompt_system"),
            user_message=get_prompt(
                "coach/location_prompt_user",
                location_name=location.name,
                location_type=location.type,
                location_description=location.description,
            ),
        )
    except Exception as e:
        logger.warning("coach.location_prompt_failed", location_id=location.id, error=str(e))
        return fallback

    if not isinstance(raw, dict) or not isinstance(raw.get("prompt"), str) or not raw["prompt"].strip():
        logger.warning("coach.location_prompt_unusable", location_id=location.id)
        return fallback

    challenge = raw.get("challengeElement")
    scenario = raw.get("scenario")
    return GeneratedPrompt(
        prompt=raw["prompt"].strip(),
        scenario=scenario.strip() if isinstance(scenario, str) else "",
        guiding_questions=_str_list(raw.get("guidingQuestions")),
        suggested_elements=_str_list(raw.get("suggestedElements")),
        challenge_element=challenge.strip() if isinstance(challenge, str) else "",
    )
