"""Exercise catalogue, map status and attempt grading.

Exercises are short skill drills: multiple-choice items graded by option
index, and writing items graded by minimum word count. An exercise of
level N opens once the student's mastery in its skill reaches (N - 1) * 10.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Literal

import structlog

from writequest.core.skills import SkillMastery, SkillName

logger = structlog.get_logger(__name__)

ExerciseType = Literal["multiple-choice", "writing"]
ExerciseStatus = Literal["completed", "current", "available", "locked"]

MASTERY_PER_LEVEL = 10

# Identifiers the recommender may hand out: mechanics-1 ... voice-10
SUGGESTION_ID_PATTERN = re.compile(r"^(mechanics|sequencing|voice)-([1-9]|10)$")


class ExerciseAnswerError(ValueError):
    """Raised when an answer does not fit the exercise type."""

    pass


@dataclass(frozen=True)
class Exercise:
    """A single skill drill."""

    id: str
    title: str
    level: int
    skill_type: SkillName
    type: ExerciseType
    instructions: str
    content: str
    options: tuple[str, ...] = ()
    correct_option_index: int | None = None
    prompt: str | None = None
    min_word_count: int | None = None
    example_response: str | None = None

    @property
    def mastery_requirement(self) -> int:
        """Mastery needed in this exercise's skill before it opens."""
        return (self.level - 1) * MASTERY_PER_LEVEL

    def to_dict(self, include_answer: bool = False) -> dict[str, Any]:
        """Convert to camelCase dictionary; answers are hidden by default."""
        result: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "level": self.level,
            "skillType": self.skill_type,
            "type": self.type,
            "instructions": self.instructions,
            "content": self.content,
        }
        if self.options:
            result["options"] = list(self.options)
        if self.prompt is not None:
            result["prompt"] = self.prompt
        if self.min_word_count is not None:
            result["minWordCount"] = self.min_word_count
        if include_answer:
            if self.correct_option_index is not None:
                result["correctOptionIndex"] = self.correct_option_index
            if self.example_response is not None:
                result["exampleResponse"] = self.example_response
        return result


@dataclass
class AttemptGrade:
    """Outcome of grading one attempt."""

    exercise_id: str
    is_correct: bool
    feedback: str
    word_count: int | None = None
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "exerciseId": self.exercise_id,
            "isCorrect": self.is_correct,
            "feedback": self.feedback,
        }
        if self.word_count is not None:
            result["wordCount"] = self.word_count
        if self.details:
            result["details"] = dict(self.details)
        return result


# =============================================================================
# CATALOGUE
# =============================================================================


def _mc(id, title, level, skill, instructions, content, options, correct) -> Exercise:
    return Exercise(
        id=id,
        title=title,
        level=level,
        skill_type=skill,
        type="multiple-choice",
        instructions=instructions,
        content=content,
        options=tuple(options),
        correct_option_index=correct,
    )


EXERCISES: tuple[Exercise, ...] = (
    # Mechanics
    _mc("mechanics-1", "Grammar Basics", 1, "mechanics",
        "Choose the sentence with correct grammar",
        "Read each option and select the sentence with proper grammar.",
        ["The books is on the table.", "The books are on the table.",
         "The books on the table.", "The books be on the table."], 1),
    _mc("mechanics-2", "Punctuation", 2, "mechanics",
        "Select the correctly punctuated sentence",
        "Choose the option with proper punctuation.",
        ["Where are you going.", "Where are you going!",
         "Where are you going?", "Where are you going,"], 2),
    _mc("mechanics-3", "Subject-Verb Agreement", 3, "mechanics",
        "Select the sentence with correct subject-verb agreement",
        "Read each option and choose the sentence where the subject and verb properly agree.",
        ["The team are working on different projects.",
         "The team is working on different projects.",
         "The group of students are working on their projects.",
         "The group of students is working on their projects."], 3),
    _mc("mechanics-4", "Tense Consistency", 4, "mechanics",
        "Choose the sentence with consistent verb tense",
        "Identify the sentence that maintains a consistent verb tense throughout.",
        ["She went to the store and buys some apples.",
         "She goes to the store and bought some apples.",
         "She went to the store and bought some apples.",
         "She goes to the store and buys some apples, then she left."], 2),
    _mc("mechanics-5", "Apostrophe Usage", 5, "mechanics",
        "Select the sentence with correct apostrophe usage",
        "Identify proper use of apostrophes in possessives and contractions.",
        ["The dogs bone is under the table.", "The dog's bone is under the table.",
         "The dogs' bone is under the table.", "The dog's bone's under the table."], 1),
    # Sequencing
    _mc("sequencing-1", "Paragraph Order", 1, "sequencing",
        "Choose the correct sequence for these sentences",
        "Which order would make these sentences a logical paragraph?\n"
        "1. Then, add the eggs and mix well.\n2. First, combine the flour and sugar.\n"
        "3. Finally, bake for 30 minutes.\n4. Next, pour the batter into a pan.",
        ["1, 2, 3, 4", "2, 1, 4, 3", "4, 3, 2, 1", "2, 3, 1, 4"], 1),
    _mc("sequencing-2", "Topic Sentences", 2, "sequencing",
        "Identify the topic sentence",
        "Although many people think of spiders as insects, they are actually arachnids. "
        "Spiders have eight legs, while insects have only six. Unlike insects, spiders don't "
        "have antennae or wings. Another difference is that spiders have two body segments, "
        "while insects have three. These differences are important to scientists who study arthropods.",
        ["Spiders have eight legs, while insects have only six.",
         "Although many people think of spiders as insects, they are actually arachnids.",
         "These differences are important to scientists who study arthropods.",
         "Another difference is that spiders have two body segments, while insects have three."], 1),
    _mc("sequencing-3", "Paragraph Flow", 3, "sequencing",
        "Select the sentence that best continues the paragraph",
        "Recycling has many benefits for our environment. It reduces the amount of waste sent "
        "to landfills. It also conserves natural resources and prevents pollution.",
        ["However, not everyone agrees about climate change.",
         "My family recycles paper, plastic, and glass.",
         "Furthermore, recycling helps save energy and reduces greenhouse gas emissions.",
         "Plastic water bottles are very common litter items."], 2),
    _mc("sequencing-4", "Transition Words", 4, "sequencing",
        "Choose the best transition word or phrase",
        "I wanted to go to the concert. __________, I couldn't afford the tickets.",
        ["Furthermore", "However", "Similarly", "Consequently"], 1),
    _mc("sequencing-5", "Logical Organization", 5, "sequencing",
        "Identify the best organizational structure",
        "You're writing an essay about the causes and effects of climate change. "
        "Which organizational structure would work best?",
        ["Chronological order (events by time)", "Cause and effect structure",
         "Compare and contrast structure", "Spatial organization (by location)"], 1),
    # Writing
    Exercise(
        id="mechanics-writing-1",
        title="Fix Grammar Errors",
        level=3,
        skill_type="mechanics",
        type="writing",
        instructions="Rewrite the paragraph, correcting all grammar errors",
        content="In this exercise, you will practice identifying and fixing grammar errors in a short paragraph.",
        prompt=(
            "The following paragraph contains several grammar errors. Rewrite it with correct grammar:\n\n"
            "Last week, me and my friend goes to the store. We buyed some snacks and drinks for the party. "
            "When we gets home, my sister help us to set up. There was many people at the party. "
            "Everyone have a good time."
        ),
        min_word_count=50,
        example_response=(
            "Last week, my friend and I went to the store. We bought some snacks and drinks for the party. "
            "When we got home, my sister helped us to set up. There were many people at the party. "
            "Everyone had a good time."
        ),
    ),
    Exercise(
        id="voice-writing-1",
        title="Write a Personal Narrative",
        level=3,
        skill_type="voice",
        type="writing",
        instructions="Write a short personal narrative about a memorable experience",
        content="Practice using descriptive language and appropriate tone to convey your personal experience.",
        prompt=(
            "Write a short personal narrative about a time when you tried something new. How did you feel "
            "before, during, and after the experience? Use descriptive language that engages the reader's senses."
        ),
        min_word_count=100,
    ),
    # Voice
    _mc("voice-1", "Audience Awareness", 1, "voice",
        "Select the sentence with appropriate tone for a formal essay",
        "You're writing a research paper for school. Which sentence has the most appropriate tone?",
        ["This stuff about climate change is pretty scary, you know?",
         "Climate change is like, a really big problem for everyone.",
         "The evidence suggests that climate change poses significant challenges to global ecosystems.",
         "OMG! Climate change is THE WORST thing ever!!!"], 2),
    _mc("voice-2", "Vivid Language", 2, "voice",
        "Choose the sentence with the most vivid descriptive language",
        "Select the option that paints the clearest picture in the reader's mind.",
        ["The dog ran in the yard.",
         "The golden retriever sprinted across the sun-dappled lawn, ears flapping in the breeze.",
         "The canine moved quickly outside in the yard area.",
         "The dog, which was in the yard, ran around a lot and seemed happy about it."], 1),
    _mc("voice-3", "Active vs. Passive Voice", 3, "voice",
        "Identify the sentence written in active voice",
        "Select the option that uses active rather than passive voice.",
        ["The ball was thrown by the pitcher.", "The window was broken by the storm.",
         "The committee is considering the proposal.",
         "It was decided by the judges that the contest would be canceled."], 2),
    _mc("voice-4", "Persuasive Language", 4, "voice",
        "Choose the most persuasive statement",
        "You're writing to convince your school to start a recycling program. Which statement is most persuasive?",
        ["You should start a recycling program.",
         "I think it would be nice to have recycling bins.",
         "By implementing a recycling program, our school could reduce waste by 40% and save $3,000 annually.",
         "Recycling is good for the environment, so we should do it."], 2),
    _mc("voice-5", "Emotional Appeal", 5, "voice",
        "Select the sentence with the strongest emotional appeal",
        "You're writing about animal adoption. Which sentence creates the strongest emotional connection?",
        ["Animal shelters have many pets available for adoption.",
         "The statistical data shows increased adoption rates in the spring months.",
         "Approximately 6.5 million companion animals enter shelters each year.",
         "Every day, lonely animals wait in shelters, hoping for someone to give them a loving forever home."], 3),
)

_BY_ID: dict[str, Exercise] = {e.id: e for e in EXERCISES}


def get_all_exercises() -> list[Exercise]:
    """Return the whole catalogue."""
    return list(EXERCISES)


def get_exercise_by_id(exercise_id: str) -> Exercise | None:
    """Look up an exercise by ID."""
    return _BY_ID.get(exercise_id)


# =============================================================================
# MAP STATUS
# =============================================================================


def _is_open(exercise: Exercise, mastery: SkillMastery) -> bool:
    return mastery.get(exercise.skill_type) >= exercise.mastery_requirement


def exercise_status(
    exercise: Exercise,
    mastery: SkillMastery,
    completed: set[str] | frozenset[str],
) -> ExerciseStatus:
    """Status of one exercise on the practice map.

    The lowest-level open, uncompleted exercise across the catalogue is
    ``current``; ties go to catalogue order.
    """
    if exercise.id in completed:
        return "completed"

    if not _is_open(exercise, mastery):
        return "locked"

    candidates = [
        e for e in EXERCISES if e.id not in completed and _is_open(e, mastery)
    ]
    lowest = min(candidates, key=lambda e: e.level)
    if lowest.id == exercise.id:
        return "current"
    return "available"


def exercise_nodes(
    mastery: SkillMastery,
    completed: set[str] | frozenset[str],
) -> list[dict[str, Any]]:
    """Catalogue entries annotated with their map status."""
    return [
        {**exercise.to_dict(), "status": exercise_status(exercise, mastery, completed)}
        for exercise in EXERCISES
    ]


# =============================================================================
# GRADING
# =============================================================================


def count_words(text: str) -> int:
    """Count whitespace-separated words."""
    return len(text.split())


def _coerce_option(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value.strip())
    return None


def grade_attempt(exercise: Exercise, answers: dict[str, Any]) -> AttemptGrade:
    """Grade an attempt against the catalogue entry.

    Args:
        exercise: The exercise being attempted
        answers: ``{"selectedOption": int}`` for multiple choice,
            ``{"response": str}`` for writing

    Returns:
        AttemptGrade with correctness and a short feedback line

    Raises:
        ExerciseAnswerError: If the answer payload doesn't fit the exercise type
    """
    if exercise.type == "multiple-choice":
        selected = _coerce_option(answers.get("selectedOption"))
        if selected is None or not 0 <= selected < len(exercise.options):
            raise ExerciseAnswerError(
                f"selectedOption must be an option index between 0 and {len(exercise.options) - 1}"
            )
        is_correct = selected == exercise.correct_option_index
        feedback = "Correct!" if is_correct else "Not quite. Review the instructions and try again."
        logger.debug("exercises.graded", exercise_id=exercise.id, is_correct=is_correct)
        return AttemptGrade(
            exercise_id=exercise.id,
            is_correct=is_correct,
            feedback=feedback,
            details={"selectedOption": selected},
        )

    response = answers.get("response")
    if not isinstance(response, str) or not response.strip():
        raise ExerciseAnswerError("response must be a non-empty string")

    words = count_words(response)
    minimum = exercise.min_word_count or 0
    is_correct = words >= minimum
    if is_correct:
        feedback = "Nice work! Your response meets the length goal."
    else:
        feedback = f"Keep going: {words} of {minimum} words written."
    logger.debug("exercises.graded", exercise_id=exercise.id, is_correct=is_correct, words=words)
    return AttemptGrade(
        exercise_id=exercise.id,
        is_correct=is_correct,
        feedback=feedback,
        word_count=words,
    )
