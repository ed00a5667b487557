"""Town locations and writing quests.

Each location hosts a handful of quests in one writing genre. A quest opens
when the student meets its per-skill mastery minimums and has finished its
prerequisite quests. A location opens as soon as one of its quests does.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Literal

from writequest.core.skills import SKILL_AREAS, SkillMastery, SkillName

WritingType = Literal["argumentative", "informative", "narrative", "reflective", "descriptive"]

STARTING_LOCATION = "townHall"


@dataclass(frozen=True)
class TownLocation:
    """A place on the town map."""

    id: str
    name: str
    description: str
    icon: str
    type: WritingType
    quests: tuple[str, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "icon": self.icon,
            "type": self.type,
            "quests": list(self.quests),
        }


@dataclass(frozen=True)
class WritingQuest:
    """A themed writing assignment."""

    id: str
    location_id: str
    title: str
    description: str
    tags: tuple[str, ...]
    min_word_count: int
    skill_focus: SkillName
    level: int
    required_mastery: SkillMastery
    required_quests: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "locationId": self.location_id,
            "title": self.title,
            "description": self.description,
            "tags": list(self.tags),
            "minWordCount": self.min_word_count,
            "skillFocus": self.skill_focus,
            "level": self.level,
            "unlockRequirements": {
                "skillMastery": self.required_mastery.to_dict(),
                "completedQuests": list(self.required_quests),
            },
        }


TOWN_LOCATIONS: tuple[TownLocation, ...] = (
    TownLocation("townHall", "Town Hall", "Perfect for persuasive and argumentative writing",
                 "building", "argumentative", ("town-hall-1", "town-hall-2", "town-hall-3")),
    TownLocation("library", "Library", "Ideal for research-based and informative writing",
                 "book", "informative", ("library-1", "library-2", "library-3")),
    TownLocation("amphitheater", "Amphitheater", "The place for narrative and creative storytelling",
                 "theater", "narrative", ("music-hall-1", "music-hall-2")),
    TownLocation("cafe", "Café", "A cozy spot for reflective and journal writing",
                 "coffee", "reflective", ("cafe-1", "cafe-2")),
    TownLocation("park", "Nature Park", "Inspiration for descriptive and nature writing",
                 "tree", "descriptive", ("park-1", "park-2")),
)


def _quest(
    id: str,
    location_id: str,
    title: str,
    description: str,
    tags: list[str],
    min_word_count: int,
    skill_focus: SkillName,
    level: int,
    mastery: tuple[int, int, int],
    required_quests: tuple[str, ...] = (),
) -> WritingQuest:
    return WritingQuest(
        id=id,
        location_id=location_id,
        title=title,
        description=description,
        tags=tuple(tags),
        min_word_count=min_word_count,
        skill_focus=skill_focus,
        level=level,
        required_mastery=SkillMastery(*mastery),
        required_quests=required_quests,
    )


WRITING_QUESTS: tuple[WritingQuest, ...] = (
    # Town Hall
    _quest("town-hall-1", "townHall", "Voice of the Community",
           "Write a letter to the editor about an issue that matters to your community. "
           "Focus on making your argument persuasive using evidence and a strong voice.",
           ["Persuasive", "Community", "Voice"], 150, "voice", 1, (0, 0, 0)),
    _quest("town-hall-2", "townHall", "Town Improvement Proposal",
           "Create a proposal for improving some aspect of the town. Include a clear problem "
           "statement, proposed solution, and expected benefits.",
           ["Proposal", "Problem-Solution", "Sequencing"], 200, "sequencing", 2, (20, 20, 10),
           ("town-hall-1",)),
    _quest("town-hall-3", "townHall", "Historical Town Chronicle",
           "Research and write about a (fictional) historical event in the town's past. "
           "Use descriptive language to bring the event to life.",
           ["Historical", "Narrative", "Description"], 250, "voice", 3, (30, 30, 30),
           ("town-hall-2",)),
    # Library
    _quest("library-1", "library", "Book Review",
           "Write a thoughtful review of your favorite book. Include a summary, your opinion, "
           "and specific examples that support your assessment.",
           ["Review", "Analysis", "Opinion"], 200, "sequencing", 1, (10, 10, 0)),
    _quest("library-2", "library", "Character Analysis",
           "Select a character from a story and analyze their motivations, actions, and "
           "development throughout the narrative.",
           ["Analysis", "Character", "Evidence"], 250, "sequencing", 2, (20, 30, 10),
           ("library-1",)),
    _quest("library-3", "library", "Short Story",
           "Create an original short story with a clear beginning, middle, and end. "
           "Include descriptive language and dialogue.",
           ["Creative", "Narrative", "Fiction"], 300, "voice", 3, (40, 40, 30),
           ("library-2",)),
    # Amphitheater
    _quest("music-hall-1", "amphitheater", "Short Story Beginning",
           "Write the opening paragraph of a creative story. Focus on establishing character, "
           "setting, and an engaging hook.",
           ["Creative", "Narrative", "Storytelling"], 150, "voice", 1, (10, 0, 10)),
    _quest("music-hall-2", "amphitheater", "Character Monologue",
           "Create a monologue for a character facing a difficult decision. Show their internal "
           "thoughts and emotional state.",
           ["Narrative", "Character", "Drama"], 200, "voice", 2, (20, 20, 30),
           ("music-hall-1",)),
    # Café
    _quest("cafe-1", "cafe", "Recipe Story",
           "Write a personal narrative that incorporates a favorite recipe. Include both the "
           "recipe steps and the story behind why it's meaningful to you.",
           ["Instructional", "Narrative", "Personal"], 250, "sequencing", 2, (40, 30, 20)),
    _quest("cafe-2", "cafe", "Dialogue Scene",
           "Create a scene with dialogue between two or more characters. Focus on realistic "
           "conversation that reveals character traits.",
           ["Dialogue", "Character", "Scene"], 200, "voice", 3, (50, 40, 40),
           ("cafe-1",)),
    # Park
    _quest("park-1", "park", "Nature Description",
           "Write a detailed description of a natural setting, focusing on sensory details "
           "(sights, sounds, smells, textures).",
           ["Descriptive", "Nature", "Sensory"], 200, "voice", 2, (30, 20, 30)),
    _quest("park-2", "park", "Environmental Argument",
           "Write a persuasive essay about an environmental issue. Include clear arguments, "
           "evidence, and a call to action.",
           ["Persuasive", "Environmental", "Argument"], 300, "sequencing", 3, (50, 50, 40),
           ("park-1",)),
)

_LOCATIONS_BY_ID: dict[str, TownLocation] = {loc.id: loc for loc in TOWN_LOCATIONS}
_QUESTS_BY_ID: dict[str, WritingQuest] = {q.id: q for q in WRITING_QUESTS}


def get_town_locations() -> list[TownLocation]:
    return list(TOWN_LOCATIONS)


def get_location_by_id(location_id: str) -> TownLocation | None:
    return _LOCATIONS_BY_ID.get(location_id)


def get_quest_by_id(quest_id: str) -> WritingQuest | None:
    return _QUESTS_BY_ID.get(quest_id)


def get_quests_for_location(location_id: str) -> list[WritingQuest]:
    return [q for q in WRITING_QUESTS if q.location_id == location_id]


def is_quest_unlocked(
    quest: WritingQuest,
    mastery: SkillMastery,
    completed_quests: Iterable[str],
) -> bool:
    """Check mastery minimums and prerequisite quests."""
    for skill in SKILL_AREAS:
        if mastery.get(skill) < quest.required_mastery.get(skill):
            return False
    done = set(completed_quests)
    return all(required in done for required in quest.required_quests)


def determine_locations_to_unlock(
    mastery: SkillMastery,
    completed_quests: Iterable[str],
    unlocked_locations: Iterable[str],
) -> list[str]:
    """Locked locations that now have at least one open quest, in map order."""
    done = list(completed_quests)
    already = set(unlocked_locations)
    newly_open = []
    for location in TOWN_LOCATIONS:
        if location.id in already:
            continue
        if any(is_quest_unlocked(q, mastery, done) for q in get_quests_for_location(location.id)):
            newly_open.append(location.id)
    return newly_open
