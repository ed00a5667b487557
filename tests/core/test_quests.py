"""Tests for town locations and quest unlocks."""

from writequest.core.quests import (
    STARTING_LOCATION,
    determine_locations_to_unlock,
    get_location_by_id,
    get_quest_by_id,
    get_quests_for_location,
    get_town_locations,
    is_quest_unlocked,
)
from writequest.core.skills import SkillMastery


class TestCatalogue:
    """Tests for location and quest lookups."""

    def test_five_locations(self):
        """The town has five locations starting at the town hall."""
        ids = [loc.id for loc in get_town_locations()]

        assert ids == ["townHall", "library", "amphitheater", "cafe", "park"]
        assert STARTING_LOCATION == "townHall"

    def test_location_quests_match_catalogue(self):
        """Each location lists exactly the quests filed under it."""
        for location in get_town_locations():
            assert list(location.quests) == [q.id for q in get_quests_for_location(location.id)]

    def test_lookups(self):
        """Unknown IDs return None."""
        assert get_location_by_id("library").name == "Library"
        assert get_location_by_id("moon") is None
        assert get_quest_by_id("cafe-1").location_id == "cafe"
        assert get_quest_by_id("cafe-99") is None

    def test_quest_to_dict(self):
        """Quest view carries unlock requirements in camelCase."""
        data = get_quest_by_id("library-2").to_dict()

        assert data["locationId"] == "library"
        assert data["unlockRequirements"] == {
            "skillMastery": {"mechanics": 20, "sequencing": 30, "voice": 10},
            "completedQuests": ["library-1"],
        }


class TestQuestUnlock:
    """Tests for is_quest_unlocked."""

    def test_mastery_minimums(self):
        """Every skill minimum must be met."""
        quest = get_quest_by_id("library-1")

        assert is_quest_unlocked(quest, SkillMastery(10, 10, 0), []) is True
        assert is_quest_unlocked(quest, SkillMastery(10, 9, 100), []) is False

    def test_prerequisites(self):
        """Prerequisite quests must be completed."""
        quest = get_quest_by_id("town-hall-2")
        mastery = SkillMastery(50, 50, 50)

        assert is_quest_unlocked(quest, mastery, []) is False
        assert is_quest_unlocked(quest, mastery, ["town-hall-1"]) is True


class TestDetermineLocationsToUnlock:
    """Tests for determine_locations_to_unlock."""

    def test_starting_mastery_opens_two(self):
        """10/10/10 opens the library and amphitheater."""
        result = determine_locations_to_unlock(SkillMastery(10, 10, 10), [], ["townHall"])

        assert result == ["library", "amphitheater"]

    def test_already_unlocked_skipped(self):
        """Open locations are not reported again."""
        result = determine_locations_to_unlock(
            SkillMastery(100, 100, 100), [], ["townHall", "library", "amphitheater", "cafe"]
        )

        assert result == ["park"]

    def test_nothing_new(self):
        """Zero mastery opens nothing beyond the town hall."""
        assert determine_locations_to_unlock(SkillMastery(), [], ["townHall"]) == []
