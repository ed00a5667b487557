"""Tests for the writing coach helpers."""

from writequest.core.quests import get_location_by_id
from writequest.core.writing_coach import (
    FALLBACK_PROMPTS,
    FALLBACK_WRITERS_BLOCK_HELP,
    MAX_CONTEXT_CHARS,
    generate_writing_prompt,
    writers_block_help,
)
from writequest.llm.client import LLMConnectionError


class TestWritersBlockHelp:
    """Tests for writers_block_help."""

    def test_model_reply(self, mock_llm_client):
        """The coach's reply is returned stripped."""
        mock_llm_client.simple_chat.return_value = "  What happens right after the door opens?  "

        result = writers_block_help("Short Story", "I don't know what happens next", "Once upon", mock_llm_client)

        assert result == "What happens right after the door opens?"
        user_message = mock_llm_client.simple_chat.call_args.kwargs["user_message"]
        assert "What the student is stuck on: I don't know what happens next" in user_message

    def test_long_draft_truncated(self, mock_llm_client):
        """Only the tail of a long draft is sent."""
        mock_llm_client.simple_chat.return_value = "Try a new scene."
        draft = "a" * 100 + "b" * MAX_CONTEXT_CHARS

        writers_block_help("T", "stuck", draft, mock_llm_client)

        user_message = mock_llm_client.simple_chat.call_args.kwargs["user_message"]
        assert "a" * 10 not in user_message

    def test_empty_reply_falls_back(self, mock_llm_client):
        """An empty reply is replaced by built-in hints."""
        mock_llm_client.simple_chat.return_value = "   "

        assert writers_block_help("T", "stuck", "", mock_llm_client) == FALLBACK_WRITERS_BLOCK_HELP

    def test_error_falls_back(self, mock_llm_client):
        """Model errors are not shown to the student."""
        mock_llm_client.simple_chat.side_effect = LLMConnectionError("Could not reach openai")

        assert writers_block_help("T", "stuck", "", mock_llm_client) == FALLBACK_WRITERS_BLOCK_HELP


class TestGenerateWritingPrompt:
    """Tests for generate_writing_prompt."""

    def test_model_prompt(self, mock_llm_client):
        """A JSON prompt is parsed into GeneratedPrompt."""
        mock_llm_client.simple_json.return_value = {
            "prompt": "Argue for a new skate park.",
            "scenario": "The council is voting tonight.",
            "guidingQuestions": ["Who benefits?", ""],
            "suggestedElements": ["Evidence"],
            "challengeElement": "Quote a neighbor.",
        }

        result = generate_writing_prompt(get_location_by_id("townHall"), mock_llm_client)

        assert result.to_dict() == {
            "prompt": "Argue for a new skate park.",
            "scenario": "The council is voting tonight.",
            "guidingQuestions": ["Who benefits?"],
            "suggestedElements": ["Evidence"],
            "challengeElement": "Quote a neighbor.",
        }
        user_message = mock_llm_client.simple_json.call_args.kwargs["user_message"]
        assert "Town Hall" in user_message

    def test_missing_prompt_falls_back(self, mock_llm_client):
        """A reply without a prompt uses the location type's template."""
        mock_llm_client.simple_json.return_value = {"scenario": "Somewhere"}

        result = generate_writing_prompt(get_location_by_id("park"), mock_llm_client)

        assert result == FALLBACK_PROMPTS["descriptive"]

    def test_not_configured(self, mock_llm_client):
        """Without credentials the template is used."""
        mock_llm_client.is_configured.return_value = False

        result = generate_writing_prompt(get_location_by_id("cafe"), mock_llm_client)

        assert result == FALLBACK_PROMPTS["reflective"]
        mock_llm_client.simple_json.assert_not_called()

    def test_every_location_type_has_fallback(self):
        """Each location type maps to a template."""
        for location_id in ("townHall", "library", "amphitheater", "cafe", "park"):
            assert get_location_by_id(location_id).type in FALLBACK_PROMPTS
