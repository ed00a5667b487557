"""Tests for the writequest CLI."""

import json
from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner

from writequest.cli.commands import app
from writequest.db import links_repository, progress_repository, users_repository

runner = CliRunner()

REAL_LOOKING_KEY = "sk-test-" + "y" * 32


@pytest.fixture
def db_file(tmp_path):
    return tmp_path / "cli" / "writequest.db"


def completion(payload):
    """Chat-completions response double carrying a JSON payload."""
    response = MagicMock()
    response.choices = [MagicMock()]
    response.choices[0].message.content = json.dumps(payload)
    response.model = "gpt-4o"
    response.usage.prompt_tokens = 10
    response.usage.completion_tokens = 20
    response.usage.total_tokens = 30
    return response


class TestInitDb:
    """Tests for writequest init-db."""

    def test_creates_database(self, db_file):
        """init-db creates the file and its parent directory."""
        result = runner.invoke(app, ["init-db", "--db", str(db_file)])

        assert result.exit_code == 0
        assert "Database ready" in result.output
        assert db_file.exists()


class TestSeedDemo:
    """Tests for writequest seed-demo."""

    def test_seeds_accounts(self, db_file):
        """Demo student, teacher and parent are created and linked."""
        result = runner.invoke(app, ["seed-demo", "--db", str(db_file)])

        assert result.exit_code == 0
        assert "Demo data created" in result.output

        student = users_repository.get_user_by_username("demo")
        teacher = users_repository.get_user_by_username("demo-teacher")
        parent = users_repository.get_user_by_username("demo-parent")
        assert student.role == "student"
        assert teacher.role == "teacher"
        assert links_repository.is_linked(teacher.id, student.id, "teacher")
        assert links_repository.is_linked(parent.id, student.id, "parent")

        progress = progress_repository.get_progress_by_user_id(student.id)
        assert progress.completed_quests == ["town-hall-1"]
        assert progress.currency == 45

    def test_second_run_is_noop(self, db_file):
        """Seeding twice leaves the first run's data alone."""
        runner.invoke(app, ["seed-demo", "--db", str(db_file)])

        result = runner.invoke(app, ["seed-demo", "--db", str(db_file)])

        assert result.exit_code == 0
        assert "already present" in result.output


class TestAchievements:
    """Tests for writequest achievements."""

    def test_shows_table(self, db_file):
        """Earned achievements are listed for the demo student."""
        runner.invoke(app, ["seed-demo", "--db", str(db_file)])

        result = runner.invoke(app, ["achievements", "demo", "--db", str(db_file)])

        assert result.exit_code == 0
        assert "first-steps" in result.output
        assert "earned" in result.output

    def test_unknown_user(self, db_file):
        """Unknown usernames exit with an error."""
        result = runner.invoke(app, ["achievements", "ghost", "--db", str(db_file)])

        assert result.exit_code == 1
        assert "User not found" in result.output


class TestAnalyze:
    """Tests for writequest analyze."""

    def test_missing_file(self, tmp_path):
        """A missing file exits with an error."""
        result = runner.invoke(app, ["analyze", str(tmp_path / "nope.txt")])

        assert result.exit_code == 1
        assert "File not found" in result.output

    def test_without_api_key(self, tmp_path):
        """Without a key the generic feedback is printed."""
        sample = tmp_path / "letter.txt"
        sample.write_text("Dear Editor, our park needs more benches.", encoding="utf-8")

        result = runner.invoke(app, ["analyze", str(sample), "--title", "Benches"])

        assert result.exit_code == 0
        assert "No API key configured" in result.output
        assert "good effort" in result.output

    def test_with_model(self, tmp_path, monkeypatch, feedback_payload):
        """Model feedback and suggested exercises are printed."""
        monkeypatch.setenv("OPENAI_API_KEY", REAL_LOOKING_KEY)
        sample = tmp_path / "letter.txt"
        sample.write_text("Dear Editor, our park needs more benches.", encoding="utf-8")

        with patch("writequest.llm.client.OpenAI") as MockOpenAI:
            MockOpenAI.return_value.chat.completions.create.side_effect = [
                completion(feedback_payload),
                completion({"exercises": ["sequencing-2", "voice-1"]}),
            ]
            result = runner.invoke(app, ["analyze", str(sample), "--title", "Benches", "--grade", "6"])

        assert result.exit_code == 0
        assert "A persuasive letter with a clear position." in result.output
        assert "82" in result.output
        assert "sequencing-2, voice-1" in result.output

    def test_lmstudio_provider_uses_local_endpoint(self, tmp_path):
        """Switching provider also switches the endpoint and key defaults."""
        sample = tmp_path / "letter.txt"
        sample.write_text("Dear Editor, our park needs more benches.", encoding="utf-8")

        with patch("writequest.llm.client.OpenAI") as MockOpenAI:
            MockOpenAI.return_value.chat.completions.create.side_effect = ConnectionError("refused")
            result = runner.invoke(app, ["analyze", str(sample), "--provider", "lmstudio", "--model", "local-model"])

        kwargs = MockOpenAI.call_args.kwargs
        assert kwargs["base_url"] == "http://localhost:1234/v1"
        assert kwargs["api_key"] == "lm-studio"
        assert result.exit_code == 1

    def test_unknown_provider(self, tmp_path):
        """Unknown providers are rejected before any call is made."""
        sample = tmp_path / "letter.txt"
        sample.write_text("Some words.", encoding="utf-8")

        with patch("writequest.llm.client.OpenAI") as MockOpenAI:
            result = runner.invoke(app, ["analyze", str(sample), "--provider", "acme"])

        assert result.exit_code == 1
        assert "Unknown provider" in result.output
        MockOpenAI.assert_not_called()


class TestServe:
    """Tests for writequest serve."""

    def test_runs_uvicorn(self):
        """serve hands the app to uvicorn."""
        with patch("writequest.cli.commands.uvicorn.run") as mock_run:
            result = runner.invoke(app, ["serve", "--port", "9000"])

        assert result.exit_code == 0
        mock_run.assert_called_once_with(
            "writequest.web.api:app", host="127.0.0.1", port=9000, reload=False
        )
