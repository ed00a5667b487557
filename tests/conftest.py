"""Shared fixtures.

Every test that touches storage gets its own SQLite file under tmp_path and
runs with tmp_path as the working directory, so config and database paths
never leak between tests.
"""

from datetime import date
from typing import Any
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from writequest.config.app_config import clear_config_cache
from writequest.db import users_repository
from writequest.db.database import init_db
from writequest.llm.client import LLMClient
from writequest.prompts.registry import clear_cache
from writequest.utils.security import hash_password
from writequest.web.api import create_app
from writequest.web.deps import get_llm_client, get_today

TODAY = date(2026, 3, 10)

PASSWORD_HASH = hash_password("secret123")


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Run each test from an empty directory with fresh caches."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    clear_config_cache()
    clear_cache()
    yield
    clear_config_cache()


@pytest.fixture
def db_path(tmp_path):
    """Initialized database file."""
    path = tmp_path / "db" / "test.db"
    init_db(path)
    return path


@pytest.fixture
def feedback_payload() -> dict[str, Any]:
    """A complete, well-formed analysis reply from the model."""
    return {
        "overallFeedback": "A persuasive letter with a clear position.",
        "strengthsAnalysis": "Strong opening and concrete proposals.",
        "areasToImprove": "Vary sentence length and tighten transitions.",
        "mechanicsScore": 82,
        "sequencingScore": 64,
        "voiceScore": 77,
        "suggestions": {
            "mechanics": ["Check comma placement in long sentences"],
            "sequencing": ["Add a transition before your proposals", "Group related ideas"],
            "voice": ["Address the editor directly in the closing"],
        },
        "nextSteps": "Revise the middle paragraph for flow.",
    }


@pytest.fixture
def mock_llm_client():
    """LLM client double that never reaches the network."""
    client = MagicMock(spec=LLMClient)
    client.is_configured.return_value = True
    return client


@pytest.fixture
def make_user(db_path):
    """Factory that stores a user with password 'secret123'."""

    def _make_user(username: str = "ana", role: str = "student", **kwargs):
        return users_repository.create_user(
            username=username,
            password=PASSWORD_HASH,
            display_name=kwargs.pop("display_name", username.title()),
            role=role,
            **kwargs,
        )

    return _make_user


@pytest.fixture
def app(db_path, mock_llm_client):
    """App wired to the test database, a mock LLM and a fixed calendar day."""
    app = create_app()
    app.dependency_overrides[get_llm_client] = lambda: mock_llm_client
    app.dependency_overrides[get_today] = lambda: TODAY
    return app


@pytest.fixture
def client(app):
    """Test client (lifespan not run; the database is already initialized)."""
    return TestClient(app)


@pytest.fixture
def auth():
    """Identity header for a user."""

    def _auth(user) -> dict[str, str]:
        return {"X-User-Id": str(user.id)}

    return _auth
