"""Application configuration loader.

Loads centralized configuration from data/config/app_config_v1.yaml
with fallback to built-in defaults.

Usage:
    from writequest.config.app_config import load_app_config

    config = load_app_config()
    print(config.llm.model)
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog
import yaml

logger = structlog.get_logger(__name__)

# Config file path (relative to project root)
CONFIG_FILE = Path("data/config/app_config_v1.yaml")

# At least today's entry is always kept in the progress history
MIN_HISTORY_DAYS = 1


@dataclass
class LLMSettings:
    """Configuration for the hosted language model."""

    provider: str = "openai"
    base_url: str | None = None
    model: str = "gpt-4o"
    temperature: float = 0.7
    max_tokens: int = 1500
    timeout: int = 60
    api_key_env: str | None = "OPENAI_API_KEY"

    def get_api_key(self) -> str | None:
        """Get API key from environment variable."""
        if self.api_key_env:
            return os.environ.get(self.api_key_env)
        return None


@dataclass
class GameSettings:
    """Gamification defaults."""

    default_grade: int = 7
    exercise_reward_correct: int = 5
    exercise_reward_incorrect: int = 1
    exercise_gain_correct: int = 10
    exercise_gain_incorrect: int = 2
    quest_reward: int = 15
    quest_gain_mechanics: int = 5
    quest_gain_sequencing: int = 5
    quest_gain_voice: int = 15
    achievement_reward: int = 10
    history_days: int = 90
    challenge_expiry_hours: int = 24

    @property
    def quest_mastery_gain(self) -> dict[str, float]:
        """Mastery gained per skill for finishing a writing quest."""
        return {
            "mechanics": self.quest_gain_mechanics,
            "sequencing": self.quest_gain_sequencing,
            "voice": self.quest_gain_voice,
        }


@dataclass
class AppConfig:
    """Application-wide configuration."""

    llm: LLMSettings = field(default_factory=LLMSettings)
    game: GameSettings = field(default_factory=GameSettings)
    paths: dict[str, str] = field(default_factory=dict)

    @property
    def database_path(self) -> Path:
        """Location of the SQLite database file."""
        return Path(self.paths.get("database", "db/writequest.db"))


# Module-level cache
_cached_config: AppConfig | None = None


def _get_defaults() -> dict[str, Any]:
    """Get default configuration values."""
    return {
        "llm": {
            "provider": "openai",
            "base_url": None,
            "model": "gpt-4o",
            "temperature": 0.7,
            "max_tokens": 1500,
            "timeout": 60,
            "api_key_env": "OPENAI_API_KEY",
        },
        "game": {
            "default_grade": 7,
            "exercise_reward_correct": 5,
            "exercise_reward_incorrect": 1,
            "exercise_gain_correct": 10,
            "exercise_gain_incorrect": 2,
            "quest_reward": 15,
            "quest_gain_mechanics": 5,
            "quest_gain_sequencing": 5,
            "quest_gain_voice": 15,
            "achievement_reward": 10,
            "history_days": 90,
            "challenge_expiry_hours": 24,
        },
        "paths": {
            "database": "db/writequest.db",
        },
    }


def _parse_config(data: dict[str, Any]) -> AppConfig:
    """Parse configuration dictionary into AppConfig object."""
    defaults = _get_defaults()

    llm_data = {**defaults["llm"], **(data.get("llm") or {})}
    llm = LLMSettings(
        provider=llm_data["provider"],
        base_url=llm_data.get("base_url"),
        model=llm_data["model"],
        temperature=float(llm_data["temperature"]),
        max_tokens=int(llm_data["max_tokens"]),
        timeout=int(llm_data["timeout"]),
        api_key_env=llm_data.get("api_key_env"),
    )

    game_data = {**defaults["game"], **(data.get("game") or {})}
    game = GameSettings(
        default_grade=int(game_data["default_grade"]),
        exercise_reward_correct=int(game_data["exercise_reward_correct"]),
        exercise_reward_incorrect=int(game_data["exercise_reward_incorrect"]),
        exercise_gain_correct=int(game_data["exercise_gain_correct"]),
        exercise_gain_incorrect=int(game_data["exercise_gain_incorrect"]),
        quest_reward=int(game_data["quest_reward"]),
        quest_gain_mechanics=int(game_data["quest_gain_mechanics"]),
        quest_gain_sequencing=int(game_data["quest_gain_sequencing"]),
        quest_gain_voice=int(game_data["quest_gain_voice"]),
        achievement_reward=int(game_data["achievement_reward"]),
        history_days=max(MIN_HISTORY_DAYS, int(game_data["history_days"])),
        challenge_expiry_hours=int(game_data["challenge_expiry_hours"]),
    )

    paths = {**defaults["paths"], **(data.get("paths") or {})}

    return AppConfig(llm=llm, game=game, paths=paths)


def load_app_config(force_reload: bool = False) -> AppConfig:
    """Load application config, falling back to defaults.

    Args:
        force_reload: If True, ignore cached config and reload from file.

    Returns:
        AppConfig object with all settings.
    """
    global _cached_config

    if _cached_config is not None and not force_reload:
        return _cached_config

    data: dict[str, Any]

    if CONFIG_FILE.exists():
        logger.debug("loading_app_config", source=str(CONFIG_FILE))
        data = yaml.safe_load(CONFIG_FILE.read_text(encoding="utf-8")) or {}
    else:
        logger.info("using_default_config")
        data = _get_defaults()

    _cached_config = _parse_config(data)
    return _cached_config


def clear_config_cache() -> None:
    """Clear the configuration cache.

    Useful for testing or when config is modified at runtime.
    """
    global _cached_config
    _cached_config = None
