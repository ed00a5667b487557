"""Configuration package for WriteQuest."""

from writequest.config.app_config import (
    AppConfig,
    GameSettings,
    LLMSettings,
    clear_config_cache,
    load_app_config,
)

__all__ = [
    "AppConfig",
    "GameSettings",
    "LLMSettings",
    "clear_config_cache",
    "load_app_config",
]
