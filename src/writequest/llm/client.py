"""LLM client for OpenAI-compatible providers.

Provides a unified interface for the feedback, challenge and coaching
features. All calls go through the OpenAI chat-completions API.

Supported providers:
- openai: OpenAI API (default)
- lmstudio: Local LM Studio server (OpenAI-compatible API), handy in development
"""

from __future__ import annotations

import json
import re
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal

import structlog
import yaml
from openai import OpenAI

from writequest.config.app_config import CONFIG_FILE, LLMSettings

logger = structlog.get_logger(__name__)

# =============================================================================
# CONSTANTS
# =============================================================================

Provider = Literal["openai", "lmstudio"]

PROVIDER_DEFAULTS: dict[str, dict[str, Any]] = {
    "openai": {
        "base_url": "https://api.openai.com/v1",
        "supports_json_object": True,
    },
    "lmstudio": {
        "base_url": "http://localhost:1234/v1",
        "api_key": "lm-studio",  # LM Studio doesn't need a real API key
        "supports_json_object": False,
    },
}

# OpenAI keys are long; anything shorter is a placeholder left in a .env file
MIN_API_KEY_LENGTH = 20
PLACEHOLDER_MARKER = "OPENAI_A"

JSON_REPAIR_PROMPT = """Fix the following text and return ONLY valid JSON:
<<<
{invalid_output}
>>>

Reply with the corrected JSON only, no explanations or markdown."""

# Some models wrap their reasoning in tags before the JSON payload
SANITIZE_PATTERNS = [
    re.compile(r"<think>.*?</think>", re.DOTALL | re.IGNORECASE),
    re.compile(r"<reasoning>.*?</reasoning>", re.DOTALL | re.IGNORECASE),
]


def _sanitize_for_json(text: str) -> str:
    """Remove thinking/reasoning tags before JSON parsing."""
    result = text
    for pattern in SANITIZE_PATTERNS:
        result = pattern.sub("", result)
    return result.strip()


def parse_json_payload(content: str) -> Any | None:
    """Parse a JSON object or array out of model output.

    Tries, in order:
    1. Direct parse
    2. Extract from ```json ... ``` blocks
    3. Extract the outermost {...} object, then the outermost [...] array

    Returns:
        Parsed JSON value, or None if every strategy fails
    """
    content = _sanitize_for_json(content)

    try:
        return json.loads(content)
    except json.JSONDecodeError:
        pass

    json_match = re.search(r"```(?:json)?\s*([\s\S]*?)```", content)
    if json_match:
        try:
            return json.loads(json_match.group(1).strip())
        except json.JSONDecodeError:
            pass

    for open_char, close_char in (("{", "}"), ("[", "]")):
        start = content.find(open_char)
        end = content.rfind(close_char) + 1
        if start >= 0 and end > start:
            try:
                return json.loads(content[start:end])
            except json.JSONDecodeError:
                continue

    return None


# =============================================================================
# DATA CLASSES
# =============================================================================


@dataclass
class LLMConfig:
    """Configuration for LLM client."""

    provider: Provider = "openai"
    base_url: str = "https://api.openai.com/v1"
    model: str = "gpt-4o"
    temperature: float = 0.7
    max_tokens: int = 1500
    timeout: int = 60
    api_key: str | None = None
    supports_json_object: bool | None = None

    @classmethod
    def from_settings(cls, settings: LLMSettings) -> LLMConfig:
        """Build a client config from the application settings."""
        defaults = PROVIDER_DEFAULTS.get(settings.provider, PROVIDER_DEFAULTS["openai"])
        api_key = settings.get_api_key() or defaults.get("api_key")
        return cls(
            provider=settings.provider,  # type: ignore[arg-type]
            base_url=settings.base_url or defaults["base_url"],
            model=settings.model,
            temperature=settings.temperature,
            max_tokens=settings.max_tokens,
            timeout=settings.timeout,
            api_key=api_key,
        )

    @classmethod
    def from_yaml(cls, config_path: Path | None = None) -> LLMConfig:
        """Load configuration from the ``llm:`` section of a YAML file."""
        if config_path is None:
            config_path = CONFIG_FILE

        if not config_path.exists():
            logger.warning("config_not_found", path=str(config_path))
            return cls.from_settings(LLMSettings())

        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        llm_data = data.get("llm", {}) or {}
        settings = LLMSettings(
            provider=llm_data.get("provider", "openai"),
            base_url=llm_data.get("base_url"),
            model=llm_data.get("model", "gpt-4o"),
            temperature=llm_data.get("temperature", 0.7),
            max_tokens=llm_data.get("max_tokens", 1500),
            timeout=llm_data.get("timeout", 60),
            api_key_env=llm_data.get("api_key_env", "OPENAI_API_KEY"),
        )
        config = cls.from_settings(settings)
        config.supports_json_object = llm_data.get("supports_json_object", None)
        return config


@dataclass
class Message:
    """A chat message."""

    role: Literal["system", "user", "assistant"]
    content: str

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary for API call."""
        return {"role": self.role, "content": self.content}


@dataclass
class LLMResponse:
    """Response from LLM."""

    content: str
    model: str
    provider: str
    usage: dict[str, int] = field(default_factory=dict)
    latency_ms: int = 0

    @property
    def total_tokens(self) -> int:
        """Get total token count."""
        return self.usage.get("total_tokens", 0)


class LLMError(Exception):
    """Error during LLM interaction."""

    pass


class LLMConnectionError(LLMError):
    """Error connecting to LLM server."""

    pass


class LLMResponseError(LLMError):
    """Error in LLM response."""

    pass


# =============================================================================
# LLM CLIENT
# =============================================================================


class LLMClient:
    """Unified client for LLM interactions."""

    def __init__(
        self,
        config: LLMConfig | None = None,
        model: str | None = None,
    ):
        """Initialize LLM client.

        Args:
            config: LLM configuration (loads from YAML if not provided)
            model: Override model from config
        """
        if config is None:
            config = LLMConfig.from_yaml()

        self.config = config
        if model is not None:
            self.config.model = model

        self._client = OpenAI(
            base_url=self.config.base_url,
            api_key=self.config.api_key or "not-configured",
            timeout=self.config.timeout,
        )

        logger.info(
            "llm_client_initialized",
            provider=self.config.provider,
            model=self.config.model,
            configured=self.is_configured(),
        )

    def is_configured(self) -> bool:
        """Check whether the client has usable credentials.

        Local providers never need a key. For OpenAI the key must look real:
        long enough and not the placeholder from the example env file.
        """
        if self.config.provider == "lmstudio":
            return True
        api_key = self.config.api_key
        return (
            bool(api_key)
            and len(api_key) > MIN_API_KEY_LENGTH
            and PLACEHOLDER_MARKER not in api_key
        )

    def _supports_json_object(self) -> bool:
        """Check if current provider supports response_format json_object."""
        if self.config.supports_json_object is not None:
            return self.config.supports_json_object
        defaults = PROVIDER_DEFAULTS.get(self.config.provider, {})
        return bool(defaults.get("supports_json_object", False))

    def chat(
        self,
        messages: list[Message],
        temperature: float | None = None,
        max_tokens: int | None = None,
        json_mode: bool = False,
    ) -> LLMResponse:
        """Send chat completion request.

        Args:
            messages: List of messages in conversation
            temperature: Override default temperature
            max_tokens: Override default max tokens
            json_mode: Request JSON response format (only if provider supports it)

        Returns:
            LLMResponse with content and metadata

        Raises:
            LLMConnectionError: If cannot connect to server
            LLMResponseError: If response is invalid
        """
        if temperature is None:
            temperature = self.config.temperature
        if max_tokens is None:
            max_tokens = self.config.max_tokens

        request_kwargs: dict[str, Any] = {
            "model": self.config.model,
            "messages": [m.to_dict() for m in messages],
            "temperature": temperature,
            "max_tokens": max_tokens,
        }

        if json_mode and self._supports_json_object():
            request_kwargs["response_format"] = {"type": "json_object"}

        start_time = time.time()

        try:
            response = self._client.chat.completions.create(**request_kwargs)
        except Exception as e:
            error_msg = str(e)
            if "Connection" in error_msg or "connect" in error_msg.lower():
                raise LLMConnectionError(
                    f"Could not reach {self.config.provider} at {self.config.base_url}: {e}"
                ) from e
            raise LLMError(f"LLM call failed: {e}") from e

        latency_ms = int((time.time() - start_time) * 1000)

        if not response.choices:
            raise LLMResponseError("Empty response from LLM")

        content = response.choices[0].message.content or ""

        usage = {}
        if response.usage:
            usage = {
                "prompt_tokens": response.usage.prompt_tokens,
                "completion_tokens": response.usage.completion_tokens,
                "total_tokens": response.usage.total_tokens,
            }

        logger.debug(
            "llm_response",
            provider=self.config.provider,
            model=response.model,
            tokens=usage.get("total_tokens", 0),
            latency_ms=latency_ms,
        )

        return LLMResponse(
            content=content,
            model=response.model,
            provider=self.config.provider,
            usage=usage,
            latency_ms=latency_ms,
        )

    def chat_json(
        self,
        messages: list[Message],
        temperature: float | None = None,
        max_tokens: int | None = None,
        max_retries: int = 1,
    ) -> Any:
        """Send chat request expecting a JSON response.

        Uses robust parsing with one repair round-trip on failure.

        Returns:
            Parsed JSON (object or array)

        Raises:
            LLMResponseError: If response is not valid JSON after retries
        """
        response = self.chat(
            messages=messages,
            temperature=temperature,
            max_tokens=max_tokens,
            json_mode=True,
        )

        parsed = parse_json_payload(response.content)
        if parsed is not None:
            return parsed

        if max_retries > 0:
            logger.warning(
                "json_parse_failed_retrying",
                content=response.content[:100],
                provider=self.config.provider,
            )

            repair_prompt = JSON_REPAIR_PROMPT.format(
                invalid_output=response.content[:1000]
            )
            retry_messages = messages + [
                Message(role="assistant", content=response.content),
                Message(role="user", content=repair_prompt),
            ]

            retry_response = self.chat(
                retry_messages,
                temperature=temperature,
                max_tokens=max_tokens,
                json_mode=True,
            )

            parsed = parse_json_payload(retry_response.content)
            if parsed is not None:
                logger.info("json_parse_recovered_after_retry")
                return parsed

        raise LLMResponseError(
            f"Could not obtain valid JSON: {response.content[:200]}..."
        )

    def simple_chat(
        self,
        system_prompt: str,
        user_message: str,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str:
        """Single-turn chat with a system prompt and a user message."""
        messages = [
            Message(role="system", content=system_prompt),
            Message(role="user", content=user_message),
        ]

        response = self.chat(
            messages=messages,
            temperature=temperature,
            max_tokens=max_tokens,
        )

        return response.content

    def simple_json(
        self,
        system_prompt: str,
        user_message: str,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> Any:
        """Single-turn chat expecting a JSON response."""
        messages = [
            Message(role="system", content=system_prompt),
            Message(role="user", content=user_message),
        ]

        return self.chat_json(
            messages=messages,
            temperature=temperature,
            max_tokens=max_tokens,
        )
