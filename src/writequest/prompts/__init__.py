"""Prompt templates and loader."""

from writequest.prompts.registry import clear_cache, get_prompt, list_prompts

__all__ = ["clear_cache", "get_prompt", "list_prompts"]
