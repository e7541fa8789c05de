"""LLM provider implementations."""

from biostate.core.llm.providers.anthropic import AnthropicProvider
from biostate.core.llm.providers.gemini import GeminiProvider
from biostate.core.llm.providers.mock import MockProvider
from biostate.core.llm.providers.openai import OpenAIProvider

__all__ = ["AnthropicProvider", "GeminiProvider", "MockProvider", "OpenAIProvider"]
