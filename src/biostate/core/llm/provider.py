"""LLM provider protocol: abstract interface for text generation calls."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


class ProviderError(RuntimeError):
    """Raised when a provider returns no usable output."""


@dataclass
class ProviderResponse:
    """Response from an LLM provider."""

    content: str
    input_tokens: int
    output_tokens: int
    model: str
    latency_ms: float


@dataclass
class SamplingConfig:
    """Per-request sampling settings. ``model`` overrides the provider default."""

    model: str | None = None
    temperature: float = 0.4
    top_p: float = 0.9
    max_tokens: int | None = None
    seed: int | None = None


@runtime_checkable
class LLMProvider(Protocol):
    """Abstract interface for generation calls."""

    model: str

    async def generate(
        self,
        system_message: str,
        user_message: str,
        config: SamplingConfig | None = None,
    ) -> ProviderResponse: ...


DEFAULT_MODELS = {
    "gemini": "gemini-2.5-flash",
    "anthropic": "claude-sonnet-4-5-20250929",
    "openai": "gpt-4o",
    "mock": "mock",
}


def create_provider(
    provider_name: str,
    api_key: str = "",
    model: str = "",
) -> LLMProvider:
    """Factory function to create an LLM provider by name.

    Args:
        provider_name: "gemini", "anthropic", "openai", or "mock"
        api_key: API key for the provider.
        model: Model identifier override.

    Returns:
        An LLMProvider instance.
    """
    if provider_name == "gemini":
        from biostate.core.llm.providers.gemini import GeminiProvider

        return GeminiProvider(api_key=api_key, model=model or DEFAULT_MODELS["gemini"])
    elif provider_name == "anthropic":
        from biostate.core.llm.providers.anthropic import AnthropicProvider

        return AnthropicProvider(api_key=api_key, model=model or DEFAULT_MODELS["anthropic"])
    elif provider_name == "openai":
        from biostate.core.llm.providers.openai import OpenAIProvider

        return OpenAIProvider(api_key=api_key, model=model or DEFAULT_MODELS["openai"])
    elif provider_name == "mock":
        from biostate.core.llm.providers.mock import MockProvider

        return MockProvider()
    else:
        raise ValueError(f"Unknown LLM provider: {provider_name}")
