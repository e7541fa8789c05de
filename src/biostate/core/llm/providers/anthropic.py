"""Anthropic Claude provider."""

from __future__ import annotations

import time

from biostate.core.llm.provider import ProviderResponse, SamplingConfig

# The Messages API requires an explicit output cap.
_DEFAULT_MAX_TOKENS = 2048


class AnthropicProvider:
    """Claude provider using the Anthropic SDK."""

    def __init__(self, api_key: str, model: str = "claude-sonnet-4-5-20250929") -> None:
        import anthropic

        self.client = anthropic.AsyncAnthropic(api_key=api_key)
        self.model = model

    async def generate(
        self,
        system_message: str,
        user_message: str,
        config: SamplingConfig | None = None,
    ) -> ProviderResponse:
        config = config or SamplingConfig()
        model = config.model or self.model
        start = time.monotonic()
        # Newer Claude models reject temperature and top_p together; only temperature is sent.
        response = await self.client.messages.create(
            model=model,
            max_tokens=config.max_tokens or _DEFAULT_MAX_TOKENS,
            temperature=config.temperature,
            system=system_message,
            messages=[{"role": "user", "content": user_message}],
        )
        elapsed_ms = (time.monotonic() - start) * 1000

        content = response.content[0].text if response.content else ""
        return ProviderResponse(
            content=content,
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
            model=model,
            latency_ms=elapsed_ms,
        )
