"""OpenAI GPT provider."""

from __future__ import annotations

import time

from biostate.core.llm.provider import ProviderResponse, SamplingConfig


class OpenAIProvider:
    """OpenAI provider using the OpenAI SDK."""

    def __init__(self, api_key: str, model: str = "gpt-4o") -> None:
        import openai

        self.client = openai.AsyncOpenAI(api_key=api_key)
        self.model = model

    async def generate(
        self,
        system_message: str,
        user_message: str,
        config: SamplingConfig | None = None,
    ) -> ProviderResponse:
        config = config or SamplingConfig()
        model = config.model or self.model
        kwargs = {}
        if config.max_tokens:
            kwargs["max_tokens"] = config.max_tokens
        if config.seed is not None:
            kwargs["seed"] = config.seed

        start = time.monotonic()
        response = await self.client.chat.completions.create(
            model=model,
            temperature=config.temperature,
            top_p=config.top_p,
            messages=[
                {"role": "system", "content": system_message},
                {"role": "user", "content": user_message},
            ],
            **kwargs,
        )
        elapsed_ms = (time.monotonic() - start) * 1000

        choice = response.choices[0] if response.choices else None
        content = choice.message.content or "" if choice else ""
        usage = response.usage
        return ProviderResponse(
            content=content,
            input_tokens=usage.prompt_tokens if usage else 0,
            output_tokens=usage.completion_tokens if usage else 0,
            model=model,
            latency_ms=elapsed_ms,
        )
