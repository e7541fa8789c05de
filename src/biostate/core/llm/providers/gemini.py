"""Google Gemini provider."""

from __future__ import annotations

import logging
import time

from biostate.core.llm.provider import ProviderError, ProviderResponse, SamplingConfig

logger = logging.getLogger(__name__)


class GeminiProvider:
    """Gemini provider using the google-generativeai SDK."""

    def __init__(self, api_key: str, model: str = "gemini-2.5-flash") -> None:
        import google.generativeai as genai

        genai.configure(api_key=api_key)
        self._genai = genai
        self.model = model

    async def generate(
        self,
        system_message: str,
        user_message: str,
        config: SamplingConfig | None = None,
    ) -> ProviderResponse:
        config = config or SamplingConfig()
        model_name = config.model or self.model
        genai = self._genai

        model = genai.GenerativeModel(model_name, system_instruction=system_message)
        generation_config = genai.GenerationConfig(
            temperature=config.temperature,
            top_p=config.top_p,
            max_output_tokens=config.max_tokens,
        )
        if config.seed is not None:
            logger.debug("Gemini provider ignores seed=%s", config.seed)

        start = time.monotonic()
        response = await model.generate_content_async(
            user_message,
            generation_config=generation_config,
        )
        elapsed_ms = (time.monotonic() - start) * 1000

        if not response.candidates or not response.candidates[0].content.parts:
            raise ProviderError(f"Gemini returned empty response from model {model_name}")

        usage = getattr(response, "usage_metadata", None)
        return ProviderResponse(
            content=response.text,
            input_tokens=getattr(usage, "prompt_token_count", 0) or 0,
            output_tokens=getattr(usage, "candidates_token_count", 0) or 0,
            model=model_name,
            latency_ms=elapsed_ms,
        )
