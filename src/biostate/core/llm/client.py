"""Generation client: the bridge between rendered strategies and LLM calls."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from biostate.core.llm.provider import LLMProvider, ProviderResponse, SamplingConfig
from biostate.core.llm.response import check_guardrails
from biostate.core.strategy.models import RenderedPrompt, Strategy

logger = logging.getLogger(__name__)


@dataclass
class GenerationResult:
    """Structured response for one strategy."""

    content: str
    strategy_id: str
    model: str
    violation: bool = False
    guardrail_flags: list[str] = field(default_factory=list)
    usage: dict[str, int] = field(default_factory=dict)
    latency_ms: float = 0.0


class GenerationClient:
    """Invokes the configured provider with strategy-rendered prompts."""

    def __init__(self, provider: LLMProvider, provider_name: str = "") -> None:
        self.provider = provider
        self.provider_name = provider_name or type(provider).__name__.lower()

    @property
    def default_model(self) -> str:
        return getattr(self.provider, "model", "")

    async def invoke(
        self,
        rendered: RenderedPrompt,
        strategy: Strategy,
        config: SamplingConfig | None = None,
    ) -> GenerationResult:
        """Call the provider and check the output against strategy guardrails.

        Output is returned unmodified; guardrail hits are reported, not
        redacted, since the text itself is the object of study.
        """
        config = config or SamplingConfig()
        provider_response: ProviderResponse = await self.provider.generate(
            system_message=rendered.system_message,
            user_message=rendered.user_message,
            config=config,
        )

        logger.info(
            "Generation call: strategy=%s, model=%s, tokens=%d+%d, latency=%.0fms",
            strategy.id,
            provider_response.model,
            provider_response.input_tokens,
            provider_response.output_tokens,
            provider_response.latency_ms,
        )

        guardrail_check = check_guardrails(provider_response.content, strategy)

        return GenerationResult(
            content=provider_response.content,
            strategy_id=strategy.id,
            model=provider_response.model,
            violation=not guardrail_check.passed,
            guardrail_flags=guardrail_check.flags,
            usage={
                "input_tokens": provider_response.input_tokens,
                "output_tokens": provider_response.output_tokens,
            },
            latency_ms=provider_response.latency_ms,
        )
