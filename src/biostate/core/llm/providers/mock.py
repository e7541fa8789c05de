"""Mock LLM provider for testing."""

from __future__ import annotations

from biostate.core.llm.provider import ProviderResponse, SamplingConfig


class MockProvider:
    """Mock provider for testing; returns a canned response.

    ``responses`` maps a substring of the system message to the reply used
    for it, so different strategies can get different outputs.
    """

    def __init__(
        self,
        response_content: str = "Mock LLM response.",
        responses: dict[str, str] | None = None,
    ) -> None:
        self.response_content = response_content
        self.responses = responses or {}
        self.model = "mock"
        self.calls: list[tuple[str, str, SamplingConfig]] = []

    @property
    def call_count(self) -> int:
        return len(self.calls)

    @property
    def last_user_message(self) -> str:
        return self.calls[-1][1] if self.calls else ""

    async def generate(
        self,
        system_message: str,
        user_message: str,
        config: SamplingConfig | None = None,
    ) -> ProviderResponse:
        config = config or SamplingConfig()
        self.calls.append((system_message, user_message, config))
        content = self.response_content
        for needle, reply in self.responses.items():
            if needle in system_message:
                content = reply
                break
        return ProviderResponse(
            content=content,
            input_tokens=len(system_message.split()) + len(user_message.split()),
            output_tokens=len(content.split()),
            model=config.model or self.model,
            latency_ms=0.0,
        )
