"""Data models for prompting strategies."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class StrategyGuardrails:
    """Checks applied to every output produced under a strategy."""

    prohibited_actions: list[str] = field(default_factory=list)
    disclaimers: list[str] = field(default_factory=list)


@dataclass
class Strategy:
    """A prompting strategy: how a scenario is turned into model input."""

    id: str
    version: str
    display_name: str
    description: str
    system_message: str
    user_template: str
    order: int = 0
    is_baseline: bool = False
    uses_state_vector: bool = False
    uses_memory: bool = False
    guardrails: StrategyGuardrails = field(default_factory=StrategyGuardrails)
    tags: list[str] = field(default_factory=list)


@dataclass
class RenderedPrompt:
    """The messages sent to the model for one strategy."""

    system_message: str
    user_message: str
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def prompt_text(self) -> str:
        """Single-string form stored with each generation."""
        return f"System: {self.system_message}\nUser: {self.user_message}"
