"""Strategy registry: in-memory index for loaded prompting strategies."""

from __future__ import annotations

import logging

from biostate.core.strategy.models import Strategy

logger = logging.getLogger(__name__)


class StrategyNotFoundError(KeyError):
    """Raised when a strategy id or display name is not registered."""


class StrategyRegistry:
    """In-memory registry of all loaded strategy definitions."""

    def __init__(self) -> None:
        self._strategies: dict[str, Strategy] = {}
        self._by_name: dict[str, str] = {}

    def register(self, strategy: Strategy) -> None:
        """Add a strategy to all indexes."""
        if strategy.id in self._strategies:
            raise ValueError(f"Duplicate strategy id registered: {strategy.id!r}")
        name_key = strategy.display_name.lower()
        if name_key in self._by_name:
            raise ValueError(f"Duplicate strategy name registered: {strategy.display_name!r}")
        self._strategies[strategy.id] = strategy
        self._by_name[name_key] = strategy.id

    def get(self, key: str) -> Strategy | None:
        """Look up a strategy by id or display name (case-insensitive)."""
        if key in self._strategies:
            return self._strategies[key]
        sid = self._by_name.get(key.strip().lower())
        return self._strategies[sid] if sid else None

    def require(self, key: str) -> Strategy:
        """Like get(), but raise StrategyNotFoundError when missing."""
        strategy = self.get(key)
        if strategy is None:
            names = ", ".join(s.display_name for s in self.all())
            raise StrategyNotFoundError(f"Unknown strategy {key!r}. Available: {names}")
        return strategy

    def all(self) -> list[Strategy]:
        """Return all registered strategies in presentation order."""
        return sorted(self._strategies.values(), key=lambda s: (s.order, s.id))

    def __len__(self) -> int:
        return len(self._strategies)
