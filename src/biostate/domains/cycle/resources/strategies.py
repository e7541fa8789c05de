"""MCP Resources for prompting strategy discovery."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from fastmcp import FastMCP

from biostate.domains.cycle.domain_logic.vector_models import FIELD_LABELS, FORMULA_VERSION

if TYPE_CHECKING:
    from biostate.core.strategy.registry import StrategyRegistry


def register_strategy_resources(mcp: FastMCP, registry: StrategyRegistry) -> None:
    """Register strategy discovery resources on the MCP server."""

    @mcp.resource("strategy://registry")
    def strategy_registry_resource() -> str:
        """Discover all available prompting strategies."""
        strategies = registry.all()
        return json.dumps(
            {
                "strategy_count": len(strategies),
                "formula_version": FORMULA_VERSION,
                "state_vector_fields": list(FIELD_LABELS.values()),
                "strategies": [
                    {
                        "id": s.id,
                        "version": s.version,
                        "display_name": s.display_name,
                        "description": s.description,
                        "is_baseline": s.is_baseline,
                        "uses_state_vector": s.uses_state_vector,
                        "uses_memory": s.uses_memory,
                        "prohibited_actions": s.guardrails.prohibited_actions,
                        "tags": s.tags,
                    }
                    for s in strategies
                ],
            },
            indent=2,
        )
