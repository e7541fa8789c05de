"""MCP Prompts: guided templates for strategy comparison sessions."""

from __future__ import annotations

from fastmcp import FastMCP


def register_cycle_prompts(mcp: FastMCP) -> None:
    """Register cycle research MCP prompts."""

    @mcp.prompt()
    def strategy_comparison_prompt(phase: str = "Luteal", mood: str = "Irritable") -> str:
        """Prompt template for comparing all strategies on one scenario."""
        return f"""I'd like to compare how the prompting strategies handle one scenario.

1. Build a scenario in the {phase} phase with mood "{mood}", and pick energy,
   sleep and stress on a 1-10 scale plus any symptoms that fit
2. Call compute_state_vector and show me the vector bars
3. Call generate_responses with generate_all_strategies=true
4. Show the four outputs without their strategy names so I can rate them blind
5. After I rate them, call submit_evaluation for each and then compare_strategies

Keep the outputs exactly as generated; don't summarize or edit them."""
