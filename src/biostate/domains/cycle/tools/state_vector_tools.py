"""MCP tools for deterministic state vector computation.

No model is called here: the vector is a pure function of the scenario.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from fastmcp import Context, FastMCP

from biostate.domains.cycle.domain_logic.scenario_models import (
    ScenarioInput,
    ScenarioValidationError,
    require_valid_scenario,
)
from biostate.domains.cycle.domain_logic.state_vector import compute_state_vector
from biostate.domains.cycle.domain_logic.vector_format import (
    format_state_vector,
    render_vector_bars,
)
from biostate.domains.cycle.domain_logic.vector_models import FORMULA_VERSION

logger = logging.getLogger(__name__)


def parse_scenario_json(scenario_json: str) -> ScenarioInput:
    """Decode, build and range-check a scenario payload.

    Raises:
        ScenarioValidationError: For malformed JSON, missing fields or
            out-of-range values.
        InvalidEnumerationError: For an unknown phase or mood.
    """
    try:
        data: Any = json.loads(scenario_json)
    except ValueError as exc:
        raise ScenarioValidationError(f"scenario_json is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ScenarioValidationError("scenario_json must be a JSON object")
    return require_valid_scenario(ScenarioInput.from_dict(data))


def error_response(message: str) -> str:
    return json.dumps({"status": "error", "message": message})


def register_state_vector_tools(mcp: FastMCP) -> None:
    """Register state vector tools on the MCP server."""

    @mcp.tool(name="compute_state_vector")
    async def compute_state_vector_tool(ctx: Context, scenario_json: str) -> str:
        """Compute the six-field biological state vector for a scenario.

        Args:
            scenario_json: JSON object with phase, mood, energy, sleep, stress,
                symptoms ({name: 0|1}), and optional symptomSeverity (0-3),
                cycleDay (1-28), cycleLength and memoryText.
        """
        try:
            scenario = parse_scenario_json(scenario_json)
        except ValueError as exc:
            logger.info("Rejected scenario: %s", exc)
            return error_response(str(exc))

        vector = compute_state_vector(scenario)
        logger.info(
            "State vector computed (phase=%s, cycle_day=%s, model=%s)",
            scenario.phase.value, scenario.cycle_day, vector.hormone_model,
        )
        return json.dumps(
            {
                "status": "ok",
                "scenario": scenario.as_dict(),
                "state_vector": vector.as_dict(ndigits=4),
                "hormone_model": vector.hormone_model,
                "formula_version": FORMULA_VERSION,
                "prompt_block": format_state_vector(vector),
                "bars": render_vector_bars(vector),
            },
            indent=2,
        )
