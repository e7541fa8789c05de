"""Builds the template context that prompting strategies are rendered with."""

from __future__ import annotations

from typing import Any

from biostate.domains.cycle.domain_logic.scenario_models import ScenarioInput
from biostate.domains.cycle.domain_logic.vector_format import format_state_vector
from biostate.domains.cycle.domain_logic.vector_models import StateVector

NO_SYMPTOMS = "none reported"

# Used by the memory-aware strategy when the user left no history.
DEFAULT_MEMORY = "Context indicates recurrent symptoms in this phase previously."


def _num(value: float) -> str:
    return f"{value:g}"


def format_symptom_list(scenario: ScenarioInput) -> str:
    """``cramps(1), anxiety(1)`` for every checked symptom."""
    checked = scenario.symptoms.checked()
    if not checked:
        return NO_SYMPTOMS
    return ", ".join(f"{name}(1)" for name in checked)


def build_prompt_context(scenario: ScenarioInput, vector: StateVector) -> dict[str, Any]:
    """Every placeholder a strategy template may use."""
    memory = scenario.memory_text.strip() or DEFAULT_MEMORY
    return {
        "phase": scenario.phase.value,
        "mood": scenario.mood.value,
        "energy": _num(scenario.energy),
        "sleep": _num(scenario.sleep),
        "stress": _num(scenario.stress),
        "symptom_severity": _num(scenario.symptom_severity),
        "cycle_day": "unknown" if scenario.cycle_day is None else str(scenario.cycle_day),
        "symptoms": format_symptom_list(scenario),
        "memory": memory,
        "state_vector": format_state_vector(vector),
    }
