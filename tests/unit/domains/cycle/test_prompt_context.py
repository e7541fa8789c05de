"""Tests for the prompt context handed to strategy templates."""

from __future__ import annotations

from biostate.core.strategy.loader import TEMPLATE_FIELDS
from biostate.domains.cycle.domain_logic.prompt_context import (
    DEFAULT_MEMORY,
    NO_SYMPTOMS,
    build_prompt_context,
    format_symptom_list,
)
from biostate.domains.cycle.domain_logic.state_vector import compute_state_vector


def test_symptom_list_format(scenario_factory):
    scenario = scenario_factory(symptoms={"cramps": 1, "anxiety": 1, "nausea": 0})
    assert format_symptom_list(scenario) == "cramps(1), anxiety(1)"


def test_symptom_list_empty(scenario_factory):
    assert format_symptom_list(scenario_factory()) == NO_SYMPTOMS


def test_context_covers_every_template_field(scenario_factory):
    scenario = scenario_factory()
    context = build_prompt_context(scenario, compute_state_vector(scenario))
    assert set(context) == TEMPLATE_FIELDS


def test_context_values(scenario_factory):
    scenario = scenario_factory(energy=7, cycleDay=9, memoryText="  Cramps on day 1 and 2. ")
    context = build_prompt_context(scenario, compute_state_vector(scenario))
    assert context["phase"] == "Follicular"
    assert context["energy"] == "7"
    assert context["cycle_day"] == "9"
    assert context["memory"] == "Cramps on day 1 and 2."
    assert context["state_vector"].startswith("Estrogen Influence: 0.500")


def test_context_defaults(scenario_factory):
    scenario = scenario_factory()
    context = build_prompt_context(scenario, compute_state_vector(scenario))
    assert context["cycle_day"] == "unknown"
    assert context["memory"] == DEFAULT_MEMORY
