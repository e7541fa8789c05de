"""Tests for strategy loading, registry lookup and rendering."""

from __future__ import annotations

import pytest

from biostate.core.server.app import STRATEGY_DIR
from biostate.core.strategy.loader import (
    StrategyLoadError,
    load_strategy_directory,
    parse_strategy,
)
from biostate.core.strategy.models import Strategy
from biostate.core.strategy.registry import StrategyNotFoundError, StrategyRegistry
from biostate.core.strategy.renderer import render_strategy
from biostate.domains.cycle.domain_logic.prompt_context import build_prompt_context
from biostate.domains.cycle.domain_logic.state_vector import compute_state_vector


def _definition(**overrides) -> dict:
    data = {
        "id": "test_strategy",
        "version": "1.0.0",
        "display_name": "Test Strategy",
        "system_message": "You are a  test\n assistant.",
        "user_template": "Phase: {phase}\nMood: {mood}\n",
    }
    data.update(overrides)
    return data


class TestLoader:
    def test_shipped_strategies_load(self, strategy_registry):
        assert len(strategy_registry) == 4
        names = [s.display_name for s in strategy_registry.all()]
        assert names == ["Generic", "Phase-Aware", "Phase + Memory-Aware", "Phase + State Vector"]

    def test_parse_collapses_system_whitespace(self):
        strategy = parse_strategy(_definition())
        assert strategy.system_message == "You are a test assistant."
        assert strategy.user_template == "Phase: {phase}\nMood: {mood}"

    def test_missing_required_keys(self):
        with pytest.raises(StrategyLoadError, match="user_template"):
            parse_strategy(_definition(user_template=""))

    def test_unknown_placeholder(self):
        with pytest.raises(StrategyLoadError, match="weather"):
            parse_strategy(_definition(user_template="Today: {weather}"))

    def test_bad_files_are_skipped(self, tmp_path):
        (tmp_path / "good.yaml").write_text(
            "id: good\nversion: '1'\ndisplay_name: Good\n"
            "system_message: Hi\nuser_template: 'Mood: {mood}'\n",
            encoding="utf-8",
        )
        (tmp_path / "bad.yaml").write_text("id: bad\n", encoding="utf-8")
        (tmp_path / "_draft.yaml").write_text("not: loaded\n", encoding="utf-8")
        registry = StrategyRegistry()
        assert load_strategy_directory(tmp_path, registry) == 1
        assert registry.get("good") is not None

    def test_missing_directory(self, tmp_path):
        assert load_strategy_directory(tmp_path / "absent", StrategyRegistry()) == 0

    def test_strategy_dir_exists(self):
        assert STRATEGY_DIR.is_dir()


class TestRegistry:
    def test_lookup_by_id_and_name(self, strategy_registry):
        assert strategy_registry.get("phase_state_vector").display_name == "Phase + State Vector"
        assert strategy_registry.get("phase-aware").id == "phase_aware"
        assert strategy_registry.get("nope") is None

    def test_require_lists_available(self, strategy_registry):
        with pytest.raises(StrategyNotFoundError, match="Generic"):
            strategy_registry.require("Chain of Thought")

    def test_generic_is_the_only_baseline(self, strategy_registry):
        assert [s.id for s in strategy_registry.all() if s.is_baseline] == ["generic"]

    def test_duplicate_rejected(self):
        registry = StrategyRegistry()
        registry.register(parse_strategy(_definition()))
        with pytest.raises(ValueError, match="Duplicate"):
            registry.register(parse_strategy(_definition()))
        with pytest.raises(ValueError, match="Duplicate strategy name"):
            registry.register(parse_strategy(_definition(id="other")))


class TestRenderer:
    def test_state_vector_strategy_embeds_vector(self, strategy_registry, scenario_factory):
        scenario = scenario_factory(mood="Neutral", energy=5, sleep=7)
        context = build_prompt_context(scenario, compute_state_vector(scenario))
        rendered = render_strategy(strategy_registry.require("Phase + State Vector"), context)

        assert "Menstrual Phase: Follicular" in rendered.user_message
        assert "Energy Stability: 0.580" in rendered.user_message
        assert rendered.system_message.startswith("You are an advanced menstrual health AI system.")
        assert rendered.metadata["strategy_id"] == "phase_state_vector"
        assert rendered.prompt_text.startswith("System: You are an advanced")
        assert "\nUser: Menstrual Phase" in rendered.prompt_text

    def test_generic_omits_phase(self, strategy_registry, scenario_factory):
        scenario = scenario_factory(symptoms={"headache": 1})
        context = build_prompt_context(scenario, compute_state_vector(scenario))
        rendered = render_strategy(strategy_registry.require("Generic"), context)
        assert "Follicular" not in rendered.user_message
        assert "Symptoms: headache(1)" in rendered.user_message
        assert rendered.system_message == "You are a general wellness assistant."

    def test_memory_strategy_uses_default_memory(self, strategy_registry, scenario_factory):
        scenario = scenario_factory()
        context = build_prompt_context(scenario, compute_state_vector(scenario))
        rendered = render_strategy(strategy_registry.require("Phase + Memory-Aware"), context)
        assert "Historical Pattern: Context indicates recurrent symptoms" in rendered.user_message

    def test_missing_context_field(self):
        strategy = Strategy(
            id="s", version="1", display_name="S", description="",
            system_message="sys", user_template="Day {cycle_day}",
        )
        with pytest.raises(KeyError, match="cycle_day"):
            render_strategy(strategy, {"phase": "Luteal"})
