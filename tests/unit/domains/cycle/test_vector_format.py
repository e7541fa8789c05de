"""Tests for state vector text rendering and parsing."""

from __future__ import annotations

import pytest

from biostate.domains.cycle.domain_logic.vector_format import (
    format_state_vector,
    parse_state_vector_text,
    render_vector_bars,
)
from biostate.domains.cycle.domain_logic.vector_models import FIELD_NAMES, StateVector


@pytest.fixture
def vector() -> StateVector:
    return StateVector(
        estrogen_influence=0.6,
        progesterone_influence=0.3,
        energy_stability=0.58123,
        emotional_volatility=0.24,
        inflammation_likelihood=0.0834,
        gastrointestinal_distress=0.0,
    )


class TestFormat:
    def test_one_line_per_field(self, vector):
        lines = format_state_vector(vector).splitlines()
        assert lines[0] == "Estrogen Influence: 0.600"
        assert lines[2] == "Energy Stability: 0.581"
        assert len(lines) == len(FIELD_NAMES)

    def test_field_subset(self, vector):
        text = format_state_vector(vector, fields=["emotional_volatility"])
        assert text == "Emotional Volatility: 0.240"

    def test_round_trip_within_tolerance(self, vector):
        parsed = parse_state_vector_text(format_state_vector(vector))
        assert set(parsed) == set(FIELD_NAMES)
        for name, value in vector.as_dict().items():
            assert abs(parsed[name] - value) <= 0.0005

    def test_parse_ignores_other_lines(self):
        text = "Menstrual Phase: Luteal\nBiological State Profile:\nEnergy Stability: 0.420\nMood: 4"
        assert parse_state_vector_text(text) == {"energy_stability": 0.42}


class TestBars:
    def test_bar_widths(self, vector):
        lines = render_vector_bars(vector, width=10).splitlines()
        assert len(lines) == len(FIELD_NAMES)
        assert "######----" in lines[0]
        assert lines[0].endswith("0.60")
        assert "----------" in lines[5]

    def test_full_bar(self):
        full = StateVector(1.0, 1.0, 1.0, 1.0, 1.0, 1.0)
        for line in render_vector_bars(full, width=8).splitlines():
            assert "########" in line
            assert line.endswith("1.00")
