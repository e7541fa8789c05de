"""Tests for deterministic output metrics."""

from __future__ import annotations

import pytest

from biostate.domains.cycle.domain_logic.output_metrics import (
    alignment_score,
    compute_output_metrics,
    semantic_distance,
    sentiment_score,
    word_count,
)
from biostate.domains.cycle.domain_logic.vector_models import StateVector


def _vector(**overrides) -> StateVector:
    values = dict(
        estrogen_influence=0.2,
        progesterone_influence=0.2,
        energy_stability=0.2,
        emotional_volatility=0.2,
        inflammation_likelihood=0.2,
        gastrointestinal_distress=0.2,
    )
    values.update(overrides)
    return StateVector(**values)


class TestSemanticDistance:
    def test_identical_texts(self):
        assert semantic_distance("rest and hydrate", "Rest and hydrate.") == 0.0

    def test_disjoint_texts(self):
        assert semantic_distance("gentle yoga", "warm tea") == 1.0

    def test_partial_overlap_between_bounds(self):
        d = semantic_distance("gentle stretching for cramps", "gentle walking helps")
        assert 0.0 < d < 1.0

    def test_empty_inputs(self):
        assert semantic_distance("", "") == 0.0
        assert semantic_distance("something", "") == 1.0


class TestAlignment:
    def test_nothing_elevated(self):
        assert alignment_score("anything at all", _vector()) == 1.0

    def test_addresses_elevated_dimensions(self):
        vector = _vector(inflammation_likelihood=0.8, gastrointestinal_distress=0.6)
        assert alignment_score("A heat pad can ease cramps.", vector) == 0.5
        assert alignment_score("Ease cramps and settle your stomach.", vector) == 1.0
        assert alignment_score("Drink water.", vector) == 0.0


class TestSentiment:
    def test_neutral_without_lexicon_words(self):
        assert sentiment_score("Drink water today.") == 0.0

    def test_polarity(self):
        assert sentiment_score("gentle supportive rest") == 1.0
        assert sentiment_score("severe pain and distress") == -1.0


def test_word_count():
    assert word_count("  one two\nthree  ") == 3
    assert word_count("") == 0


class TestComputeOutputMetrics:
    def test_baseline_has_no_distance(self):
        metrics = compute_output_metrics("Rest well.", _vector())
        assert metrics.semantic_distance is None
        assert metrics.word_count == 2

    def test_with_baseline_and_violation(self):
        metrics = compute_output_metrics(
            "Rest well tonight.", _vector(), baseline_text="Rest well.", violation_flag=True,
        )
        assert metrics.semantic_distance == pytest.approx(semantic_distance("Rest well tonight.", "Rest well."))
        assert metrics.violation_flag is True
        assert set(metrics.as_dict()) == {
            "word_count", "semantic_distance", "alignment_score", "violation_flag", "sentiment_score",
        }
