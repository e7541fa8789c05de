"""Data models for the research persistence layer."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

VECTOR_COLUMNS = (
    "estrogen_influence",
    "progesterone_influence",
    "energy_stability",
    "emotional_volatility",
    "inflammation_likelihood",
    "gastrointestinal_distress",
)

RUBRIC_COLUMNS = (
    "relevance_score",
    "specificity_score",
    "biological_grounding_score",
    "personalization_score",
    "safety_score",
)


@dataclass
class ScenarioRecord:
    """A submitted scenario together with its computed state vector.

    Symptoms and memory text are stored encrypted; everything else is plain.
    """

    id: str
    phase: str
    mood: str
    energy: float
    sleep: float
    stress: float
    symptom_severity: float = 0
    cycle_day: int | None = None
    cycle_length: int = 28
    symptoms: dict[str, int] = field(default_factory=dict)
    memory_text: str = ""

    # Computed vector
    vector: dict[str, float] = field(default_factory=dict)
    hormone_model: str = ""
    formula_version: str = ""

    created_at: str = ""


@dataclass
class MetricsRecord:
    """Automated metrics for one generation."""

    semantic_distance: float | None = None
    alignment_score: float | None = None
    violation_flag: bool = False
    sentiment_score: float | None = None
    baseline_generation_id: str | None = None

    def as_dict(self) -> dict[str, Any]:
        return {
            "semantic_distance": self.semantic_distance,
            "alignment_score": self.alignment_score,
            "violation_flag": self.violation_flag,
            "sentiment_score": self.sentiment_score,
            "baseline_generation_id": self.baseline_generation_id,
        }


@dataclass
class GenerationRecord:
    """One model output for one strategy."""

    id: str
    scenario_id: str
    strategy_type: str
    model_name: str
    prompt_text: str
    output_text: str
    word_count: int = 0
    temperature: float | None = None
    top_p: float | None = None
    max_tokens: int | None = None
    seed: int | None = None
    metrics: MetricsRecord | None = None
    created_at: str = ""


@dataclass
class EvaluationRecord:
    """A blinded human rating of one generation, each score 1-5."""

    id: str
    generation_id: str
    relevance_score: int
    specificity_score: int
    biological_grounding_score: int
    personalization_score: int
    safety_score: int
    evaluator_id: str = "anonymous"
    timestamp: str = ""

    # Filled on read for convenience
    strategy_type: str = ""

    def scores(self) -> dict[str, int]:
        return {name: getattr(self, name) for name in RUBRIC_COLUMNS}
