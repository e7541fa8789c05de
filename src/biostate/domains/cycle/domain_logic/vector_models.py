"""Biological state vector model and domain constants."""

from __future__ import annotations

from dataclasses import dataclass


# ---------------------------------------------------------------------------
# Field names and display labels
# ---------------------------------------------------------------------------

FIELD_NAMES = [
    "estrogen_influence",
    "progesterone_influence",
    "energy_stability",
    "emotional_volatility",
    "inflammation_likelihood",
    "gastrointestinal_distress",
]

FIELD_LABELS = {
    "estrogen_influence": "Estrogen Influence",
    "progesterone_influence": "Progesterone Influence",
    "energy_stability": "Energy Stability",
    "emotional_volatility": "Emotional Volatility",
    "inflammation_likelihood": "Inflammation Likelihood",
    "gastrointestinal_distress": "Gastrointestinal Distress",
}

# Persisted alongside each vector; bump when any weight below changes.
FORMULA_VERSION = "v2"

HORMONE_MODEL_CYCLE_DAY = "cycle_day"
HORMONE_MODEL_PHASE = "phase"

# ---------------------------------------------------------------------------
# Hormone constants
# ---------------------------------------------------------------------------

DEFAULT_CYCLE_DAY = 14

# Coarse (estrogen, progesterone) per phase. Lower fidelity than the day curve.
PHASE_HORMONES = {
    "Menstrual": (0.2, 0.2),
    "Follicular": (0.6, 0.3),
    "Ovulatory": (0.9, 0.2),
    "Luteal": (0.5, 0.8),
}

ESTROGEN_OUT_OF_CYCLE = 0.5
PROGESTERONE_OUT_OF_CYCLE = 0.2

# ---------------------------------------------------------------------------
# Mood constants
# ---------------------------------------------------------------------------

# Neutral scores the same as Calm.
MOOD_SCORES = {
    "Calm": 0.2,
    "Neutral": 0.2,
    "Irritable": 0.6,
    "Severe mood swings": 1.0,
}

# Checked emotional symptoms lift the mood score to at least these floors.
MOOD_SYMPTOM_FLOORS = {
    "mood_swings": 0.8,
    "anxiety": 0.7,
    "low_motivation": 0.5,
}

INFLAMMATION_MARKERS = ("cramps", "back_pain", "joint_pain", "headache", "breast_tenderness")
GI_MARKERS = ("nausea", "vomiting", "diarrhea", "constipation")


# ---------------------------------------------------------------------------
# Result type
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class StateVector:
    """Six normalized indicators, each in [0, 1]."""

    estrogen_influence: float
    progesterone_influence: float
    energy_stability: float
    emotional_volatility: float
    inflammation_likelihood: float
    gastrointestinal_distress: float
    hormone_model: str = HORMONE_MODEL_CYCLE_DAY

    def values(self) -> list[float]:
        """Return values in FIELD_NAMES order."""
        return [getattr(self, name) for name in FIELD_NAMES]

    def as_dict(self, ndigits: int | None = None) -> dict[str, float]:
        """Return ``{field: value}``, optionally rounded."""
        if ndigits is None:
            return {name: getattr(self, name) for name in FIELD_NAMES}
        return {name: round(getattr(self, name), ndigits) for name in FIELD_NAMES}
