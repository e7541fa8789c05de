"""Deterministic state vector computation: scenario self-report -> StateVector.

Every output field is clamped to [0, 1]. The computation is pure: no I/O,
no randomness, no LLM. Range validation is the caller's job; out-of-domain
numbers flow through the arithmetic and are clamped at the end.
"""

from __future__ import annotations

from biostate.domains.cycle.domain_logic.scenario_models import (
    Mood,
    Phase,
    ScenarioInput,
    SymptomFlags,
)
from biostate.domains.cycle.domain_logic.vector_models import (
    DEFAULT_CYCLE_DAY,
    ESTROGEN_OUT_OF_CYCLE,
    GI_MARKERS,
    HORMONE_MODEL_CYCLE_DAY,
    HORMONE_MODEL_PHASE,
    INFLAMMATION_MARKERS,
    MOOD_SCORES,
    MOOD_SYMPTOM_FLOORS,
    PHASE_HORMONES,
    PROGESTERONE_OUT_OF_CYCLE,
    StateVector,
)


def clamp(value: float, lo: float = 0.0, hi: float = 1.0) -> float:
    """Clamp a value to [lo, hi]."""
    return max(lo, min(hi, value))


# ---------------------------------------------------------------------------
# Hormones
# ---------------------------------------------------------------------------

def estrogen_for_day(day: int | None) -> float:
    """Piecewise-linear estrogen influence for a 28-day cycle."""
    d = DEFAULT_CYCLE_DAY if day is None else day
    if 1 <= d <= 4:
        return 0.2
    if 5 <= d <= 13:
        return 0.3 + 0.05 * (d - 5)
    if 14 <= d <= 16:
        return 0.9
    if 17 <= d <= 24:
        return 0.7
    if 25 <= d <= 28:
        return 0.4
    return ESTROGEN_OUT_OF_CYCLE


def progesterone_for_day(day: int | None) -> float:
    """Piecewise-linear progesterone influence for a 28-day cycle."""
    d = DEFAULT_CYCLE_DAY if day is None else day
    if 1 <= d <= 13:
        return 0.2
    if 14 <= d <= 16:
        return 0.3
    if 17 <= d <= 24:
        return 0.5 + 0.05 * (d - 17)
    if 25 <= d <= 28:
        return 0.6
    return PROGESTERONE_OUT_OF_CYCLE


def hormones_for_phase(phase: Phase | str) -> tuple[float, float]:
    """Coarse (estrogen, progesterone) for a phase label.

    Raises:
        InvalidEnumerationError: For an unknown phase.
    """
    return PHASE_HORMONES[Phase.parse(phase).value]


def compute_hormones(scenario: ScenarioInput) -> tuple[float, float, str]:
    """Pick the hormone model for a scenario.

    The day curve is used whenever a cycle day is known; otherwise the
    phase constants are used and the result is tagged as such.

    Returns:
        (estrogen, progesterone, hormone_model)
    """
    if scenario.cycle_day is not None:
        return (
            estrogen_for_day(scenario.cycle_day),
            progesterone_for_day(scenario.cycle_day),
            HORMONE_MODEL_CYCLE_DAY,
        )
    estrogen, progesterone = hormones_for_phase(scenario.phase)
    return estrogen, progesterone, HORMONE_MODEL_PHASE


# ---------------------------------------------------------------------------
# Mood
# ---------------------------------------------------------------------------

def mood_score(mood: Mood | str, symptoms: SymptomFlags) -> float:
    """Base score for the mood category, lifted by emotional symptom floors.

    Raises:
        InvalidEnumerationError: For an unknown mood.
    """
    score = MOOD_SCORES[Mood.parse(mood).value]
    for symptom, floor in MOOD_SYMPTOM_FLOORS.items():
        if getattr(symptoms, symptom):
            score = max(score, floor)
    return score


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------

def compute_state_vector(scenario: ScenarioInput) -> StateVector:
    """Compute the biological state vector for one scenario."""
    energy_n = scenario.energy / 10
    sleep_n = scenario.sleep / 10
    stress_n = scenario.stress / 10
    severity_n = (scenario.symptom_severity or 0) / 3

    estrogen, progesterone, hormone_model = compute_hormones(scenario)

    energy_stability = 0.5 * energy_n + 0.3 * sleep_n + 0.2 * (1 - stress_n)

    mood_n = mood_score(scenario.mood, scenario.symptoms)
    emotional_volatility = 0.5 * stress_n + 0.3 * severity_n + 0.2 * mood_n

    inflam_count = scenario.symptoms.count(INFLAMMATION_MARKERS) / len(INFLAMMATION_MARKERS)
    inflammation = 0.5 * severity_n + 0.3 * inflam_count + 0.2 * stress_n

    gi_count = scenario.symptoms.count(GI_MARKERS) / len(GI_MARKERS)
    gi_distress = 0.6 * gi_count + 0.4 * severity_n

    return StateVector(
        estrogen_influence=clamp(estrogen),
        progesterone_influence=clamp(progesterone),
        energy_stability=clamp(energy_stability),
        emotional_volatility=clamp(emotional_volatility),
        inflammation_likelihood=clamp(inflammation),
        gastrointestinal_distress=clamp(gi_distress),
        hormone_model=hormone_model,
    )
