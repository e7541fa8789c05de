"""Scenario input models, closed enumerations, and upstream validation."""

from __future__ import annotations

import math
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Mapping


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class InvalidEnumerationError(ValueError):
    """Raised when a phase or mood value is outside its closed enumeration."""


class ScenarioValidationError(ValueError):
    """Raised when a scenario fails range or shape validation."""


# ---------------------------------------------------------------------------
# Closed enumerations
# ---------------------------------------------------------------------------

def _canonical(value: str) -> str:
    return "".join(ch for ch in value.lower() if ch.isalnum())


class _LabelEnum(str, Enum):
    """String enum that parses its own labels and nothing else."""

    @classmethod
    def parse(cls, value: Any):
        """Return the member matching ``value``.

        Accepts a member, its label (``"Severe mood swings"``) or its name
        (``"SEVERE_MOOD_SWINGS"``); spacing, case and underscores are ignored.

        Raises:
            InvalidEnumerationError: If nothing matches.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            wanted = _canonical(value)
            for member in cls:
                if wanted in (_canonical(member.value), _canonical(member.name)):
                    return member
        labels = ", ".join(m.value for m in cls)
        raise InvalidEnumerationError(
            f"Invalid {cls.__name__.lower()}: {value!r}. Expected one of: {labels}"
        )


class Phase(_LabelEnum):
    MENSTRUAL = "Menstrual"
    FOLLICULAR = "Follicular"
    OVULATORY = "Ovulatory"
    LUTEAL = "Luteal"


class Mood(_LabelEnum):
    CALM = "Calm"
    NEUTRAL = "Neutral"
    IRRITABLE = "Irritable"
    SEVERE_MOOD_SWINGS = "Severe mood swings"


# ---------------------------------------------------------------------------
# Symptom checklist
# ---------------------------------------------------------------------------

INFLAMMATORY_SYMPTOMS = ("cramps", "back_pain", "headache", "joint_pain", "breast_tenderness")
GASTROINTESTINAL_SYMPTOMS = ("nausea", "vomiting", "bloating", "diarrhea", "constipation")
FATIGUE_SYMPTOMS = ("fatigue", "dizziness", "brain_fog")
EMOTIONAL_SYMPTOMS = ("mood_swings", "anxiety", "irritability", "low_motivation")

SYMPTOM_GROUPS = {
    "Inflammatory / Pain": INFLAMMATORY_SYMPTOMS,
    "Gastrointestinal": GASTROINTESTINAL_SYMPTOMS,
    "Fatigue / Cognitive": FATIGUE_SYMPTOMS,
    "Emotional": EMOTIONAL_SYMPTOMS,
}

SYMPTOM_NAMES = (
    INFLAMMATORY_SYMPTOMS
    + GASTROINTESTINAL_SYMPTOMS
    + FATIGUE_SYMPTOMS
    + EMOTIONAL_SYMPTOMS
)


def _flag(value: Any) -> bool:
    """Interpret a checklist value (0/1, bool, numeric string) as a flag."""
    if isinstance(value, str):
        value = value.strip()
        try:
            return float(value) != 0
        except ValueError:
            return value.lower() in ("true", "yes", "on")
    return bool(value)


@dataclass(frozen=True)
class SymptomFlags:
    """The named symptom checklist.

    Unknown keys land in ``extra`` and take part in no formula.
    """

    cramps: bool = False
    back_pain: bool = False
    headache: bool = False
    joint_pain: bool = False
    breast_tenderness: bool = False

    nausea: bool = False
    vomiting: bool = False
    bloating: bool = False
    diarrhea: bool = False
    constipation: bool = False

    fatigue: bool = False
    dizziness: bool = False
    brain_fog: bool = False

    mood_swings: bool = False
    anxiety: bool = False
    irritability: bool = False
    low_motivation: bool = False

    extra: Mapping[str, bool] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any] | None) -> SymptomFlags:
        """Build flags from a ``{name: 0|1}`` mapping, in any key order."""
        if not mapping:
            return cls()
        known: dict[str, bool] = {}
        extra: dict[str, bool] = {}
        for name, value in mapping.items():
            if name in SYMPTOM_NAMES:
                known[name] = _flag(value)
            else:
                extra[str(name)] = _flag(value)
        return cls(**known, extra=extra)

    def count(self, names: tuple[str, ...]) -> int:
        """Number of flags set among ``names``."""
        return sum(1 for name in names if getattr(self, name))

    def checked(self) -> list[str]:
        """Names of all set flags, named checklist first, then extras."""
        names = [name for name in SYMPTOM_NAMES if getattr(self, name)]
        names.extend(name for name, on in self.extra.items() if on)
        return names

    def as_dict(self) -> dict[str, int]:
        """Checklist as ``{name: 0|1}``, including extras."""
        out = {name: int(getattr(self, name)) for name in SYMPTOM_NAMES}
        out.update({name: int(on) for name, on in self.extra.items()})
        return out


# ---------------------------------------------------------------------------
# Scenario input
# ---------------------------------------------------------------------------

DEFAULT_CYCLE_LENGTH = 28

# Accept the dashboard's camelCase keys as well as snake_case.
_KEY_ALIASES = {
    "cycleDay": "cycle_day",
    "cycleLength": "cycle_length",
    "symptomSeverity": "symptom_severity",
    "memoryText": "memory_text",
}


@dataclass(frozen=True)
class ScenarioInput:
    """A single structured self-report. Read-only once built."""

    phase: Phase
    mood: Mood
    energy: float
    sleep: float
    stress: float
    symptoms: SymptomFlags = field(default_factory=SymptomFlags)
    symptom_severity: float = 0
    cycle_day: int | None = None
    cycle_length: int = DEFAULT_CYCLE_LENGTH
    memory_text: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ScenarioInput:
        """Build a scenario from a request payload.

        Raises:
            InvalidEnumerationError: For an unknown phase or mood.
            ScenarioValidationError: For missing fields, non-numeric or non-finite
                values, or a fractional cycle day or length.
        """
        payload = {_KEY_ALIASES.get(k, k): v for k, v in data.items()}

        missing = [k for k in ("phase", "mood", "energy", "sleep", "stress") if k not in payload]
        if missing:
            raise ScenarioValidationError(f"Missing required scenario fields: {missing}")

        symptoms = payload.get("symptoms") or {}
        if not isinstance(symptoms, Mapping):
            raise ScenarioValidationError("symptoms must be a mapping of name -> 0|1")

        cycle_day = payload.get("cycle_day")
        if cycle_day in ("", 0):
            cycle_day = None

        return cls(
            phase=Phase.parse(payload["phase"]),
            mood=Mood.parse(payload["mood"]),
            energy=_number("energy", payload["energy"]),
            sleep=_number("sleep", payload["sleep"]),
            stress=_number("stress", payload["stress"]),
            symptoms=SymptomFlags.from_mapping(symptoms),
            symptom_severity=_number("symptom_severity", payload.get("symptom_severity") or 0),
            cycle_day=None if cycle_day is None else _whole_number("cycle_day", cycle_day),
            cycle_length=_whole_number("cycle_length", payload.get("cycle_length") or DEFAULT_CYCLE_LENGTH),
            memory_text=str(payload.get("memory_text") or ""),
        )

    def as_dict(self) -> dict[str, Any]:
        """Plain-data view, suitable for JSON."""
        out: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, Enum):
                value = value.value
            elif isinstance(value, SymptomFlags):
                value = value.as_dict()
            out[f.name] = value
        return out


def _number(name: str, value: Any) -> float:
    if isinstance(value, bool):
        raise ScenarioValidationError(f"{name} must be numeric, got {value!r}")
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise ScenarioValidationError(f"{name} must be numeric, got {value!r}") from exc
    if not math.isfinite(number):
        raise ScenarioValidationError(f"{name} must be finite, got {value!r}")
    return number


def _whole_number(name: str, value: Any) -> int:
    number = _number(name, value)
    if number != int(number):
        raise ScenarioValidationError(f"{name} must be a whole number, got {value!r}")
    return int(number)


def validate_scenario(scenario: ScenarioInput) -> list[str]:
    """Check every numeric field against its domain.

    The calculator itself accepts any finite input; callers that want to
    reject out-of-range reports run this first.

    Returns:
        A list of human-readable problems (empty when valid).
    """
    problems: list[str] = []
    for name in ("energy", "sleep", "stress"):
        value = getattr(scenario, name)
        if not (1 <= value <= 10) or value != int(value):
            problems.append(f"{name} must be an integer in 1-10, got {value:g}")

    sev = scenario.symptom_severity
    if not (0 <= sev <= 3) or sev != int(sev):
        problems.append(f"symptom_severity must be an integer in 0-3, got {sev:g}")

    if scenario.cycle_day is not None and not (1 <= scenario.cycle_day <= 28):
        problems.append(f"cycle_day must be in 1-28, got {scenario.cycle_day}")

    if scenario.cycle_length <= 0:
        problems.append(f"cycle_length must be positive, got {scenario.cycle_length}")

    return problems


def require_valid_scenario(scenario: ScenarioInput) -> ScenarioInput:
    """Return ``scenario`` unchanged, or raise ScenarioValidationError."""
    problems = validate_scenario(scenario)
    if problems:
        raise ScenarioValidationError("; ".join(problems))
    return scenario
