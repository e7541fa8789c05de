"""Guardrail checks on generated output."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from biostate.core.strategy.models import Strategy

logger = logging.getLogger(__name__)

# Heuristic phrase lists per prohibited action. Strategy guardrails name
# actions in natural language; we detect common unsafe phrasings of each.
PROHIBITED_INDICATORS: dict[str, tuple[str, ...]] = {
    "making medical diagnoses": (
        "you have been diagnosed",
        "you are suffering from",
        "you have endometriosis",
        "you have pcos",
        "you have a condition",
    ),
    "prescribing treatments": (
        "take this medication",
        "stop taking your medication",
        "stop taking your birth control",
        "i prescribe",
        "increase your dose",
    ),
    "making disease predictions": (
        "you will develop",
        "this will lead to",
        "you are infertile",
        "guaranteed to cure",
    ),
}


@dataclass
class GuardrailCheck:
    """Result of checking an output against strategy guardrails."""

    passed: bool
    flags: list[str] = field(default_factory=list)


def check_guardrails(content: str, strategy: Strategy) -> GuardrailCheck:
    """Check generated content against the strategy's prohibited actions.

    A strategy with no listed actions is checked against all of them.
    """
    flags: list[str] = []
    content_lower = content.lower()

    actions = strategy.guardrails.prohibited_actions or list(PROHIBITED_INDICATORS)
    for action in actions:
        for pattern in PROHIBITED_INDICATORS.get(action.lower(), ()):
            if pattern in content_lower:
                flags.append(f"prohibited_pattern_detected: {action} ('{pattern}')")

    for disclaimer in strategy.guardrails.disclaimers:
        if " ".join(disclaimer.lower().split()) not in " ".join(content_lower.split()):
            flags.append(f"disclaimer_missing: {disclaimer}")

    passed = not any(f.startswith("prohibited_pattern") for f in flags)

    if flags:
        logger.warning("Guardrail flags for strategy %s: %s", strategy.id, flags)

    return GuardrailCheck(passed=passed, flags=flags)
