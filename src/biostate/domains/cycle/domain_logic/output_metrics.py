"""Deterministic text metrics for generated responses.

All metrics are reproducible from the output text, the state vector and the
baseline (Generic strategy) output of the same request. No model calls.
"""

from __future__ import annotations

import math
import re
from collections import Counter
from dataclasses import dataclass

from biostate.domains.cycle.domain_logic.vector_models import FIELD_NAMES, StateVector

_TOKEN_RE = re.compile(r"[a-z][a-z'-]*")

# A vector dimension at or above this value counts as elevated.
ELEVATED_THRESHOLD = 0.5

# Stems that show a response engages with a given dimension.
DIMENSION_KEYWORDS = {
    "estrogen_influence": ("estrogen", "oestrogen"),
    "progesterone_influence": ("progesterone",),
    "energy_stability": ("energy", "fatigue", "tired", "rest", "stamina"),
    "emotional_volatility": ("mood", "emotion", "stress", "anxiety", "irritab", "calm"),
    "inflammation_likelihood": ("inflamm", "pain", "cramp", "ache", "tender"),
    "gastrointestinal_distress": ("digest", "gut", "nausea", "bloat", "stomach", "gastro", "bowel"),
}

_POSITIVE = frozenset(
    "support supportive gentle helpful improve improves improving relief relieve calm "
    "balanced balance good great benefit benefits beneficial healthy comfort comfortable "
    "restorative nourishing ease easier encourage encouraged positive boost steady".split()
)
_NEGATIVE = frozenset(
    "pain painful worse worsen worsening severe risk risky distress difficult struggle "
    "struggling fatigue exhausted exhaustion bad harmful avoid stress stressful anxious "
    "irritable discomfort uncomfortable problem problems concern concerning".split()
)


@dataclass(frozen=True)
class OutputMetrics:
    """Metrics computed for a single generation."""

    word_count: int
    alignment_score: float
    sentiment_score: float
    violation_flag: bool = False
    semantic_distance: float | None = None

    def as_dict(self) -> dict:
        return {
            "word_count": self.word_count,
            "semantic_distance": self.semantic_distance,
            "alignment_score": self.alignment_score,
            "violation_flag": self.violation_flag,
            "sentiment_score": self.sentiment_score,
        }


def tokenize(text: str) -> list[str]:
    """Lowercase word tokens."""
    return _TOKEN_RE.findall(text.lower())


def word_count(text: str) -> int:
    """Whitespace-delimited word count."""
    return len(text.split())


def semantic_distance(text: str, baseline: str) -> float:
    """Cosine distance between term-frequency vectors, in [0, 1].

    Two empty texts are identical (0.0); one empty text is maximally
    distant (1.0).
    """
    a = Counter(tokenize(text))
    b = Counter(tokenize(baseline))
    if not a and not b:
        return 0.0
    if not a or not b:
        return 1.0
    dot = sum(count * b[token] for token, count in a.items())
    norm = math.sqrt(sum(c * c for c in a.values())) * math.sqrt(sum(c * c for c in b.values()))
    return round(max(0.0, min(1.0, 1.0 - dot / norm)), 4)


def alignment_score(text: str, vector: StateVector) -> float:
    """Share of elevated vector dimensions the text engages with.

    Returns 1.0 when no dimension is elevated.
    """
    elevated = [name for name in FIELD_NAMES if getattr(vector, name) >= ELEVATED_THRESHOLD]
    if not elevated:
        return 1.0
    lowered = text.lower()
    addressed = sum(
        1 for name in elevated
        if any(stem in lowered for stem in DIMENSION_KEYWORDS[name])
    )
    return round(addressed / len(elevated), 4)


def sentiment_score(text: str) -> float:
    """Lexicon polarity in [-1, 1]; 0.0 when no lexicon word occurs."""
    tokens = tokenize(text)
    pos = sum(1 for t in tokens if t in _POSITIVE)
    neg = sum(1 for t in tokens if t in _NEGATIVE)
    if pos + neg == 0:
        return 0.0
    return round((pos - neg) / (pos + neg), 4)


def compute_output_metrics(
    text: str,
    vector: StateVector,
    *,
    baseline_text: str | None = None,
    violation_flag: bool = False,
) -> OutputMetrics:
    """Compute all metrics for one output.

    ``baseline_text`` is the Generic strategy's output for the same
    scenario; pass None for the baseline itself.
    """
    return OutputMetrics(
        word_count=word_count(text),
        semantic_distance=(
            semantic_distance(text, baseline_text) if baseline_text is not None else None
        ),
        alignment_score=alignment_score(text, vector),
        violation_flag=violation_flag,
        sentiment_score=sentiment_score(text),
    )
