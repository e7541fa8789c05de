"""Per-strategy comparison of stored generations and human ratings.

Aggregates the automated metrics and the blinded evaluation rubric so the
four prompting strategies can be compared side by side.
"""

from __future__ import annotations

import logging
import statistics
from typing import Any

from biostate.core.storage.models import RUBRIC_COLUMNS
from biostate.core.storage.repository import ResearchRepository

logger = logging.getLogger(__name__)


def _round(value: float | None) -> float | None:
    return round(value, 4) if value is not None else None


class StrategyComparison:
    """Compares strategies using stored research data.

    Usage::

        comparison = StrategyComparison(repository)
        summary = comparison.compare(strategy_order=["Generic", "Phase-Aware"])
    """

    def __init__(self, repository: ResearchRepository) -> None:
        self._repo = repository

    def compute_rubric_summary(self, scores: dict[str, list[int]]) -> dict[str, Any]:
        """Mean and spread of each rubric score for one strategy."""
        summary: dict[str, Any] = {}
        for name in RUBRIC_COLUMNS:
            values = scores.get(name, [])
            if not values:
                summary[name] = {"mean": None, "std_dev": None}
                continue
            summary[name] = {
                "mean": round(statistics.mean(values), 4),
                "std_dev": round(statistics.stdev(values), 4) if len(values) > 1 else 0.0,
            }
        return summary

    def compare(self, strategy_order: list[str] | None = None) -> dict[str, Any]:
        """Aggregate every strategy that has at least one generation.

        Args:
            strategy_order: Display names in presentation order. Strategies
                with data but not listed here are appended alphabetically.

        Returns:
            Dict with ``strategies`` (one entry per strategy) and totals.
        """
        generation_stats = self._repo.strategy_generation_stats()
        evaluation_scores = self._repo.strategy_evaluation_scores()

        names = list(strategy_order or [])
        names.extend(sorted(n for n in generation_stats if n not in names))

        strategies: list[dict[str, Any]] = []
        for name in names:
            stats = generation_stats.get(name)
            if stats is None:
                continue
            scores = evaluation_scores.get(name, {})
            evaluation_count = len(scores.get(RUBRIC_COLUMNS[0], []))
            strategies.append({
                "strategy": name,
                "generations": stats["generations"],
                "mean_word_count": _round(stats["mean_word_count"]),
                "mean_alignment_score": _round(stats["mean_alignment_score"]),
                "mean_semantic_distance": _round(stats["mean_semantic_distance"]),
                "mean_sentiment_score": _round(stats["mean_sentiment_score"]),
                "violations": stats["violations"],
                "evaluation_count": evaluation_count,
                "rubric": self.compute_rubric_summary(scores),
            })

        logger.debug("Compared %d strategies", len(strategies))
        return {
            "strategy_count": len(strategies),
            "total_generations": sum(s["generations"] for s in strategies),
            "total_evaluations": sum(s["evaluation_count"] for s in strategies),
            "strategies": strategies,
        }
