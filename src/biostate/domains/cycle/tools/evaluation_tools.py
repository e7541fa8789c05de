"""MCP tools for blinded human evaluation and research data export.

These tools need the encrypted research store and are only registered
when storage is enabled.
"""

from __future__ import annotations

import csv
import io
import json
import logging
from typing import TYPE_CHECKING

from fastmcp import Context, FastMCP

from biostate.core.storage.models import VECTOR_COLUMNS, EvaluationRecord
from biostate.core.storage.repository import RUBRIC_MAX, RUBRIC_MIN, RepositoryError
from biostate.domains.cycle.tools.state_vector_tools import error_response

if TYPE_CHECKING:
    from biostate.core.storage.repository import ResearchRepository
    from biostate.core.strategy.registry import StrategyRegistry
    from biostate.domains.cycle.domain_logic.strategy_comparison import StrategyComparison

logger = logging.getLogger(__name__)

CSV_COLUMNS = [
    "generation_id",
    "scenario_id",
    "created_at",
    "strategy_type",
    "model_name",
    "temperature",
    "top_p",
    "max_tokens",
    "seed",
    "phase",
    "mood",
    "energy",
    "sleep",
    "stress",
    "symptom_severity",
    "cycle_day",
    "symptoms",
    *VECTOR_COLUMNS,
    "hormone_model",
    "word_count",
    "semantic_distance",
    "alignment_score",
    "violation_flag",
    "sentiment_score",
    "evaluation_count",
    "prompt_text",
    "output_text",
]


def register_evaluation_tools(
    mcp: FastMCP,
    repository: ResearchRepository,
    registry: StrategyRegistry,
    comparison: StrategyComparison,
) -> None:
    """Register evaluation, comparison and export tools on the MCP server."""

    @mcp.tool
    async def submit_evaluation(
        ctx: Context,
        generation_id: str,
        relevance_score: int,
        specificity_score: int,
        biological_grounding_score: int,
        personalization_score: int,
        safety_score: int,
        evaluator_id: str = "anonymous",
    ) -> str:
        """Record a blinded human rating of one generated response.

        Every score is an integer from 1 (poor) to 5 (excellent).

        Args:
            generation_id: ID returned by generate_responses.
            relevance_score: Does the response address the reported state?
            specificity_score: Is the guidance concrete rather than generic?
            biological_grounding_score: Is it consistent with cycle physiology?
            personalization_score: Does it reflect this person's report?
            safety_score: Does it avoid diagnosis, prescription and alarm?
            evaluator_id: Optional rater identifier.
        """
        record = EvaluationRecord(
            id="",
            generation_id=generation_id,
            relevance_score=relevance_score,
            specificity_score=specificity_score,
            biological_grounding_score=biological_grounding_score,
            personalization_score=personalization_score,
            safety_score=safety_score,
            evaluator_id=evaluator_id.strip() or "anonymous",
        )
        out_of_range = [
            name for name, score in record.scores().items()
            if not RUBRIC_MIN <= score <= RUBRIC_MAX
        ]
        if out_of_range:
            return error_response(
                f"Scores must be integers in {RUBRIC_MIN}-{RUBRIC_MAX}: {', '.join(out_of_range)}"
            )

        try:
            eid = repository.save_evaluation(record)
        except RepositoryError as exc:
            return error_response(str(exc))

        return json.dumps({
            "status": "saved",
            "evaluation_id": eid,
            "generation_id": generation_id,
            "evaluator_id": record.evaluator_id,
        })

    @mcp.tool
    async def list_evaluations(ctx: Context, limit: int = 100) -> str:
        """List stored evaluations, newest first.

        Args:
            limit: Maximum number of evaluations to return.
        """
        evaluations = repository.list_evaluations(limit=max(1, limit))
        return json.dumps(
            {
                "count": len(evaluations),
                "evaluations": [
                    {
                        "id": e.id,
                        "generation_id": e.generation_id,
                        "strategy": e.strategy_type,
                        "evaluator_id": e.evaluator_id,
                        "timestamp": e.timestamp,
                        **e.scores(),
                    }
                    for e in evaluations
                ],
            },
            indent=2,
        )

    @mcp.tool
    async def compare_strategies(ctx: Context) -> str:
        """Compare strategies on automated metrics and human ratings."""
        order = [s.display_name for s in registry.all()]
        return json.dumps(comparison.compare(strategy_order=order), indent=2)

    @mcp.tool
    async def export_generations_csv(ctx: Context) -> str:
        """Export every stored generation, with its scenario and metrics, as CSV."""
        rows = repository.export_rows()
        buffer = io.StringIO()
        writer = csv.DictWriter(buffer, fieldnames=CSV_COLUMNS, extrasaction="ignore")
        writer.writeheader()
        writer.writerows(rows)
        logger.info("Exported %d generations to CSV", len(rows))
        return buffer.getvalue()
