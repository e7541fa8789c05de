"""MCP tools for strategy-driven response generation.

One request computes the scenario's state vector once, renders each selected
strategy, runs the model calls concurrently, scores every output, and
persists the run when storage is enabled.
"""

from __future__ import annotations

import asyncio
import json
import logging
import sqlite3
import time
from typing import TYPE_CHECKING, Any

from fastmcp import Context, FastMCP

from biostate.core.llm.provider import SamplingConfig
from biostate.core.storage.database import DatabaseError
from biostate.core.storage.encryption import EncryptionError
from biostate.core.storage.models import GenerationRecord, MetricsRecord, ScenarioRecord
from biostate.core.storage.repository import RepositoryError
from biostate.core.strategy.registry import StrategyNotFoundError
from biostate.core.strategy.renderer import render_strategy
from biostate.domains.cycle.domain_logic.output_metrics import compute_output_metrics
from biostate.domains.cycle.domain_logic.prompt_context import build_prompt_context
from biostate.domains.cycle.domain_logic.state_vector import compute_state_vector
from biostate.domains.cycle.domain_logic.vector_models import FORMULA_VERSION
from biostate.domains.cycle.tools.state_vector_tools import error_response, parse_scenario_json

if TYPE_CHECKING:
    from biostate.core.llm.client import GenerationClient, GenerationResult
    from biostate.core.storage.repository import ResearchRepository
    from biostate.core.strategy.models import RenderedPrompt, Strategy
    from biostate.core.strategy.registry import StrategyRegistry
    from biostate.domains.cycle.domain_logic.scenario_models import ScenarioInput
    from biostate.domains.cycle.domain_logic.vector_models import StateVector

logger = logging.getLogger(__name__)

DEFAULT_STRATEGY = "Phase + State Vector"

_STORAGE_ERRORS = (RepositoryError, DatabaseError, EncryptionError, sqlite3.Error)


def _scenario_record(scenario: ScenarioInput, vector: StateVector) -> ScenarioRecord:
    return ScenarioRecord(
        id="",
        phase=scenario.phase.value,
        mood=scenario.mood.value,
        energy=scenario.energy,
        sleep=scenario.sleep,
        stress=scenario.stress,
        symptom_severity=scenario.symptom_severity,
        cycle_day=scenario.cycle_day,
        cycle_length=scenario.cycle_length,
        symptoms=scenario.symptoms.as_dict(),
        memory_text=scenario.memory_text,
        vector=vector.as_dict(),
        hormone_model=vector.hormone_model,
        formula_version=FORMULA_VERSION,
    )


def register_generation_tools(
    mcp: FastMCP,
    registry: StrategyRegistry,
    client: GenerationClient,
    repository: ResearchRepository | None = None,
    *,
    default_temperature: float = 0.4,
    default_top_p: float = 0.9,
) -> None:
    """Register generation tools on the MCP server.

    Sampling arguments left unset by the caller use the given defaults.
    """

    def _save_scenario(scenario: ScenarioInput, vector: StateVector) -> str | None:
        if repository is None:
            return None
        try:
            return repository.save_scenario(_scenario_record(scenario, vector))
        except _STORAGE_ERRORS as exc:
            logger.error("Failed to persist scenario: %s", exc)
            return None

    def _save_generation(record: GenerationRecord) -> str | None:
        if repository is None or not record.scenario_id:
            return None
        try:
            return repository.save_generation(record)
        except _STORAGE_ERRORS as exc:
            logger.error("Failed to persist %s generation: %s", record.strategy_type, exc)
            return None

    @mcp.tool
    async def generate_responses(
        ctx: Context,
        scenario_json: str,
        strategy: str = DEFAULT_STRATEGY,
        generate_all_strategies: bool = False,
        model_name: str | None = None,
        temperature: float | None = None,
        top_p: float | None = None,
        max_tokens: int | None = None,
        seed: int | None = None,
    ) -> str:
        """Generate wellness guidance for a scenario under one or all strategies.

        Args:
            scenario_json: JSON scenario (see compute_state_vector).
            strategy: Strategy id or display name, e.g. 'Generic', 'Phase-Aware',
                'Phase + Memory-Aware', 'Phase + State Vector'.
            generate_all_strategies: Run every registered strategy in parallel.
            model_name: Model override for the configured provider.
            temperature: Sampling temperature (0-2), server default 0.4.
            top_p: Nucleus sampling mass (0-1], server default 0.9.
            max_tokens: Output token cap, provider default when omitted.
            seed: Sampling seed, where the provider supports one.
        """
        start_time = time.monotonic()
        temperature = default_temperature if temperature is None else temperature
        top_p = default_top_p if top_p is None else top_p

        try:
            scenario = parse_scenario_json(scenario_json)
        except ValueError as exc:
            logger.info("Rejected scenario: %s", exc)
            return error_response(str(exc))

        if not 0 <= temperature <= 2:
            return error_response(f"temperature must be in 0-2, got {temperature}")
        if not 0 < top_p <= 1:
            return error_response(f"top_p must be in (0, 1], got {top_p}")
        if max_tokens is not None and max_tokens <= 0:
            return error_response(f"max_tokens must be positive, got {max_tokens}")

        if generate_all_strategies:
            strategies = registry.all()
        else:
            try:
                strategies = [registry.require(strategy)]
            except StrategyNotFoundError as exc:
                return error_response(exc.args[0])
        if not strategies:
            return error_response("No strategies are loaded")

        vector = compute_state_vector(scenario)
        context = build_prompt_context(scenario, vector)
        config = SamplingConfig(
            model=model_name or None,
            temperature=temperature,
            top_p=top_p,
            max_tokens=max_tokens,
            seed=seed,
        )

        rendered: list[RenderedPrompt] = [render_strategy(s, context) for s in strategies]
        outcomes = await asyncio.gather(
            *(client.invoke(r, s, config) for r, s in zip(rendered, strategies)),
            return_exceptions=True,
        )

        scenario_id = _save_scenario(scenario, vector)

        completed: list[tuple[int, Strategy, RenderedPrompt, GenerationResult]] = []
        results: list[dict[str, Any] | None] = [None] * len(strategies)
        for idx, (strat, prompt, outcome) in enumerate(zip(strategies, rendered, outcomes)):
            if isinstance(outcome, Exception):
                logger.error("Generation failed for %s: %s", strat.display_name, outcome)
                results[idx] = {
                    "strategy": strat.display_name,
                    "strategy_id": strat.id,
                    "status": "error",
                    "message": str(outcome),
                }
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                completed.append((idx, strat, prompt, outcome))

        # The baseline is scored and saved first so the others can reference it.
        completed.sort(key=lambda item: not item[1].is_baseline)
        baseline_text: str | None = None
        baseline_id: str | None = None
        for idx, strat, prompt, outcome in completed:
            metrics = compute_output_metrics(
                outcome.content,
                vector,
                baseline_text=None if strat.is_baseline else baseline_text,
                violation_flag=outcome.violation,
            )
            generation_id = _save_generation(
                GenerationRecord(
                    id="",
                    scenario_id=scenario_id or "",
                    strategy_type=strat.display_name,
                    model_name=outcome.model,
                    prompt_text=prompt.prompt_text,
                    output_text=outcome.content,
                    word_count=metrics.word_count,
                    temperature=config.temperature,
                    top_p=config.top_p,
                    max_tokens=config.max_tokens,
                    seed=config.seed,
                    metrics=MetricsRecord(
                        semantic_distance=metrics.semantic_distance,
                        alignment_score=metrics.alignment_score,
                        violation_flag=metrics.violation_flag,
                        sentiment_score=metrics.sentiment_score,
                        baseline_generation_id=None if strat.is_baseline else baseline_id,
                    ),
                )
            )
            if strat.is_baseline:
                baseline_text = outcome.content
                baseline_id = generation_id

            results[idx] = {
                "strategy": strat.display_name,
                "strategy_id": strat.id,
                "status": "ok",
                "generation_id": generation_id,
                "model": outcome.model,
                "prompt": prompt.prompt_text,
                "output": outcome.content,
                "word_count": metrics.word_count,
                "metrics": metrics.as_dict(),
                "guardrail_flags": outcome.guardrail_flags,
                "latency_ms": round(outcome.latency_ms, 1),
            }

        elapsed_ms = (time.monotonic() - start_time) * 1000
        logger.info(
            "generate_responses: %d strategies, %d ok, scenario=%s, %.0fms",
            len(strategies), len(completed), scenario_id, elapsed_ms,
        )

        return json.dumps(
            {
                "status": "ok",
                "scenario_id": scenario_id,
                "state_vector": vector.as_dict(ndigits=4),
                "hormone_model": vector.hormone_model,
                "formula_version": FORMULA_VERSION,
                "sampling": {
                    "model": config.model or client.default_model,
                    "temperature": config.temperature,
                    "top_p": config.top_p,
                    "max_tokens": config.max_tokens,
                    "seed": config.seed,
                },
                "results": results,
            },
            indent=2,
        )
