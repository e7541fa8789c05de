"""Research repository: CRUD operations for the encrypted research store.

The repository mediates between record objects (ScenarioRecord, etc.) and
the SQLite database, using FieldEncryptor for self-reported free data,
prompts and outputs.
"""

from __future__ import annotations

import logging
import sqlite3
import uuid
from datetime import datetime, timezone
from typing import Any

from biostate.core.storage.database import ResearchDatabase
from biostate.core.storage.encryption import FieldEncryptor
from biostate.core.storage.models import (
    RUBRIC_COLUMNS,
    VECTOR_COLUMNS,
    EvaluationRecord,
    GenerationRecord,
    MetricsRecord,
    ScenarioRecord,
)

logger = logging.getLogger(__name__)

RUBRIC_MIN = 1
RUBRIC_MAX = 5


class RepositoryError(Exception):
    """Raised when repository operations fail."""


class ResearchRepository:
    """CRUD repository for scenarios, generations, metrics and evaluations.

    Usage::

        db = ResearchDatabase(":memory:")
        db.initialize()
        repo = ResearchRepository(db, FieldEncryptor(key))

        scenario_id = repo.save_scenario(scenario)
        generation_id = repo.save_generation(generation)
        repo.save_evaluation(evaluation)
    """

    def __init__(self, database: ResearchDatabase, encryptor: FieldEncryptor) -> None:
        self._db = database
        self._enc = encryptor

    @staticmethod
    def _new_id() -> str:
        return str(uuid.uuid4())

    @staticmethod
    def _now_iso() -> str:
        return datetime.now(timezone.utc).isoformat()

    # ------------------------------------------------------------------
    # Scenarios
    # ------------------------------------------------------------------

    def save_scenario(self, scenario: ScenarioRecord) -> str:
        """Persist a scenario and its state vector.

        Returns:
            The scenario ID (generated when ``scenario.id`` is empty).
        """
        missing = [c for c in VECTOR_COLUMNS if c not in scenario.vector]
        if missing:
            raise RepositoryError(f"Scenario vector is missing fields: {missing}")

        conn = self._db.connection
        sid = scenario.id or self._new_id()
        now = scenario.created_at or self._now_iso()

        try:
            self._insert_scenario(conn, sid, now, scenario)
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        logger.info("Saved scenario %s (phase=%s, mood=%s)", sid, scenario.phase, scenario.mood)
        return sid

    def _insert_scenario(
        self, conn: sqlite3.Connection, sid: str, now: str, scenario: ScenarioRecord
    ) -> None:
        conn.execute(
            """INSERT INTO scenarios (
                id, phase, mood, energy, sleep, stress, symptom_severity,
                cycle_day, cycle_length, symptoms_enc, memory_enc, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                sid,
                scenario.phase,
                scenario.mood,
                scenario.energy,
                scenario.sleep,
                scenario.stress,
                scenario.symptom_severity,
                scenario.cycle_day,
                scenario.cycle_length,
                self._enc.encrypt(scenario.symptoms),
                self._enc.encrypt(scenario.memory_text or None),
                now,
            ),
        )
        conn.execute(
            f"""INSERT INTO state_vectors (
                id, scenario_id, {", ".join(VECTOR_COLUMNS)}, hormone_model, formula_version
            ) VALUES (?, ?, {", ".join("?" for _ in VECTOR_COLUMNS)}, ?, ?)""",
            (
                self._new_id(),
                sid,
                *(scenario.vector[c] for c in VECTOR_COLUMNS),
                scenario.hormone_model,
                scenario.formula_version,
            ),
        )

    def get_scenario(self, scenario_id: str) -> ScenarioRecord | None:
        """Retrieve a scenario with its vector, decrypting free data."""
        row = self._db.connection.execute(
            f"""SELECT s.*, {", ".join("v." + c for c in VECTOR_COLUMNS)},
                       v.hormone_model, v.formula_version
                FROM scenarios s LEFT JOIN state_vectors v ON v.scenario_id = s.id
                WHERE s.id = ?""",
            (scenario_id,),
        ).fetchone()
        if row is None:
            return None
        return ScenarioRecord(
            id=row["id"],
            phase=row["phase"],
            mood=row["mood"],
            energy=row["energy"],
            sleep=row["sleep"],
            stress=row["stress"],
            symptom_severity=row["symptom_severity"],
            cycle_day=row["cycle_day"],
            cycle_length=row["cycle_length"],
            symptoms=self._enc.decrypt(row["symptoms_enc"]) or {},
            memory_text=self._enc.decrypt(row["memory_enc"]) or "",
            vector={c: row[c] for c in VECTOR_COLUMNS if row[c] is not None},
            hormone_model=row["hormone_model"] or "",
            formula_version=row["formula_version"] or "",
            created_at=row["created_at"],
        )

    def count_scenarios(self) -> int:
        """Return total number of stored scenarios."""
        return self._db.connection.execute("SELECT COUNT(*) FROM scenarios").fetchone()[0]

    # ------------------------------------------------------------------
    # Generations
    # ------------------------------------------------------------------

    def save_generation(self, generation: GenerationRecord) -> str:
        """Persist one generation and, if present, its metrics.

        Raises:
            RepositoryError: If the scenario does not exist.
        """
        conn = self._db.connection
        if not self._exists("scenarios", generation.scenario_id):
            raise RepositoryError(f"Scenario not found: {generation.scenario_id!r}")

        gid = generation.id or self._new_id()
        now = generation.created_at or self._now_iso()

        try:
            self._insert_generation(conn, gid, now, generation)
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        logger.info(
            "Saved generation %s (scenario=%s, strategy=%s)",
            gid, generation.scenario_id, generation.strategy_type,
        )
        return gid

    def _insert_generation(
        self, conn: sqlite3.Connection, gid: str, now: str, generation: GenerationRecord
    ) -> None:
        conn.execute(
            """INSERT INTO generations (
                id, scenario_id, strategy_type, model_name, temperature, top_p,
                max_tokens, seed, prompt_enc, output_enc, word_count, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                gid,
                generation.scenario_id,
                generation.strategy_type,
                generation.model_name,
                generation.temperature,
                generation.top_p,
                generation.max_tokens,
                generation.seed,
                self._enc.encrypt(generation.prompt_text),
                self._enc.encrypt(generation.output_text),
                generation.word_count,
                now,
            ),
        )

        metrics = generation.metrics
        if metrics is not None:
            conn.execute(
                """INSERT INTO generation_metrics (
                    id, generation_id, semantic_distance, alignment_score,
                    violation_flag, sentiment_score, baseline_generation_id
                ) VALUES (?, ?, ?, ?, ?, ?, ?)""",
                (
                    self._new_id(),
                    gid,
                    metrics.semantic_distance,
                    metrics.alignment_score,
                    int(metrics.violation_flag),
                    metrics.sentiment_score,
                    metrics.baseline_generation_id,
                ),
            )

    def get_generation(self, generation_id: str) -> GenerationRecord | None:
        """Retrieve a generation with its metrics."""
        row = self._db.connection.execute(
            f"{self._GENERATION_SELECT} WHERE g.id = ?", (generation_id,)
        ).fetchone()
        return self._row_to_generation(row) if row is not None else None

    def list_generations(
        self,
        *,
        scenario_id: str | None = None,
        strategy_type: str | None = None,
        limit: int = 100,
    ) -> list[GenerationRecord]:
        """Query generations, newest first."""
        conditions: list[str] = []
        params: list[Any] = []
        if scenario_id:
            conditions.append("g.scenario_id = ?")
            params.append(scenario_id)
        if strategy_type:
            conditions.append("g.strategy_type = ?")
            params.append(strategy_type)

        query = self._GENERATION_SELECT
        if conditions:
            query += " WHERE " + " AND ".join(conditions)
        query += " ORDER BY g.created_at DESC, g.rowid DESC LIMIT ?"
        params.append(limit)

        rows = self._db.connection.execute(query, params).fetchall()
        return [self._row_to_generation(row) for row in rows]

    def count_generations(self) -> int:
        """Return total number of stored generations."""
        return self._db.connection.execute("SELECT COUNT(*) FROM generations").fetchone()[0]

    _GENERATION_SELECT = """
        SELECT g.*, m.id AS metrics_id, m.semantic_distance, m.alignment_score,
               m.violation_flag, m.sentiment_score, m.baseline_generation_id
        FROM generations g LEFT JOIN generation_metrics m ON m.generation_id = g.id
    """

    def _row_to_generation(self, row: Any) -> GenerationRecord:
        metrics = None
        if row["metrics_id"] is not None:
            metrics = MetricsRecord(
                semantic_distance=row["semantic_distance"],
                alignment_score=row["alignment_score"],
                violation_flag=bool(row["violation_flag"]),
                sentiment_score=row["sentiment_score"],
                baseline_generation_id=row["baseline_generation_id"],
            )
        return GenerationRecord(
            id=row["id"],
            scenario_id=row["scenario_id"],
            strategy_type=row["strategy_type"],
            model_name=row["model_name"],
            prompt_text=self._enc.decrypt(row["prompt_enc"]) or "",
            output_text=self._enc.decrypt(row["output_enc"]) or "",
            word_count=row["word_count"],
            temperature=row["temperature"],
            top_p=row["top_p"],
            max_tokens=row["max_tokens"],
            seed=row["seed"],
            metrics=metrics,
            created_at=row["created_at"],
        )

    # ------------------------------------------------------------------
    # Evaluations
    # ------------------------------------------------------------------

    def save_evaluation(self, evaluation: EvaluationRecord) -> str:
        """Persist a human rating.

        Raises:
            RepositoryError: If a score is outside 1-5 or the generation is unknown.
        """
        for name, score in evaluation.scores().items():
            if isinstance(score, bool) or not isinstance(score, int) or not (
                RUBRIC_MIN <= score <= RUBRIC_MAX
            ):
                raise RepositoryError(
                    f"{name} must be an integer in {RUBRIC_MIN}-{RUBRIC_MAX}, got {score!r}"
                )
        if not self._exists("generations", evaluation.generation_id):
            raise RepositoryError(f"Generation not found: {evaluation.generation_id!r}")

        conn = self._db.connection
        eid = evaluation.id or self._new_id()
        conn.execute(
            f"""INSERT INTO evaluations (
                id, generation_id, evaluator_id, {", ".join(RUBRIC_COLUMNS)}, timestamp
            ) VALUES (?, ?, ?, {", ".join("?" for _ in RUBRIC_COLUMNS)}, ?)""",
            (
                eid,
                evaluation.generation_id,
                evaluation.evaluator_id or "anonymous",
                *(evaluation.scores()[c] for c in RUBRIC_COLUMNS),
                evaluation.timestamp or self._now_iso(),
            ),
        )
        conn.commit()
        logger.info("Saved evaluation %s for generation %s", eid, evaluation.generation_id)
        return eid

    def list_evaluations(
        self,
        *,
        generation_id: str | None = None,
        limit: int = 100,
    ) -> list[EvaluationRecord]:
        """Evaluations newest first, each tagged with its generation's strategy."""
        query = """SELECT e.*, g.strategy_type FROM evaluations e
                   JOIN generations g ON g.id = e.generation_id"""
        params: list[Any] = []
        if generation_id:
            query += " WHERE e.generation_id = ?"
            params.append(generation_id)
        query += " ORDER BY e.timestamp DESC, e.rowid DESC LIMIT ?"
        params.append(limit)

        rows = self._db.connection.execute(query, params).fetchall()
        return [
            EvaluationRecord(
                id=row["id"],
                generation_id=row["generation_id"],
                evaluator_id=row["evaluator_id"],
                timestamp=row["timestamp"],
                strategy_type=row["strategy_type"],
                **{c: row[c] for c in RUBRIC_COLUMNS},
            )
            for row in rows
        ]

    # ------------------------------------------------------------------
    # Aggregates and export
    # ------------------------------------------------------------------

    def strategy_generation_stats(self) -> dict[str, dict[str, Any]]:
        """Per-strategy generation counts and metric means (plain columns only)."""
        rows = self._db.connection.execute(
            """SELECT g.strategy_type,
                      COUNT(*) AS generations,
                      AVG(g.word_count) AS mean_word_count,
                      AVG(m.alignment_score) AS mean_alignment_score,
                      AVG(m.semantic_distance) AS mean_semantic_distance,
                      AVG(m.sentiment_score) AS mean_sentiment_score,
                      COALESCE(SUM(m.violation_flag), 0) AS violations
               FROM generations g LEFT JOIN generation_metrics m ON m.generation_id = g.id
               GROUP BY g.strategy_type"""
        ).fetchall()
        return {row["strategy_type"]: {k: row[k] for k in row.keys() if k != "strategy_type"} for row in rows}

    def strategy_evaluation_scores(self) -> dict[str, dict[str, list[int]]]:
        """Per-strategy lists of each rubric score."""
        rows = self._db.connection.execute(
            f"""SELECT g.strategy_type, {", ".join("e." + c for c in RUBRIC_COLUMNS)}
                FROM evaluations e JOIN generations g ON g.id = e.generation_id"""
        ).fetchall()
        out: dict[str, dict[str, list[int]]] = {}
        for row in rows:
            bucket = out.setdefault(row["strategy_type"], {c: [] for c in RUBRIC_COLUMNS})
            for c in RUBRIC_COLUMNS:
                bucket[c].append(row[c])
        return out

    def export_rows(self) -> list[dict[str, Any]]:
        """One flat, decrypted row per generation for CSV export, oldest first."""
        rows = self._db.connection.execute(
            f"""SELECT g.id AS generation_id, g.scenario_id, g.strategy_type, g.model_name,
                       g.temperature, g.top_p, g.max_tokens, g.seed, g.word_count,
                       g.prompt_enc, g.output_enc, g.created_at,
                       s.phase, s.mood, s.energy, s.sleep, s.stress, s.symptom_severity,
                       s.cycle_day, s.symptoms_enc,
                       {", ".join("v." + c for c in VECTOR_COLUMNS)}, v.hormone_model,
                       m.semantic_distance, m.alignment_score, m.violation_flag,
                       m.sentiment_score,
                       (SELECT COUNT(*) FROM evaluations e WHERE e.generation_id = g.id)
                           AS evaluation_count
                FROM generations g
                JOIN scenarios s ON s.id = g.scenario_id
                LEFT JOIN state_vectors v ON v.scenario_id = s.id
                LEFT JOIN generation_metrics m ON m.generation_id = g.id
                ORDER BY g.created_at, g.rowid"""
        ).fetchall()

        out: list[dict[str, Any]] = []
        for row in rows:
            record = {k: row[k] for k in row.keys() if not k.endswith("_enc")}
            symptoms = self._enc.decrypt(row["symptoms_enc"]) or {}
            record["symptoms"] = ";".join(name for name, on in symptoms.items() if on)
            record["prompt_text"] = self._enc.decrypt(row["prompt_enc"]) or ""
            record["output_text"] = self._enc.decrypt(row["output_enc"]) or ""
            out.append(record)
        return out

    def _exists(self, table: str, row_id: str) -> bool:
        # table is one of our own constants, never user input
        row = self._db.connection.execute(
            f"SELECT 1 FROM {table} WHERE id = ?", (row_id,)
        ).fetchone()
        return row is not None
