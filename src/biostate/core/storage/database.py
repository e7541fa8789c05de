"""SQLite database management for the research store.

Handles connection lifecycle, schema creation, and version tracking.
"""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path

logger = logging.getLogger(__name__)

# Current schema version
SCHEMA_VERSION = 1

# ---------------------------------------------------------------------------
# Schema DDL
# ---------------------------------------------------------------------------

_SCHEMA_V1 = """
-- One row per submitted scenario
CREATE TABLE IF NOT EXISTS scenarios (
    id                TEXT PRIMARY KEY,
    phase             TEXT NOT NULL,
    mood              TEXT NOT NULL,
    energy            REAL NOT NULL,
    sleep             REAL NOT NULL,
    stress            REAL NOT NULL,
    symptom_severity  REAL NOT NULL DEFAULT 0,
    cycle_day         INTEGER,
    cycle_length      INTEGER NOT NULL DEFAULT 28,

    -- Encrypted JSON (self-reported free data)
    symptoms_enc      TEXT,
    memory_enc        TEXT,

    created_at        TEXT NOT NULL
);

-- Computed vector for a scenario (one per scenario)
CREATE TABLE IF NOT EXISTS state_vectors (
    id                        TEXT PRIMARY KEY,
    scenario_id               TEXT NOT NULL UNIQUE REFERENCES scenarios(id) ON DELETE CASCADE,
    estrogen_influence        REAL NOT NULL,
    progesterone_influence    REAL NOT NULL,
    energy_stability          REAL NOT NULL,
    emotional_volatility      REAL NOT NULL,
    inflammation_likelihood   REAL NOT NULL,
    gastrointestinal_distress REAL NOT NULL,
    hormone_model             TEXT NOT NULL,
    formula_version           TEXT NOT NULL
);

-- One row per strategy run
CREATE TABLE IF NOT EXISTS generations (
    id             TEXT PRIMARY KEY,
    scenario_id    TEXT NOT NULL REFERENCES scenarios(id) ON DELETE CASCADE,
    strategy_type  TEXT NOT NULL,
    model_name     TEXT NOT NULL,
    temperature    REAL,
    top_p          REAL,
    max_tokens     INTEGER,
    seed           INTEGER,
    prompt_enc     TEXT,
    output_enc     TEXT,
    word_count     INTEGER NOT NULL DEFAULT 0,
    created_at     TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS generation_metrics (
    id                      TEXT PRIMARY KEY,
    generation_id           TEXT NOT NULL UNIQUE REFERENCES generations(id) ON DELETE CASCADE,
    semantic_distance       REAL,
    alignment_score         REAL,
    violation_flag          INTEGER NOT NULL DEFAULT 0,
    sentiment_score         REAL,
    baseline_generation_id  TEXT REFERENCES generations(id)
);

-- Blinded human ratings (1-5)
CREATE TABLE IF NOT EXISTS evaluations (
    id                          TEXT PRIMARY KEY,
    generation_id               TEXT NOT NULL REFERENCES generations(id) ON DELETE CASCADE,
    evaluator_id                TEXT NOT NULL DEFAULT 'anonymous',
    relevance_score             INTEGER NOT NULL,
    specificity_score           INTEGER NOT NULL,
    biological_grounding_score  INTEGER NOT NULL,
    personalization_score       INTEGER NOT NULL,
    safety_score                INTEGER NOT NULL,
    timestamp                   TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS schema_version (
    version    INTEGER NOT NULL,
    applied_at TEXT NOT NULL DEFAULT (datetime('now'))
);

CREATE INDEX IF NOT EXISTS idx_scenarios_created   ON scenarios(created_at);
CREATE INDEX IF NOT EXISTS idx_generations_scenario ON generations(scenario_id);
CREATE INDEX IF NOT EXISTS idx_generations_strategy ON generations(strategy_type);
CREATE INDEX IF NOT EXISTS idx_evaluations_generation ON evaluations(generation_id);
CREATE INDEX IF NOT EXISTS idx_evaluations_timestamp  ON evaluations(timestamp);
"""


class DatabaseError(Exception):
    """Raised when database operations fail."""


class ResearchDatabase:
    """SQLite database manager for the research store.

    Supports both file-based and in-memory (`:memory:`) databases.
    In-memory mode is used for testing.

    Usage::

        db = ResearchDatabase(":memory:")
        db.initialize()
        conn = db.connection
        # ... use connection ...
        db.close()
    """

    def __init__(self, db_path: str = ":memory:") -> None:
        self._db_path = db_path
        self._conn: sqlite3.Connection | None = None

    @property
    def connection(self) -> sqlite3.Connection:
        """Get the active database connection.

        Raises:
            DatabaseError: If the database has not been initialized.
        """
        if self._conn is None:
            raise DatabaseError("Database not initialized. Call initialize() first.")
        return self._conn

    def initialize(self) -> None:
        """Create the connection and ensure the schema exists. Idempotent."""
        if self._conn is not None:
            return

        if self._db_path != ":memory:":
            db_file = Path(self._db_path).expanduser()
            db_file.parent.mkdir(parents=True, exist_ok=True)
            target = str(db_file)
        else:
            target = ":memory:"

        # Tool handlers may run on a worker thread; access is still serialized.
        self._conn = sqlite3.connect(target, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.execute("PRAGMA foreign_keys=ON")

        self._ensure_schema()
        logger.info("Research database initialized: %s", self._db_path)

    def _ensure_schema(self) -> None:
        conn = self.connection
        conn.executescript(_SCHEMA_V1)

        current_version = self.get_schema_version()
        if current_version < SCHEMA_VERSION:
            conn.execute(
                "INSERT INTO schema_version (version) VALUES (?)",
                (SCHEMA_VERSION,),
            )
            conn.commit()
            logger.info(
                "Schema updated from version %d to %d", current_version, SCHEMA_VERSION
            )

    def get_schema_version(self) -> int:
        """Return the current schema version."""
        row = self.connection.execute("SELECT MAX(version) FROM schema_version").fetchone()
        return row[0] if row[0] is not None else 0

    def close(self) -> None:
        """Close the database connection."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None
            logger.info("Research database closed")

    def __enter__(self) -> ResearchDatabase:
        self.initialize()
        return self

    def __exit__(self, *args) -> None:
        self.close()
