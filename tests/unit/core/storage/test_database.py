"""Tests for ResearchDatabase: schema creation, versioning, lifecycle."""

from __future__ import annotations

import sqlite3

import pytest

from biostate.core.storage.database import SCHEMA_VERSION, DatabaseError, ResearchDatabase


class TestLifecycle:
    def test_initialize_is_idempotent(self):
        db = ResearchDatabase(":memory:")
        db.initialize()
        conn = db.connection
        db.initialize()
        assert db.connection is conn
        db.close()

    def test_connection_before_init_raises(self):
        with pytest.raises(DatabaseError, match="not initialized"):
            _ = ResearchDatabase(":memory:").connection

    def test_context_manager_closes(self):
        with ResearchDatabase(":memory:") as db:
            assert db.connection is not None
        with pytest.raises(DatabaseError):
            _ = db.connection

    def test_file_database_creates_parent(self, tmp_path):
        path = tmp_path / "nested" / "research.db"
        with ResearchDatabase(str(path)) as db:
            assert db.get_schema_version() == SCHEMA_VERSION
        assert path.exists()

    def test_reopen_keeps_single_version_row(self, tmp_path):
        path = str(tmp_path / "research.db")
        with ResearchDatabase(path):
            pass
        with ResearchDatabase(path) as db:
            rows = db.connection.execute("SELECT COUNT(*) FROM schema_version").fetchone()[0]
            assert rows == 1


class TestSchema:
    def test_tables_created(self):
        expected = {
            "scenarios",
            "state_vectors",
            "generations",
            "generation_metrics",
            "evaluations",
            "schema_version",
        }
        with ResearchDatabase(":memory:") as db:
            cursor = db.connection.execute(
                "SELECT name FROM sqlite_master WHERE type='table' AND name NOT LIKE 'sqlite_%'"
            )
            assert expected <= {row[0] for row in cursor.fetchall()}

    def test_foreign_keys_enforced(self):
        with ResearchDatabase(":memory:") as db:
            with pytest.raises(sqlite3.IntegrityError):
                db.connection.execute(
                    "INSERT INTO generations (id, scenario_id, strategy_type, model_name, created_at) "
                    "VALUES ('g1', 'missing', 'Generic', 'mock', '2026-01-01')"
                )
