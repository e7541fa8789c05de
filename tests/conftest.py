"""Shared test fixtures for BioState research tests."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

import pytest

# ---------------------------------------------------------------------------
# Test hermeticity
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _force_hermetic_test_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LLM_PROVIDER", "mock")
    monkeypatch.setenv("GEMINI_API_KEY", "")
    monkeypatch.setenv("ANTHROPIC_API_KEY", "")
    monkeypatch.setenv("OPENAI_API_KEY", "")
    monkeypatch.setenv("ENCRYPTION_KEY", "")

# Allow running tests without `pip install -e .` by making `src/` importable.
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_SRC_DIR = _PROJECT_ROOT / "src"
if str(_SRC_DIR) not in sys.path:
    sys.path.insert(0, str(_SRC_DIR))

from biostate.core.server.app import STRATEGY_DIR  # noqa: E402
from biostate.core.strategy.loader import load_strategy_directory  # noqa: E402
from biostate.core.strategy.registry import StrategyRegistry  # noqa: E402
from biostate.domains.cycle.domain_logic.scenario_models import ScenarioInput  # noqa: E402


def make_scenario(**overrides: Any) -> ScenarioInput:
    """Create a Follicular test scenario; keyword overrides use payload keys."""
    payload: dict[str, Any] = {
        "phase": "Follicular",
        "mood": "Calm",
        "energy": 7,
        "sleep": 6,
        "stress": 4,
        "symptoms": {},
        "symptomSeverity": 0,
    }
    payload.update(overrides)
    return ScenarioInput.from_dict(payload)


@pytest.fixture
def scenario_factory():
    """Factory for ScenarioInput with sensible defaults."""
    return make_scenario


@pytest.fixture
def strategy_registry() -> StrategyRegistry:
    """Registry loaded from the shipped strategy YAML files."""
    reg = StrategyRegistry()
    load_strategy_directory(STRATEGY_DIR, reg)
    return reg


# ---------------------------------------------------------------------------
# In-memory storage fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def research_db():
    """Create an in-memory ResearchDatabase for testing."""
    from biostate.core.storage.database import ResearchDatabase

    db = ResearchDatabase(":memory:")
    db.initialize()
    yield db
    db.close()


@pytest.fixture
def field_encryptor():
    """Create a FieldEncryptor with a test key."""
    from cryptography.fernet import Fernet

    from biostate.core.storage.encryption import FieldEncryptor

    return FieldEncryptor(Fernet.generate_key().decode())


@pytest.fixture
def research_repository(research_db, field_encryptor):
    """Create a ResearchRepository backed by in-memory SQLite."""
    from biostate.core.storage.repository import ResearchRepository

    return ResearchRepository(research_db, field_encryptor)
