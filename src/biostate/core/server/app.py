"""BioState Research MCP Server: application factory.

This module provides:
- create_app() for testability (integration tests create fresh server instances)
- Module-level `mcp` variable for FastMCP discovery
"""

from __future__ import annotations

import logging
from pathlib import Path

from fastmcp import FastMCP

from biostate.core.config.settings import get_settings
from biostate.core.llm.client import GenerationClient
from biostate.core.llm.provider import LLMProvider, create_provider
from biostate.core.storage.database import ResearchDatabase
from biostate.core.storage.encryption import EncryptionError, FieldEncryptor
from biostate.core.storage.repository import ResearchRepository
from biostate.core.strategy.loader import load_strategy_directory
from biostate.core.strategy.registry import StrategyRegistry
from biostate.domains.cycle.prompts.cycle_prompts import register_cycle_prompts
from biostate.domains.cycle.resources.strategies import register_strategy_resources
from biostate.domains.cycle.tools.generation_tools import register_generation_tools
from biostate.domains.cycle.tools.state_vector_tools import register_state_vector_tools

logger = logging.getLogger(__name__)

SERVER_NAME = "BioState Research"
SERVER_VERSION = "0.1.0"

# Strategy YAML definitions live under src/biostate/domains/cycle/strategies/
STRATEGY_DIR = Path(__file__).resolve().parent.parent.parent / "domains" / "cycle" / "strategies"


def _select_provider(settings) -> tuple[str, str, str]:
    """Return (provider_name, api_key, model), falling back to mock without a key."""
    if settings.llm_provider == "mock":
        return "mock", "", ""
    keys = {
        "gemini": (settings.gemini_api_key, settings.gemini_model),
        "anthropic": (settings.anthropic_api_key, settings.anthropic_model),
        "openai": (settings.openai_api_key, settings.openai_model),
    }
    if settings.llm_provider not in keys:  # pragma: no cover
        raise ValueError(f"Unknown LLM provider: {settings.llm_provider!r}")
    api_key, model = keys[settings.llm_provider]
    if not api_key:
        logger.warning(
            "No API key configured for provider '%s'; falling back to mock provider",
            settings.llm_provider,
        )
        return "mock", "", ""
    return settings.llm_provider, api_key, model


def create_app(
    *,
    provider_override: LLMProvider | None = None,
    repository_override: ResearchRepository | None = None,
) -> FastMCP:
    """Create and configure the BioState research MCP server.

    This is the main application factory. It:
    1. Creates the FastMCP server instance
    2. Loads the prompting strategy registry
    3. Creates the generation client
    4. Initializes the encrypted research store (when a key is configured)
    5. Registers all tools, resources, and prompts
    """
    settings = get_settings()

    # --- Server instance ---
    server = FastMCP(
        SERVER_NAME,
        instructions=(
            "Research server for cycle-aware wellness guidance. Computes a "
            "deterministic biological state vector from a structured self-report, "
            "generates responses under competing prompting strategies, and "
            "collects blinded human ratings for comparison. Outputs are not "
            "medical advice."
        ),
    )

    # --- Strategies ---
    registry = StrategyRegistry()
    strategy_count = load_strategy_directory(STRATEGY_DIR, registry)
    logger.info("Loaded %d strategies from %s", strategy_count, STRATEGY_DIR)

    # --- Generation provider ---
    if provider_override is not None:
        provider = provider_override
        provider_name = type(provider).__name__.lower()
    else:
        provider_name, api_key, model = _select_provider(settings)
        provider = create_provider(provider_name=provider_name, api_key=api_key, model=model)
    client = GenerationClient(provider=provider, provider_name=provider_name)

    # --- Encrypted research store ---
    repository: ResearchRepository | None = None
    if repository_override is not None:
        repository = repository_override
    elif settings.encryption_key:
        try:
            encryptor = FieldEncryptor(settings.encryption_key)
            database = ResearchDatabase(settings.db_path)
            database.initialize()
            repository = ResearchRepository(database, encryptor)
            logger.info(
                "Research store initialized: %s (schema v%d)",
                settings.db_path,
                database.get_schema_version(),
            )
        except EncryptionError as exc:
            logger.error("Failed to initialize storage: %s", exc)
            logger.warning("Continuing without persistence; generations will not be stored")
    else:
        logger.info(
            "No ENCRYPTION_KEY configured; running without persistence. "
            "Set ENCRYPTION_KEY to enable the research store."
        )

    # --- Tools ---
    @server.tool
    def health_check() -> dict:
        """Check server health and return basic status information."""
        status = {
            "status": "ok",
            "server": SERVER_NAME,
            "version": SERVER_VERSION,
            "strategies_loaded": strategy_count,
            "llm_provider": client.provider_name,
            "default_model": client.default_model,
            "storage_enabled": repository is not None,
        }
        if repository is not None:
            status["scenarios_stored"] = repository.count_scenarios()
            status["generations_stored"] = repository.count_generations()
        return status

    register_state_vector_tools(server)
    register_generation_tools(
        server,
        registry,
        client,
        repository,
        default_temperature=settings.default_temperature,
        default_top_p=settings.default_top_p,
    )
    logger.info("State vector and generation tools registered (provider=%s)", client.provider_name)

    # --- Evaluation and comparison tools (require storage) ---
    if repository is not None:
        from biostate.domains.cycle.domain_logic.strategy_comparison import StrategyComparison
        from biostate.domains.cycle.tools.evaluation_tools import register_evaluation_tools

        register_evaluation_tools(server, repository, registry, StrategyComparison(repository))
        logger.info("Evaluation tools registered")

    # --- Resources and prompts ---
    register_strategy_resources(server, registry)
    register_cycle_prompts(server)

    return server


# Module-level instance for FastMCP discovery.
# Lazy: only created when this module is loaded directly (not when tests import create_app).
def __getattr__(name: str):
    if name == "mcp":
        global mcp  # noqa: PLW0603
        mcp = create_app()
        return mcp
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
