"""Strategy loader: reads YAML definitions from disk."""

from __future__ import annotations

import logging
import string
from pathlib import Path
from typing import Any

import yaml

from biostate.core.strategy.models import Strategy, StrategyGuardrails
from biostate.core.strategy.registry import StrategyRegistry

logger = logging.getLogger(__name__)

# Placeholders a user_template may reference (see renderer.build context).
TEMPLATE_FIELDS = frozenset({
    "phase",
    "mood",
    "energy",
    "sleep",
    "stress",
    "symptom_severity",
    "cycle_day",
    "symptoms",
    "memory",
    "state_vector",
})


class StrategyLoadError(ValueError):
    """Raised when a strategy definition is malformed."""


def load_strategy_directory(directory: str | Path, registry: StrategyRegistry) -> int:
    """Load all YAML strategy definitions from a directory.

    Returns the number of strategies loaded.
    Skips files starting with underscore.
    """
    directory = Path(directory)
    if not directory.is_dir():
        logger.warning("Strategy directory does not exist: %s", directory)
        return 0

    count = 0
    for path in sorted(directory.rglob("*.yaml")):
        if path.name.startswith("_"):
            continue
        try:
            strategy = load_strategy_file(path)
            registry.register(strategy)
            count += 1
            logger.info("Loaded strategy: %s (v%s)", strategy.id, strategy.version)
        except Exception:
            logger.exception("Failed to load strategy from %s", path)
    return count


def load_strategy_file(path: Path) -> Strategy:
    """Parse a YAML file into a Strategy instance."""
    with open(path, encoding="utf-8") as f:
        data: dict[str, Any] = yaml.safe_load(f) or {}
    return parse_strategy(data, source=str(path))


def parse_strategy(data: dict[str, Any], source: str = "<dict>") -> Strategy:
    """Build a Strategy from already-parsed YAML data.

    Raises:
        StrategyLoadError: On missing keys or unknown template placeholders.
    """
    required = ("id", "version", "display_name", "system_message", "user_template")
    missing = [k for k in required if not data.get(k)]
    if missing:
        raise StrategyLoadError(f"{source}: missing required keys {missing}")

    user_template = data["user_template"].strip()
    _check_placeholders(user_template, source)

    guardrails_data = data.get("guardrails", {}) or {}

    return Strategy(
        id=str(data["id"]),
        version=str(data["version"]),
        display_name=data["display_name"],
        description=(data.get("description") or "").strip(),
        system_message=" ".join(data["system_message"].split()),
        user_template=user_template,
        order=int(data.get("order", 0)),
        is_baseline=bool(data.get("is_baseline", False)),
        uses_state_vector=bool(data.get("uses_state_vector", False)),
        uses_memory=bool(data.get("uses_memory", False)),
        guardrails=StrategyGuardrails(
            prohibited_actions=guardrails_data.get("prohibited_actions", []),
            disclaimers=guardrails_data.get("disclaimers", []),
        ),
        tags=data.get("tags", []),
    )


def _check_placeholders(template: str, source: str) -> None:
    try:
        names = {name for _, name, _, _ in string.Formatter().parse(template) if name}
    except ValueError as exc:
        raise StrategyLoadError(f"{source}: malformed user_template: {exc}") from exc
    unknown = names - TEMPLATE_FIELDS
    if unknown:
        raise StrategyLoadError(
            f"{source}: unknown template placeholders {sorted(unknown)}; "
            f"allowed: {sorted(TEMPLATE_FIELDS)}"
        )
