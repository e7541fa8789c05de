"""Strategy renderer: fills a strategy's templates with scenario context."""

from __future__ import annotations

import logging
from typing import Any

from biostate.core.strategy.models import RenderedPrompt, Strategy

logger = logging.getLogger(__name__)


def render_strategy(strategy: Strategy, context: dict[str, Any]) -> RenderedPrompt:
    """Combine a strategy with prompt context into model-ready messages.

    ``context`` must provide every placeholder the template uses; extra
    keys are ignored.
    """
    try:
        user_message = strategy.user_template.format_map(context)
    except KeyError as exc:
        raise KeyError(
            f"Strategy {strategy.id!r} needs context field {exc.args[0]!r}"
        ) from exc

    return RenderedPrompt(
        system_message=strategy.system_message,
        user_message=user_message,
        metadata={
            "strategy_id": strategy.id,
            "strategy_version": strategy.version,
            "strategy_name": strategy.display_name,
        },
    )
