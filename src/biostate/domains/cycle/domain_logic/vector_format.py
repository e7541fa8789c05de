"""Text renderings of a StateVector: prompt block, parser, and display bars."""

from __future__ import annotations

import re

from biostate.domains.cycle.domain_logic.vector_models import (
    FIELD_LABELS,
    FIELD_NAMES,
    StateVector,
)

_LABEL_TO_FIELD = {label.lower(): name for name, label in FIELD_LABELS.items()}
_LINE_RE = re.compile(r"^\s*([A-Za-z][A-Za-z ]*?)\s*:\s*(-?\d+(?:\.\d+)?)\s*$")


def format_state_vector(vector: StateVector, fields: list[str] | None = None) -> str:
    """Render vector fields as ``Label: 0.123`` lines, 3 decimals each."""
    names = fields or FIELD_NAMES
    return "\n".join(f"{FIELD_LABELS[name]}: {getattr(vector, name):.3f}" for name in names)


def parse_state_vector_text(text: str) -> dict[str, float]:
    """Read ``Label: value`` lines back into ``{field: value}``.

    Lines that are not vector fields are ignored, so a whole prompt can be
    passed in.
    """
    values: dict[str, float] = {}
    for line in text.splitlines():
        match = _LINE_RE.match(line)
        if not match:
            continue
        name = _LABEL_TO_FIELD.get(match.group(1).strip().lower())
        if name is not None:
            values[name] = float(match.group(2))
    return values


def render_vector_bars(vector: StateVector, width: int = 20) -> str:
    """Render each field as a labeled proportional bar.

    Example line::

        Energy Stability           ###########---------  0.58
    """
    label_width = max(len(label) for label in FIELD_LABELS.values())
    lines: list[str] = []
    for name in FIELD_NAMES:
        value = getattr(vector, name)
        filled = round(max(0.0, min(1.0, value)) * width)
        bar = "#" * filled + "-" * (width - filled)
        lines.append(f"{FIELD_LABELS[name]:<{label_width}}  {bar}  {value:.2f}")
    return "\n".join(lines)
