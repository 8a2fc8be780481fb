"""
Lenient input coercion.

Every scalar field of a quote passes through these helpers before the
engine sees it: garbage becomes 0, negatives become 0, percentages are
clamped to [0, 100], unreadable flags are False. Nothing here raises.
"""

from __future__ import annotations

import math
from typing import Any


def safe_float(value: Any, default: float = 0.0) -> float:
    """Coerce to a finite, non-negative float."""
    if isinstance(value, bool):
        return float(value)
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(number) or math.isinf(number):
        return default
    return max(number, 0.0)


def safe_int(value: Any, default: int = 0) -> int:
    """Coerce to a non-negative int (fractions truncated)."""
    return int(safe_float(value, float(default)))


def clamp_percentage(value: Any) -> float:
    return min(safe_float(value), 100.0)


TRUE_LABELS = frozenset({"true", "yes", "y", "si", "sí", "1", "on"})


def safe_bool(value: Any, default: bool = False) -> bool:
    """Form checkboxes arrive as bools, 0/1 or labels like "yes" / "si"."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return safe_float(value) > 0
    if isinstance(value, str):
        return value.strip().lower() in TRUE_LABELS
    return default


def safe_str(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return ", ".join(safe_str(v) for v in value if v is not None)
    return str(value).strip()
