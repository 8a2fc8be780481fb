"""
Rate Freezer — rebuilds the unit rates a saved quote was priced with.

A historical quote must reproduce its original price forever, whatever
happens to the live catalog afterwards. The persisted snapshot keeps line
totals, not rates, so each rate is recovered by inverting

    line_total = unit_rate × count × allocation

Lines that cannot be inverted (no role, zero count, zero total, zero allocation)
are skipped. A key whose lines invert to different rates (two individually
priced profiles of the same role and seniority) is left out of the index.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, Iterator, Optional

from quote_engine.knowledge.roles import find_role
from quote_engine.models.enums import Seniority
from quote_engine.models.schemas import PersistedLineItem, QuoteSnapshot

logger = logging.getLogger(__name__)

PLACEHOLDER_LEVEL = "standard"
# Inverted rates closer than half a cent are the same rate
RATE_TOLERANCE = 0.005


def frozen_key(role: str, seniority: Optional[str]) -> str:
    """'data_engineer', 'Senior' -> 'data engineer_sr'."""
    config = find_role(role)
    name = (config.label if config else role or "").strip().lower()
    parsed = Seniority.parse(seniority) if seniority else None
    level = parsed.value if parsed else (seniority or PLACEHOLDER_LEVEL)
    return f"{name}_{level.strip().lower() or PLACEHOLDER_LEVEL}"


class FrozenRateIndex(Mapping):
    """Read-only mapping ``role_seniority -> unit rate``."""

    def __init__(self, rates: Optional[dict[str, float]] = None):
        self._rates = MappingProxyType(dict(rates or {}))

    def __getitem__(self, key: str) -> float:
        return self._rates[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._rates)

    def __len__(self) -> int:
        return len(self._rates)

    def __repr__(self) -> str:
        return f"FrozenRateIndex({dict(self._rates)!r})"

    def lookup(self, role: str, seniority: Optional[str]) -> Optional[float]:
        return self._rates.get(frozen_key(role, seniority))

    def as_dict(self) -> dict[str, float]:
        return dict(self._rates)


def _invert(item: PersistedLineItem) -> Optional[float]:
    fraction = item.allocation_percentage / 100.0
    if not item.role or item.count <= 0 or item.total_line_cost <= 0 or fraction <= 0:
        return None
    return item.total_line_cost / (item.count * fraction)


def build_frozen_index(snapshot: QuoteSnapshot | dict[str, Any] | list[Any] | None) -> FrozenRateIndex:
    """
    Build the index from a persisted snapshot.

    Accepts a QuoteSnapshot, its dict form, or a bare list of role line
    items as older quotes stored them.
    """
    if isinstance(snapshot, (list, tuple)):
        snapshot = QuoteSnapshot(role_lines=list(snapshot))
    elif isinstance(snapshot, dict):
        snapshot = QuoteSnapshot.model_validate(snapshot)
    elif not isinstance(snapshot, QuoteSnapshot):
        return FrozenRateIndex()

    rates: dict[str, float] = {}
    ambiguous: set[str] = set()
    skipped = 0
    for item in [*snapshot.role_lines, *snapshot.service_lines]:
        rate = _invert(item)
        if rate is None:
            skipped += 1
            continue
        key = frozen_key(item.role, item.seniority)
        if key in rates and not math.isclose(rates[key], rate, rel_tol=1e-9, abs_tol=RATE_TOLERANCE):
            ambiguous.add(key)
        rates.setdefault(key, rate)

    for key in ambiguous:
        del rates[key]
        logger.info(f"Not freezing {key!r}: line items disagree on its rate")

    logger.debug(f"Frozen {len(rates)} rates ({skipped} line items skipped)")
    return FrozenRateIndex(rates)
