"""
Optional memoization of breakdowns.

Keyed by a digest of every input (spec, catalog, frozen index), so any
change to any of them is a different key. Correctness never depends on a
hit: a cleared cache yields identical results.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from typing import Callable, Optional

from quote_engine.models.schemas import CostBreakdown

logger = logging.getLogger(__name__)


class BreakdownCache:
    """Small LRU cache of CostBreakdown by input digest."""

    def __init__(self, max_size: int = 256):
        self.max_size = max(0, max_size)
        self._entries: OrderedDict[str, CostBreakdown] = OrderedDict()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: str) -> Optional[CostBreakdown]:
        entry = self._entries.get(key)
        if entry is None:
            self.misses += 1
            return None
        self._entries.move_to_end(key)
        self.hits += 1
        return entry

    def put(self, key: str, breakdown: CostBreakdown) -> None:
        if self.max_size == 0:
            return
        self._entries[key] = breakdown
        self._entries.move_to_end(key)
        while len(self._entries) > self.max_size:
            self._entries.popitem(last=False)

    def get_or_compute(self, key: str, compute: Callable[[], CostBreakdown]) -> CostBreakdown:
        cached = self.get(key)
        if cached is not None:
            return cached
        breakdown = compute()
        self.put(key, breakdown)
        return breakdown

    def invalidate(self) -> None:
        """Drop every entry (e.g. after the live catalog was reloaded)."""
        dropped = len(self._entries)
        self._entries.clear()
        logger.debug(f"Breakdown cache invalidated ({dropped} entries)")
