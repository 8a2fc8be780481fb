"""
Engine — the pricing core.

Callers outside the package import ONLY from here:
    from quote_engine.engine import QuotationEngine, compute_breakdown
"""

from .aggregator import compute_breakdown
from .freezer import FrozenRateIndex, build_frozen_index
from .pricing_service import QuotationEngine
from .rates import resolve_rate
from .staffing import reconcile_auto_staffing
from .sustain import compute_sustain_score

__all__ = [
    "QuotationEngine",
    "compute_breakdown",
    "compute_sustain_score",
    "reconcile_auto_staffing",
    "resolve_rate",
    "build_frozen_index",
    "FrozenRateIndex",
]
