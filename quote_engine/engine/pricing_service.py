"""
QuotationEngine — the ONLY class the CLI and the API talk to.

This is the facade over:
  • Rate resolver        (live catalog + defaults)
  • Rate freezer         (historical quotes keep their rates)
  • Sustain scorer / staffing engine / cost aggregator
  • Currency presenter   (display only)
  • Breakdown cache      (optional memoization)

Usage:
    from quote_engine.engine import QuotationEngine
    engine = QuotationEngine(catalog=rows)
    breakdown = engine.breakdown(spec)

    # Re-opening an issued quote
    historical = QuotationEngine(catalog=rows, snapshot=saved_snapshot)
    historical.breakdown(saved_spec)
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Optional, Union

from quote_engine.config import get_settings
from quote_engine.engine.aggregator import compute_breakdown
from quote_engine.engine.cache import BreakdownCache
from quote_engine.engine.currency import present_breakdown
from quote_engine.engine.freezer import FrozenRateIndex, build_frozen_index
from quote_engine.engine.rates import coerce_catalog, resolve_rate, seniority_options
from quote_engine.engine.staffing import reconcile_auto_staffing
from quote_engine.engine.sustain import compute_sustain_score
from quote_engine.models.enums import Seniority, ServiceType
from quote_engine.models.schemas import (
    CostBreakdown,
    ProjectSpecification,
    QuoteSnapshot,
    StaffingProfile,
    SustainScore,
)
from quote_engine.utils.hashing import fingerprint

logger = logging.getLogger(__name__)

SpecInput = Union[ProjectSpecification, dict[str, Any]]


class QuotationEngine:
    """Facade bundling the immutable inputs of one pricing context."""

    def __init__(
        self,
        catalog: Optional[Iterable[Any]] = None,
        fx_rates: Optional[Mapping[str, float]] = None,
        snapshot: Optional[Union[QuoteSnapshot, dict[str, Any], list[Any]]] = None,
        cache_size: Optional[int] = None,
    ):
        settings = get_settings()
        self.catalog = tuple(coerce_catalog(catalog))
        self.fx_rates = dict(fx_rates or settings.fx_rates)
        self.frozen_index: Optional[FrozenRateIndex] = (
            build_frozen_index(snapshot) if snapshot is not None else None
        )
        self.cache = BreakdownCache(
            settings.breakdown_cache_size if cache_size is None else cache_size
        )

    @property
    def historical(self) -> bool:
        """True when pricing a previously issued quote."""
        return self.frozen_index is not None

    def load_catalog(self, catalog: Optional[Iterable[Any]]) -> None:
        """Swap the live catalog; cached breakdowns are dropped wholesale."""
        self.catalog = tuple(coerce_catalog(catalog))
        self.cache.invalidate()
        logger.info(f"Loaded rate catalog ({len(self.catalog)} entries)")

    # ── Pricing ──────────────────────────────────────────

    def _cache_key(self, spec: ProjectSpecification) -> str:
        # Profile ids are generated when absent and never affect a price
        return fingerprint(
            spec.model_dump(mode="json", exclude={"profiles": {"__all__": {"id"}}}),
            [entry.model_dump(mode="json") for entry in self.catalog],
            self.frozen_index.as_dict() if self.frozen_index is not None else None,
        )

    def staffed(self, spec: SpecInput) -> ProjectSpecification:
        """The spec with its SUGGESTED lines reconciled (Sustain only)."""
        if not isinstance(spec, ProjectSpecification):
            spec = ProjectSpecification.model_validate(spec)
        if spec.service_type != ServiceType.SUSTAIN:
            return spec
        return spec.model_copy(update={"profiles": reconcile_auto_staffing(spec, self.catalog)})

    def breakdown(self, spec: SpecInput) -> CostBreakdown:
        """Price a spec; Sustain specs are auto-staffed first."""
        if not isinstance(spec, ProjectSpecification):
            spec = ProjectSpecification.model_validate(spec)
        return self.cache.get_or_compute(
            self._cache_key(spec),
            lambda: compute_breakdown(self.staffed(spec), self.catalog, self.frozen_index),
        )

    def sustain_score(self, spec: SpecInput) -> SustainScore:
        return compute_sustain_score(spec)

    def reconcile_staffing(self, spec: SpecInput) -> list[StaffingProfile]:
        return reconcile_auto_staffing(spec, self.catalog)

    def resolve_rate(self, service_name: str, level: Union[str, Seniority]) -> float:
        return resolve_rate(service_name, level, self.catalog, self.frozen_index)

    def seniority_options(self, role_name: str) -> list[dict[str, Any]]:
        return seniority_options(role_name, self.catalog)

    # ── Presentation / persistence helpers ───────────────

    def present(
        self,
        breakdown: CostBreakdown,
        currency_code: Optional[str] = None,
        annual: bool = False,
    ) -> dict[str, Any]:
        code = currency_code or get_settings().default_currency
        return present_breakdown(breakdown, code, self.fx_rates, annual=annual)

    @staticmethod
    def snapshot(breakdown: CostBreakdown) -> QuoteSnapshot:
        """What to persist alongside an issued quote."""
        return QuoteSnapshot.from_breakdown(breakdown)
