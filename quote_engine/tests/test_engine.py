"""
Tests: QuotationEngine facade and the breakdown cache.

Run with:
    pytest quote_engine/tests/test_engine.py -v
"""

import pytest

from quote_engine.engine import QuotationEngine, compute_breakdown
from quote_engine.engine.cache import BreakdownCache
from quote_engine.models.schemas import CostBreakdown

CATALOG = [
    {"service": "Data Engineer", "complexity": "Sr", "basePrice": 7000},
    {"service": "Pipe", "complexity": "Standard", "basePrice": 2600},
]

SPEC = {
    "serviceType": "Project",
    "complexity": "low",
    "profiles": [{"role": "Data Engineer", "seniority": "Sr", "count": 1, "allocationPercentage": 50}],
    "projectMetrics": {"pipelines": 2},
}


class TestBreakdownCache:
    def test_lru_eviction(self):
        cache = BreakdownCache(max_size=2)
        cache.put("a", CostBreakdown())
        cache.put("b", CostBreakdown())
        cache.get("a")
        cache.put("c", CostBreakdown())
        assert cache.get("b") is None
        assert cache.get("a") is not None
        assert len(cache) == 2

    def test_zero_size_disables_caching(self):
        cache = BreakdownCache(max_size=0)
        cache.put("a", CostBreakdown())
        assert len(cache) == 0

    def test_get_or_compute_counts(self):
        cache = BreakdownCache()
        calls = []

        def compute():
            calls.append(1)
            return CostBreakdown(final_total=1.0)

        cache.get_or_compute("k", compute)
        cache.get_or_compute("k", compute)
        assert len(calls) == 1
        assert (cache.hits, cache.misses) == (1, 1)


class TestQuotationEngine:
    def test_breakdown_uses_catalog(self):
        engine = QuotationEngine(catalog=CATALOG)
        breakdown = engine.breakdown(SPEC)
        assert breakdown.roles_cost == pytest.approx(3500)
        assert breakdown.services_cost == pytest.approx(5200)
        assert breakdown.l2_support_cost == pytest.approx(870)

    def test_repeat_breakdown_is_a_cache_hit(self):
        engine = QuotationEngine(catalog=CATALOG)
        first = engine.breakdown(SPEC)
        second = engine.breakdown(dict(SPEC))
        assert first == second
        assert engine.cache.hits == 1

    def test_changed_spec_is_a_miss(self):
        engine = QuotationEngine(catalog=CATALOG)
        engine.breakdown(SPEC)
        engine.breakdown({**SPEC, "commercialDiscount": 5})
        assert engine.cache.hits == 0
        assert engine.cache.misses == 2

    def test_cleared_cache_gives_identical_results(self):
        engine = QuotationEngine(catalog=CATALOG)
        first = engine.breakdown(SPEC)
        engine.cache.invalidate()
        assert engine.breakdown(SPEC) == first

    def test_load_catalog_invalidates(self):
        """A catalog reload must never serve a breakdown priced on the old rates."""
        engine = QuotationEngine(catalog=CATALOG)
        before = engine.breakdown(SPEC)
        engine.load_catalog([{"service": "Data Engineer", "complexity": "Sr", "basePrice": 8000}])
        after = engine.breakdown(SPEC)
        assert len(engine.cache) == 1
        assert after.roles_cost == pytest.approx(4000)
        assert after.roles_cost != before.roles_cost

    def test_historical_engine_keeps_issued_price(self):
        issued = QuotationEngine(catalog=CATALOG)
        original = issued.breakdown(SPEC)
        snapshot = issued.snapshot(original)

        repriced = [{"service": "Data Engineer", "complexity": "Sr", "basePrice": 9000},
                    {"service": "Pipe", "complexity": "Standard", "basePrice": 3300}]
        reopened = QuotationEngine(catalog=repriced, snapshot=snapshot)
        assert reopened.historical
        assert reopened.breakdown(SPEC).final_total == pytest.approx(original.final_total)
        assert not QuotationEngine(catalog=repriced).historical

    def test_resolve_rate_and_options(self):
        engine = QuotationEngine(catalog=CATALOG)
        assert engine.resolve_rate("Data Engineer", "Sr") == 7000
        assert [o["level"] for o in engine.seniority_options("Data Engineer")] == ["Sr"]

    def test_present_defaults_to_configured_currency(self):
        engine = QuotationEngine(catalog=CATALOG, fx_rates={"USD": 1.0, "EUR": 0.5})
        breakdown = engine.breakdown(SPEC)
        assert engine.present(breakdown)["currency"] == "USD"
        assert engine.present(breakdown, "EUR")["amounts"]["final_total"] == pytest.approx(
            breakdown.final_total * 0.5
        )

    def test_reconcile_and_score(self):
        engine = QuotationEngine()
        spec = {
            "serviceType": "Sustain",
            "techStack": ["tableau"],
            "sustainMetrics": {"dashboards": 8},
            "criticality": {"frequency": "weekly"},
        }
        profiles = engine.reconcile_staffing(spec)
        assert [(p.role, p.allocation_percentage) for p in profiles] == [("BI Visualization Developer", 30)]
        assert engine.sustain_score(spec).total == pytest.approx(0.71)

    def test_profiles_without_ids_share_a_cache_entry(self):
        """Generated profile ids do not split the cache."""
        engine = QuotationEngine(catalog=CATALOG)
        first = engine.breakdown(SPEC)
        second = engine.breakdown(SPEC)
        assert (engine.cache.hits, engine.cache.misses, len(engine.cache)) == (1, 1, 1)
        assert second.final_total == first.final_total


class TestSustainStaffing:
    SUSTAIN = {
        "serviceType": "Sustain",
        "techStack": ["databricks"],
        "sustainMetrics": {"pipelines": 4, "notebooks": 2},
        "criticality": {"frequency": "daily"},
    }

    def test_breakdown_prices_suggested_staff(self):
        """A Sustain spec with no profiles is priced with its reconciled staffing."""
        engine = QuotationEngine(catalog=CATALOG)
        breakdown = engine.breakdown(self.SUSTAIN)
        assert [(line.role, line.seniority.value, line.allocation_percentage) for line in breakdown.role_lines] == [
            ("Data Engineer", "Sr", 30)
        ]
        assert breakdown.roles_cost == pytest.approx(7000 * 0.3)

    def test_breakdown_matches_explicitly_reconciled_spec(self):
        engine = QuotationEngine(catalog=CATALOG)
        staffed = {**self.SUSTAIN, "profiles": [p.model_dump() for p in engine.reconcile_staffing(self.SUSTAIN)]}
        assert engine.breakdown(self.SUSTAIN).model_dump() == compute_breakdown(staffed, CATALOG).model_dump()

    def test_confirmed_lines_are_priced_as_entered(self):
        engine = QuotationEngine(catalog=CATALOG)
        spec = {
            **self.SUSTAIN,
            "profiles": [{"id": "m1", "role": "Data Engineer", "seniority": "Sr", "count": 1,
                          "unitPrice": 6000, "allocationPercentage": 80, "isManual": True}],
        }
        breakdown = engine.breakdown(spec)
        assert len(breakdown.role_lines) == 1
        assert breakdown.roles_cost == pytest.approx(4800)

    def test_other_service_types_are_not_auto_staffed(self):
        engine = QuotationEngine(catalog=CATALOG)
        spec = {**self.SUSTAIN, "serviceType": "Staffing"}
        assert engine.staffed(spec).profiles == []
        assert engine.breakdown(spec).roles_cost == 0
