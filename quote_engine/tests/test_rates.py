"""
Tests: Rate catalog resolver — strategy chain, defaults, frozen override.

Run with:
    pytest quote_engine/tests/test_rates.py -v
"""

import pytest

from quote_engine.engine.freezer import FrozenRateIndex
from quote_engine.engine.rates import (
    coerce_catalog,
    exact_match,
    fuzzy_match,
    generic_level_match,
    lookup_catalog_rate,
    resolve_rate,
    resolve_rate_with_source,
    seniority_options,
)
from quote_engine.models.enums import Seniority
from quote_engine.models.schemas import RateCatalogEntry


def _entry(service, level, price, multiplier=1.0):
    return RateCatalogEntry(service_name=service, level_label=level, base_price=price, multiplier=multiplier)


class TestCatalogStrategies:
    def test_exact_match_is_case_insensitive(self):
        catalog = [_entry("data engineer", "sr", 7000)]
        assert exact_match("Data Engineer", "SR", catalog) == 7000

    def test_exact_match_requires_level(self):
        catalog = [_entry("Data Engineer", "Jr", 4000)]
        assert exact_match("Data Engineer", "Sr", catalog) is None

    def test_effective_rate_applies_multiplier(self):
        catalog = [_entry("Dashboard", "Alta", 4000, 1.5)]
        assert exact_match("Dashboard", "alta", catalog) == pytest.approx(6000)

    def test_generic_level_used_when_requested_level_absent(self):
        catalog = [_entry("Data Engineer", "Ssr", 4800)]
        assert generic_level_match("Data Engineer", "Expert", catalog) == 4800

    def test_generic_level_ignores_specific_levels(self):
        catalog = [_entry("Data Engineer", "Sr", 7000)]
        assert generic_level_match("Data Engineer", "Expert", catalog) is None

    def test_fuzzy_containment_on_normalised_names(self):
        catalog = [_entry("Pipeline Ingesta", "Alta", 3100)]
        assert fuzzy_match("Pipe", "Standard", catalog) == 3100

    def test_fuzzy_matches_in_both_directions(self):
        catalog = [_entry("BI", "Med", 3900)]
        assert fuzzy_match("BI Data Architect", "Sr", catalog) == 3900

    def test_duplicates_resolved_by_catalog_order(self):
        catalog = [_entry("Pipe", "Standard", 2600), _entry("Pipe", "Standard", 9999)]
        assert lookup_catalog_rate("Pipe", "Standard", catalog) == 2600

    def test_chain_prefers_exact_over_generic(self):
        catalog = [_entry("Data Engineer", "Media", 4500), _entry("Data Engineer", "Sr", 7000)]
        assert lookup_catalog_rate("Data Engineer", "Sr", catalog) == 7000

    def test_empty_catalog_returns_none(self):
        assert lookup_catalog_rate("Data Engineer", "Sr", []) is None
        assert lookup_catalog_rate("Data Engineer", "Sr", None) is None


class TestResolveRate:
    def test_role_default_applies_seniority_multiplier(self):
        assert resolve_rate("Data Engineer", "Sr") == pytest.approx(4954.44 * 1.3)
        assert resolve_rate("data_engineer", Seniority.JR) == pytest.approx(4954.44 * 0.7)

    def test_lead_prices_like_expert(self):
        assert resolve_rate("Solution Architect", "Lead") == pytest.approx(5308.33 * 1.5)

    @pytest.mark.parametrize(
        "service, expected",
        [("Pipe", 2500), ("Dataset", 2000), ("Dashboard", 5000), ("Algoritmo", 8000)],
    )
    def test_service_defaults(self, service, expected):
        assert resolve_rate(service, "Standard", []) == expected

    def test_unknown_name_is_zero_not_error(self):
        rate, source = resolve_rate_with_source("Quantum Plumber", "Sr", [])
        assert rate == 0.0
        assert source == "missing"

    def test_catalog_beats_default(self):
        catalog = [_entry("Data Engineer", "Sr", 7077.78)]
        rate, source = resolve_rate_with_source("Data Engineer", "Sr", catalog)
        assert rate == pytest.approx(7077.78)
        assert source == "catalog"

    def test_frozen_index_beats_catalog(self):
        catalog = [_entry("Data Engineer", "Sr", 7077.78)]
        frozen = FrozenRateIndex({"data engineer_sr": 6100.0})
        rate, source = resolve_rate_with_source("Data Engineer", "Sr", catalog, frozen)
        assert rate == 6100.0
        assert source == "frozen"

    def test_frozen_miss_falls_through_to_catalog(self):
        catalog = [_entry("Data Engineer", "Sr", 7077.78)]
        frozen = FrozenRateIndex({"data engineer_jr": 3000.0})
        assert resolve_rate("Data Engineer", "Sr", catalog, frozen) == pytest.approx(7077.78)


class TestCatalogCoercion:
    def test_accepts_original_catalog_keys(self):
        entries = coerce_catalog([{"service": "Pipe", "complexity": "Media", "basePrice": 3000, "multiplier": 1.2}])
        assert entries[0].service_name == "Pipe"
        assert entries[0].level_label == "Media"
        assert entries[0].effective_rate == pytest.approx(3600)

    def test_malformed_numbers_are_coerced(self):
        entry = coerce_catalog([{"serviceName": "Pipe", "levelLabel": "x", "basePrice": "abc", "multiplier": 0}])[0]
        assert entry.base_price == 0.0
        assert entry.multiplier == 1.0


class TestSeniorityOptions:
    def test_catalog_rows_only_sorted_by_seniority(self):
        catalog = [
            _entry("Data Scientist", "Expert", 7502.44),
            _entry("Data Scientist", "Med", 5190.37),
            _entry("Data Scientist", "Sr", 6252.04),
            _entry("Data Engineer", "Jr", 4128.70),
        ]
        options = seniority_options("data scientist", catalog)
        assert [o["level"] for o in options] == ["Med", "Sr", "Expert"]

    def test_defaults_when_role_not_in_catalog(self):
        options = seniority_options("Business Analyst", [])
        assert [o["level"] for o in options] == ["Jr", "Med", "Sr", "Expert"]
        assert options[1]["price"] == pytest.approx(4128.70)

    def test_unknown_role_has_no_options(self):
        assert seniority_options("Astronaut", []) == []
