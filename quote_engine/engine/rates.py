"""
Rate Catalog Resolver — turns (service, level) into a unit price.

Resolution order, first hit wins:
  1. frozen index of a historical quote (when one is supplied)
  2. catalog, exact (service, level), case-insensitive
  3. catalog, same service at a generic mid-tier level
  4. catalog, fuzzy containment on the normalised service name
  5. hardcoded defaults (role base × seniority multiplier, or the
     per-unit service default)

A miss is never an error: an unknown name prices at 0.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Optional, Sequence

from pydantic import ValidationError

from quote_engine.knowledge.roles import (
    SENIORITY_MULTIPLIERS,
    find_role,
    level_rank,
)
from quote_engine.models.enums import Seniority
from quote_engine.models.schemas import RateCatalogEntry

logger = logging.getLogger(__name__)

GENERIC_LEVELS = ("standard", "media", "ssr", "baja")

# Abstract service names billed per unit, with their defaults
SERVICE_DEFAULTS: dict[str, float] = {
    "pipe": 2500.0,
    "dataset": 2000.0,
    "dashboard": 5000.0,
    "algoritmo": 8000.0,
}
SERVICE_LEVEL = "Standard"

Catalog = Sequence[RateCatalogEntry]
RateStrategy = Callable[[str, str, Catalog], Optional[float]]


def _norm(text: str) -> str:
    return (text or "").strip().lower()


def _fuzzy_key(text: str) -> str:
    return _norm(text).replace(" ", "_")


# ── Catalog strategies ───────────────────────────────────


def exact_match(service_name: str, level: str, catalog: Catalog) -> Optional[float]:
    service, lvl = _norm(service_name), _norm(level)
    for entry in catalog:
        if _norm(entry.service_name) == service and _norm(entry.level_label) == lvl:
            return entry.effective_rate
    return None


def generic_level_match(service_name: str, level: str, catalog: Catalog) -> Optional[float]:
    service = _norm(service_name)
    for entry in catalog:
        if _norm(entry.service_name) == service and _norm(entry.level_label) in GENERIC_LEVELS:
            return entry.effective_rate
    return None


def fuzzy_match(service_name: str, level: str, catalog: Catalog) -> Optional[float]:
    wanted = _fuzzy_key(service_name)
    if not wanted:
        return None
    for entry in catalog:
        candidate = _fuzzy_key(entry.service_name)
        if candidate and (wanted in candidate or candidate in wanted):
            return entry.effective_rate
    return None


CATALOG_STRATEGIES: tuple[RateStrategy, ...] = (
    exact_match,
    generic_level_match,
    fuzzy_match,
)


def coerce_catalog(catalog: Optional[Iterable[Any]]) -> list[RateCatalogEntry]:
    """Accept entries or their dict form; None means an empty catalog.

    Rows that cannot be read as an entry are dropped, never raised.
    """
    entries: list[RateCatalogEntry] = []
    for position, row in enumerate(catalog or []):
        if isinstance(row, RateCatalogEntry):
            entries.append(row)
            continue
        try:
            entries.append(RateCatalogEntry.model_validate(row))
        except ValidationError:
            logger.warning(f"Dropping unreadable catalog row #{position}: {row!r}")
    return entries


def lookup_catalog_rate(
    service_name: str,
    level: str,
    catalog: Optional[Iterable[RateCatalogEntry]],
) -> Optional[float]:
    """Run the catalog strategies in order; None when nothing matches."""
    entries = list(catalog or [])
    if not entries:
        return None
    for strategy in CATALOG_STRATEGIES:
        rate = strategy(service_name, level, entries)
        if rate is not None:
            return rate
    return None


# ── Defaults ─────────────────────────────────────────────


def seniority_multiplier(level: str | Seniority) -> float:
    seniority = Seniority.parse(level)
    if seniority is None:
        return 1.0
    return SENIORITY_MULTIPLIERS[seniority]


def default_rate(service_name: str, level: str | Seniority) -> Optional[float]:
    """Hardcoded fallback: role base × seniority multiplier, or service default."""
    role = find_role(service_name)
    if role is not None:
        return role.base_price * seniority_multiplier(level)
    return SERVICE_DEFAULTS.get(_norm(service_name))


# ── Public entry point ───────────────────────────────────


def resolve_rate(
    service_name: str,
    level: str | Seniority,
    catalog: Optional[Iterable[RateCatalogEntry]] = None,
    frozen_index=None,
) -> float:
    """Resolve a unit rate. Total: always returns a number."""
    rate, _ = resolve_rate_with_source(service_name, level, catalog, frozen_index)
    return rate


def resolve_rate_with_source(
    service_name: str,
    level: str | Seniority,
    catalog: Optional[Iterable[RateCatalogEntry]] = None,
    frozen_index=None,
) -> tuple[float, str]:
    """Same as resolve_rate, also naming the layer that answered."""
    level_label = level.value if isinstance(level, Seniority) else str(level or "")

    if frozen_index is not None:
        frozen = frozen_index.lookup(service_name, level_label)
        if frozen is not None:
            return frozen, "frozen"

    rate = lookup_catalog_rate(service_name, level_label, catalog)
    if rate is not None:
        return rate, "catalog"

    rate = default_rate(service_name, level_label)
    if rate is not None:
        logger.debug(f"No catalog rate for {service_name!r}/{level_label!r}, using default {rate:.2f}")
        return rate, "default"

    logger.debug(f"No rate at all for {service_name!r}/{level_label!r}")
    return 0.0, "missing"


def seniority_options(
    role_name: str,
    catalog: Optional[Iterable[RateCatalogEntry]] = None,
) -> list[dict[str, float | str]]:
    """
    Levels a role can be staffed at, cheapest seniority first.

    When the catalog lists the role, ONLY its catalog rows are offered;
    otherwise every seniority is offered at default price × multiplier.
    """
    wanted = _norm(role_name)
    rows = [
        {"level": entry.level_label, "price": entry.effective_rate}
        for entry in (catalog or [])
        if _norm(entry.service_name) == wanted
    ]
    if rows:
        return sorted(rows, key=lambda r: level_rank(str(r["level"])))

    role = find_role(role_name)
    if role is None:
        return []
    return [
        {"level": s.value, "price": role.base_price * SENIORITY_MULTIPLIERS[s]}
        for s in Seniority
    ]
