"""
Cost Aggregator — the priced breakdown of a project specification.

Two paths, selected by service type:

  Project / Staffing (standard)
      roles + per-unit services + 10% L2 support, then commercial
      discount, then retention. Staffing bills no services and no L2.

  Sustain (fixed tier)
      roles × support-window modifier + tier base + weekend surcharge,
      billed as a flat monthly fee (no discount / retention). Hypercare
      adds one extra month of (tier base + roles) to the project total only.

Monetary outputs are rounded to cents stage by stage so the figures on the
breakdown always add up. The aggregator never raises for a valid spec.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Optional, Union

from quote_engine.engine.freezer import FrozenRateIndex
from quote_engine.engine.rates import (
    SERVICE_LEVEL,
    coerce_catalog,
    resolve_rate_with_source,
)
from quote_engine.engine.sustain import compute_sustain_score
from quote_engine.knowledge.roles import find_role
from quote_engine.models.enums import Complexity, Seniority, ServiceType, SupportWindow
from quote_engine.models.schemas import (
    CostBreakdown,
    ProjectSpecification,
    RateCatalogEntry,
    RoleLine,
    ServiceLine,
)

logger = logging.getLogger(__name__)

L2_SUPPORT_RATE = 0.10
WEEKEND_SURCHARGE_RATE = 0.015

COMPLEXITY_MODIFIERS: dict[Complexity, float] = {
    Complexity.LOW: 1.0,
    Complexity.MEDIUM: 1.2,
    Complexity.HIGH: 1.5,
}

SUPPORT_WINDOW_MODIFIERS: dict[SupportWindow, float] = {
    SupportWindow.BUSINESS: 1.0,
    SupportWindow.FULL: 1.5,
    SupportWindow.COMBINED: 1.2,
}

# (catalog service name, metric field)
SERVICE_UNITS: tuple[tuple[str, str], ...] = (
    ("Pipe", "pipelines"),
    ("Dataset", "notebooks"),
    ("Dashboard", "dashboards"),
    ("Algoritmo", "ds_models"),
)


def _money(value: float) -> float:
    return round(value, 2)


# ── Line pricing ─────────────────────────────────────────


def price_role_lines(
    spec: ProjectSpecification,
    catalog: list[RateCatalogEntry],
    frozen_index: Optional[FrozenRateIndex] = None,
) -> tuple[list[RoleLine], bool]:
    """
    Price every staffing line.

    Returns the lines and whether the legacy per-role counters were used
    (Project only, when no itemised profiles exist).
    """
    lines: list[RoleLine] = []

    if spec.profiles:
        for profile in spec.profiles:
            config = find_role(profile.role)
            if config is None:
                logger.warning(f"Profile {profile.id} references unknown role {profile.role!r}; priced at 0")
                continue

            rate = frozen_index.lookup(config.label, profile.seniority.value) if frozen_index else None
            if rate is not None:
                source = "frozen"
            elif profile.unit_price > 0:
                rate, source = profile.unit_price, "profile"
            else:
                rate, source = resolve_rate_with_source(config.label, profile.seniority, catalog)

            lines.append(
                RoleLine(
                    role=config.label,
                    role_key=config.key,
                    seniority=profile.seniority,
                    count=profile.count,
                    allocation_percentage=profile.allocation_percentage,
                    unit_rate=rate,
                    line_total=rate * profile.count * profile.allocation_fraction,
                    rate_source=source,
                )
            )
        return lines, False

    if spec.service_type != ServiceType.PROJECT:
        return lines, False

    for role_key, count in spec.roles.items():
        if count <= 0:
            continue
        config = find_role(role_key)
        if config is None:
            logger.warning(f"Legacy counter for unknown role {role_key!r}; priced at 0")
            continue
        rate, source = resolve_rate_with_source(config.label, Seniority.MED, catalog, frozen_index)
        lines.append(
            RoleLine(
                role=config.label,
                role_key=config.key,
                seniority=Seniority.MED,
                count=count,
                allocation_percentage=100,
                unit_rate=rate,
                line_total=rate * count,
                rate_source=source,
            )
        )
    return lines, bool(lines)


def price_service_lines(
    spec: ProjectSpecification,
    catalog: list[RateCatalogEntry],
    frozen_index: Optional[FrozenRateIndex] = None,
) -> list[ServiceLine]:
    metrics = spec.active_metrics
    lines: list[ServiceLine] = []
    for service_name, field in SERVICE_UNITS:
        count = getattr(metrics, field)
        if count <= 0:
            continue
        rate, source = resolve_rate_with_source(service_name, SERVICE_LEVEL, catalog, frozen_index)
        lines.append(
            ServiceLine(
                service=service_name,
                count=count,
                unit_rate=rate,
                line_total=rate * count,
                rate_source=source,
            )
        )
    return lines


# ── Paths ────────────────────────────────────────────────


def _standard_breakdown(
    spec: ProjectSpecification,
    catalog: list[RateCatalogEntry],
    frozen_index: Optional[FrozenRateIndex],
) -> CostBreakdown:
    role_lines, legacy = price_role_lines(spec, catalog, frozen_index)
    roles_sum = sum(line.line_total for line in role_lines)
    if legacy:
        roles_sum *= COMPLEXITY_MODIFIERS[spec.complexity]
    roles_cost = _money(roles_sum)

    is_staffing = spec.service_type == ServiceType.STAFFING
    service_lines = [] if is_staffing else price_service_lines(spec, catalog, frozen_index)
    services_cost = _money(sum(line.line_total for line in service_lines))

    l2_support_cost = 0.0 if is_staffing else _money((roles_cost + services_cost) * L2_SUPPORT_RATE)
    risk_cost = 0.0

    gross_total = _money(roles_cost + services_cost + l2_support_cost + risk_cost)
    discount_amount = _money(gross_total * spec.commercial_discount / 100.0)
    discounted_total = _money(gross_total - discount_amount)
    retention_amount = (
        _money(discounted_total * spec.retention.percentage / 100.0)
        if spec.retention.enabled
        else 0.0
    )
    final_total = _money(discounted_total - retention_amount)

    months = spec.duration.in_months
    return CostBreakdown(
        service_type=spec.service_type,
        roles_cost=roles_cost,
        services_cost=services_cost,
        l2_support_cost=l2_support_cost,
        risk_cost=risk_cost,
        gross_total=gross_total,
        discount_amount=discount_amount,
        discounted_total=discounted_total,
        retention_amount=retention_amount,
        final_total=final_total,
        duration_in_months=months,
        hypercare_cost=0.0,
        total_project_cost=_money(final_total * months),
        role_lines=role_lines,
        service_lines=service_lines,
    )


def _sustain_breakdown(
    spec: ProjectSpecification,
    catalog: list[RateCatalogEntry],
    frozen_index: Optional[FrozenRateIndex],
) -> CostBreakdown:
    score = compute_sustain_score(spec)
    operations = spec.operations

    role_lines, _ = price_role_lines(spec, catalog, frozen_index)
    window_modifier = SUPPORT_WINDOW_MODIFIERS[operations.support_window]
    roles_cost = _money(sum(line.line_total for line in role_lines) * window_modifier)

    services_cost = score.tier_base_cost
    weekend_surcharge = _money(score.tier_base_cost * WEEKEND_SURCHARGE_RATE) if operations.weekend_usage else 0.0

    monthly_total = _money(services_cost + roles_cost + weekend_surcharge)
    hypercare_cost = _money(score.tier_base_cost + roles_cost) if operations.has_hypercare else 0.0

    months = spec.duration.in_months
    return CostBreakdown(
        service_type=spec.service_type,
        roles_cost=roles_cost,
        services_cost=services_cost,
        l2_support_cost=0.0,
        risk_cost=weekend_surcharge,
        gross_total=monthly_total,
        discount_amount=0.0,
        discounted_total=monthly_total,
        retention_amount=0.0,
        final_total=monthly_total,
        duration_in_months=months,
        hypercare_cost=hypercare_cost,
        total_project_cost=_money(monthly_total * months + hypercare_cost),
        sustain_score=score,
        sustain_tier=score.tier,
        role_lines=role_lines,
    )


# ── Public entry point ───────────────────────────────────


def compute_breakdown(
    spec: Union[ProjectSpecification, dict[str, Any]],
    catalog: Optional[Iterable[Any]] = None,
    frozen_index: Optional[Union[FrozenRateIndex, dict[str, float]]] = None,
) -> CostBreakdown:
    """
    Price a specification against a catalog.

    Pass ``frozen_index`` when re-opening an issued quote: its rates win
    over anything the live catalog says today.
    """
    if not isinstance(spec, ProjectSpecification):
        spec = ProjectSpecification.model_validate(spec)
    entries = coerce_catalog(catalog)
    if frozen_index is not None and not isinstance(frozen_index, FrozenRateIndex):
        frozen_index = FrozenRateIndex(frozen_index)

    if spec.service_type == ServiceType.SUSTAIN:
        breakdown = _sustain_breakdown(spec, entries, frozen_index)
    else:
        breakdown = _standard_breakdown(spec, entries, frozen_index)

    logger.debug(
        f"{spec.service_type.value} breakdown: roles={breakdown.roles_cost:.2f} "
        f"services={breakdown.services_cost:.2f} final={breakdown.final_total:.2f}"
    )
    return breakdown