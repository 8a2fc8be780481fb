"""
Sustain Criticality Scorer — seven banded sub-scores and a price tier.

Each sub-score is in [0, 5]; the total is their mean rounded to two
decimals and maps to a fixed monthly base (USD) through inclusive lower
bounds.
"""

from __future__ import annotations

import logging
from typing import Union

from quote_engine.models.enums import ServiceType, SustainTier, UsageFrequency
from quote_engine.models.schemas import (
    ProjectSpecification,
    SustainScore,
    SustainSubScores,
)

logger = logging.getLogger(__name__)

# (inclusive lower bound, tier, monthly base USD), highest first
TIER_TABLE: tuple[tuple[float, SustainTier, float], ...] = (
    (4.3, SustainTier.PREMIUM, 45000.0),
    (3.6, SustainTier.S3, 22000.0),
    (2.6, SustainTier.S2, 12000.0),
)
S1_BASE_COST = 5000.0

FREQUENCY_SCORES: dict[UsageFrequency, int] = {
    UsageFrequency.NONE: 0,
    UsageFrequency.MONTHLY: 1,
    UsageFrequency.WEEKLY: 2,
    UsageFrequency.DAILY: 4,
}

SCOPE_MARKETS_THRESHOLD = 1
SCOPE_USERS_THRESHOLD = 50


def band(n: int) -> int:
    """Volume band: 0→0, 1–2→1, 3–5→2, 6–10→3, 11–20→4, >20→5."""
    if n <= 0:
        return 0
    if n <= 2:
        return 1
    if n <= 5:
        return 2
    if n <= 10:
        return 3
    if n <= 20:
        return 4
    return 5


def model_score(n: int) -> int:
    """Data-science models: 0→0, 1→1, 2–5→3, >5→5."""
    if n <= 0:
        return 0
    if n == 1:
        return 1
    if n <= 5:
        return 3
    return 5


def frequency_score(frequency: UsageFrequency) -> int:
    return FREQUENCY_SCORES.get(frequency, 5)


def dependency_score(tag_count: int, markets_impacted: int, users_impacted: int) -> int:
    """
    Band the dependency count, then add a +1 scope bonus (capped at 5).

    With no dependencies the score is the bonus alone, never bonus + band.
    """
    if tag_count <= 0:
        base = 0
    elif tag_count <= 2:
        base = 1
    elif tag_count >= 5:
        base = 5
    else:
        base = tag_count  # 3→3, 4→4

    bonus = 1 if (markets_impacted > SCOPE_MARKETS_THRESHOLD or users_impacted > SCOPE_USERS_THRESHOLD) else 0
    if base == 0:
        return bonus
    return min(5, base + bonus)


def tier_for(total: float) -> tuple[SustainTier, float]:
    """Map a total score to (tier, monthly base cost)."""
    if total <= 0:
        return SustainTier.PENDING, 0.0
    for lower_bound, tier, base_cost in TIER_TABLE:
        if total >= lower_bound:
            return tier, base_cost
    return SustainTier.S1, S1_BASE_COST


def compute_sustain_score(spec: Union[ProjectSpecification, dict]) -> SustainScore:
    """Score a Sustain engagement. Other service types score PENDING."""
    if not isinstance(spec, ProjectSpecification):
        spec = ProjectSpecification.model_validate(spec)

    if spec.service_type != ServiceType.SUSTAIN:
        return SustainScore()

    metrics = spec.sustain_metrics
    matrix = spec.criticality

    sub = SustainSubScores(
        pipelines=band(metrics.pipelines),
        notebooks=band(metrics.notebooks),
        dashboards=band(metrics.dashboards),
        ds_models=model_score(metrics.ds_models),
        manual_process=5 if matrix.has_manual_process else 0,
        frequency=frequency_score(matrix.frequency),
        dependencies=dependency_score(
            len(matrix.dependency_tags),
            matrix.markets_impacted,
            matrix.users_impacted,
        ),
    )

    values = sub.as_list()
    total = 0.0 if not any(values) else round(sum(values) / len(values), 2)
    tier, base_cost = tier_for(total)

    logger.debug(f"Sustain score {total} → {tier.value} (sub-scores {values})")
    return SustainScore(sub_scores=sub, total=total, tier=tier, tier_base_cost=base_cost)
