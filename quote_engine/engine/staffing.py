"""
Staffing Allocation Engine.

Two ways a staffing line comes to exist:

  • manual: add / edit / decrement / remove, always CONFIRMED
  • automatic: reconcile_auto_staffing() turns the selected tech stack
    of a Sustain engagement into SUGGESTED lines and keeps their
    allocation in step with the volumetry

A CONFIRMED line is never touched by the automatic path; the only way
back to automatic management is deleting the line.

Every function returns a new list; the inputs are never mutated.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Iterable, Optional, Union

from quote_engine.engine.rates import resolve_rate
from quote_engine.engine.sustain import band, model_score
from quote_engine.knowledge.roles import find_role, role_key_for
from quote_engine.knowledge.tech_suggestions import RoleSuggestion, suggestions_for
from quote_engine.models.enums import (
    ProfileSource,
    Seniority,
    ServiceType,
    StaffingDomain,
    UsageFrequency,
)
from quote_engine.models.schemas import (
    ProjectSpecification,
    RateCatalogEntry,
    StaffingProfile,
)

logger = logging.getLogger(__name__)

FREQUENCY_MULTIPLIERS: dict[UsageFrequency, float] = {
    UsageFrequency.REALTIME: 1.25,
    UsageFrequency.MONTHLY: 0.75,
}

EDITABLE_FIELDS = {"count", "seniority", "allocation_percentage", "unit_price", "skills", "rationale"}


def _role_label(role: str) -> str:
    config = find_role(role)
    return config.label if config else role


def _same_role(a: str, b: str) -> bool:
    return role_key_for(a) == role_key_for(b)


# ── Manual path ──────────────────────────────────────────


def add_profile(
    profiles: Iterable[StaffingProfile],
    role_key: str,
    seniority: Union[Seniority, str],
    explicit_price: Optional[float] = None,
    allocation: int = 100,
    catalog: Optional[Iterable[RateCatalogEntry]] = None,
) -> list[StaffingProfile]:
    """Add one head; an identical role+seniority+allocation line is incremented."""
    current = list(profiles)
    level = Seniority.parse(seniority, Seniority.MED)
    label = _role_label(role_key)
    candidate = StaffingProfile(role=label, seniority=level, allocation_percentage=allocation)

    for idx, profile in enumerate(current):
        if (
            _same_role(profile.role, label)
            and profile.seniority == level
            and profile.allocation_percentage == candidate.allocation_percentage
        ):
            current[idx] = profile.model_copy(
                update={"count": profile.count + 1, "source": ProfileSource.CONFIRMED}
            )
            return current

    unit_price = explicit_price if explicit_price is not None else resolve_rate(label, level, catalog)
    current.append(
        StaffingProfile(
            role=label,
            seniority=level,
            count=1,
            unit_price=unit_price,
            allocation_percentage=candidate.allocation_percentage,
            source=ProfileSource.CONFIRMED,
        )
    )
    return current


def edit_profile(
    profiles: Iterable[StaffingProfile],
    profile_id: str,
    catalog: Optional[Iterable[RateCatalogEntry]] = None,
    **changes: Any,
) -> list[StaffingProfile]:
    """
    Apply a human edit. Any edit confirms the line.

    A seniority change without an explicit ``unit_price`` re-snapshots the
    price at the new seniority.
    """
    unknown = set(changes) - EDITABLE_FIELDS
    if unknown:
        logger.warning(f"Ignoring non-editable profile fields: {sorted(unknown)}")

    result: list[StaffingProfile] = []
    for profile in profiles:
        if profile.id != profile_id:
            result.append(profile)
            continue
        data = profile.model_dump()
        data.update({k: v for k, v in changes.items() if k in EDITABLE_FIELDS})
        data["source"] = ProfileSource.CONFIRMED
        edited = StaffingProfile.model_validate(data)
        if "seniority" in changes and "unit_price" not in changes and edited.seniority != profile.seniority:
            edited = edited.model_copy(
                update={"unit_price": resolve_rate(edited.role, edited.seniority, catalog)}
            )
        result.append(edited)
    return result


def decrement_profile(profiles: Iterable[StaffingProfile], profile_id: str) -> list[StaffingProfile]:
    """Remove one head; the line disappears when its count reaches zero."""
    result: list[StaffingProfile] = []
    for profile in profiles:
        if profile.id != profile_id:
            result.append(profile)
        elif profile.count > 1:
            result.append(
                profile.model_copy(
                    update={"count": profile.count - 1, "source": ProfileSource.CONFIRMED}
                )
            )
    return result


def remove_profile(profiles: Iterable[StaffingProfile], profile_id: str) -> list[StaffingProfile]:
    return [p for p in profiles if p.id != profile_id]


# ── Automatic path ───────────────────────────────────────


def domain_scores(spec: ProjectSpecification) -> dict[StaffingDomain, float]:
    """Workload per domain from the Sustain volumetry, scaled by usage frequency."""
    metrics = spec.sustain_metrics
    multiplier = FREQUENCY_MULTIPLIERS.get(spec.criticality.frequency, 1.0)
    raw = {
        StaffingDomain.DATA: band(metrics.pipelines) + band(metrics.notebooks),
        StaffingDomain.VIS: band(metrics.dashboards),
        StaffingDomain.SCI: model_score(metrics.ds_models),
    }
    return {domain: score * multiplier for domain, score in raw.items()}


def suggested_allocation(score: float) -> int:
    return min(100, math.ceil(score * 10))


def collect_suggestions(tech_stack: Iterable[str]) -> list[RoleSuggestion]:
    """Domain-tagged suggestions of the stack, first one per (role, seniority)."""
    seen: set[tuple[str, Seniority]] = set()
    result: list[RoleSuggestion] = []
    for tech in tech_stack:
        for suggestion in suggestions_for(tech):
            if suggestion.domain is None:
                continue
            key = (role_key_for(suggestion.role), suggestion.seniority)
            if key in seen:
                continue
            seen.add(key)
            result.append(suggestion)
    return result


def reconcile_auto_staffing(
    spec: Union[ProjectSpecification, dict],
    catalog: Optional[Iterable[RateCatalogEntry]] = None,
) -> list[StaffingProfile]:
    """
    Bring SUGGESTED lines in line with the current tech stack and volumetry.

    Returns the updated profile list; non-Sustain specs come back unchanged.
    """
    if not isinstance(spec, ProjectSpecification):
        spec = ProjectSpecification.model_validate(spec)

    profiles = list(spec.profiles)
    if spec.service_type != ServiceType.SUSTAIN:
        return profiles

    entries = list(catalog or [])
    scores = domain_scores(spec)

    for suggestion in collect_suggestions(spec.tech_stack):
        allocation = suggested_allocation(scores[suggestion.domain])
        matches = [
            idx
            for idx, p in enumerate(profiles)
            if _same_role(p.role, suggestion.role) and p.seniority == suggestion.seniority
        ]

        if not matches:
            if allocation <= 0:
                continue
            role_key = role_key_for(suggestion.role)
            profiles.append(
                StaffingProfile(
                    id=f"auto-{role_key}-{suggestion.seniority.value.lower()}",
                    role=_role_label(suggestion.role),
                    seniority=suggestion.seniority,
                    count=1,
                    unit_price=resolve_rate(suggestion.role, suggestion.seniority, entries),
                    allocation_percentage=allocation,
                    source=ProfileSource.SUGGESTED,
                    rationale=suggestion.rationale,
                )
            )
            logger.debug(f"Suggested {suggestion.role} {suggestion.seniority.value} at {allocation}%")
            continue

        for idx in matches:
            if profiles[idx].is_manual:
                continue
            if profiles[idx].allocation_percentage != allocation:
                profiles[idx] = profiles[idx].model_copy(update={"allocation_percentage": allocation})

    return profiles
