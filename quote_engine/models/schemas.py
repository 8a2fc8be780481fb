"""
Data contracts of the pricing engine.

Inputs accept camelCase keys (the shape the quote form and the persisted
snapshots use) as well as snake_case. Every numeric field is coerced
instead of rejected: non-numeric, NaN and negative values become 0 and
percentages are clamped to [0, 100].
"""

from __future__ import annotations

import uuid
from typing import Any, Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    computed_field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from quote_engine.utils.numbers import (
    clamp_percentage,
    safe_bool,
    safe_float,
    safe_int,
    safe_str,
)

from .enums import (
    Complexity,
    DurationUnit,
    ProfileSource,
    Seniority,
    ServiceType,
    SupportWindow,
    SustainTier,
    UsageFrequency,
)

# Weeks are converted with the commercial 4.33 weeks/month convention
WEEKS_PER_MONTH = 4.33
DAYS_PER_MONTH = 30.0


class QuoteModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FrozenQuoteModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )


# ── Rate catalog ─────────────────────────────────────────


class RateCatalogEntry(FrozenQuoteModel):
    """One row of the live rate catalog."""
    service_name: str = Field(
        default="",
        validation_alias=AliasChoices("service_name", "serviceName", "service"),
    )
    level_label: str = Field(
        default="",
        validation_alias=AliasChoices("level_label", "levelLabel", "complexity", "level"),
    )
    base_price: float = 0.0
    multiplier: float = 1.0

    @field_validator("service_name", "level_label", mode="before")
    @classmethod
    def _coerce_label(cls, v: Any) -> str:
        return safe_str(v)

    @field_validator("base_price", mode="before")
    @classmethod
    def _coerce_price(cls, v: Any) -> float:
        return safe_float(v)

    @field_validator("multiplier", mode="before")
    @classmethod
    def _coerce_multiplier(cls, v: Any) -> float:
        m = safe_float(v)
        return m if m > 0 else 1.0

    @property
    def effective_rate(self) -> float:
        return self.base_price * self.multiplier


# ── Staffing ─────────────────────────────────────────────


class StaffingProfile(FrozenQuoteModel):
    """A priced staffing line (role × seniority × allocation)."""
    id: str = Field(default_factory=lambda: uuid.uuid4().hex[:12])
    role: str = ""  # human label, e.g. "Data Engineer"
    seniority: Seniority = Seniority.MED
    count: int = 1
    unit_price: float = 0.0  # monthly, seniority already applied
    allocation_percentage: int = 100
    source: ProfileSource = ProfileSource.CONFIRMED
    skills: str = ""
    rationale: str = ""

    @model_validator(mode="before")
    @classmethod
    def _source_from_manual_flag(cls, data: Any) -> Any:
        if not isinstance(data, dict) or "source" in data:
            return data
        for key in ("is_manual", "isManual"):
            if key in data:
                data = dict(data)
                manual = data.pop(key)
                data["source"] = (
                    ProfileSource.CONFIRMED if safe_bool(manual, True) else ProfileSource.SUGGESTED
                )
                break
        return data

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, v: Any) -> str:
        return safe_str(v) or uuid.uuid4().hex[:12]

    @field_validator("role", "skills", "rationale", mode="before")
    @classmethod
    def _coerce_text(cls, v: Any) -> str:
        return safe_str(v)

    @field_validator("source", mode="before")
    @classmethod
    def _parse_source(cls, v: Any) -> ProfileSource:
        return ProfileSource.parse(v, ProfileSource.CONFIRMED)

    @field_validator("seniority", mode="before")
    @classmethod
    def _parse_seniority(cls, v: Any) -> Seniority:
        return Seniority.parse(v, Seniority.MED)

    @field_validator("count", mode="before")
    @classmethod
    def _coerce_count(cls, v: Any) -> int:
        return safe_int(v)

    @field_validator("unit_price", mode="before")
    @classmethod
    def _coerce_price(cls, v: Any) -> float:
        return safe_float(v)

    @field_validator("allocation_percentage", mode="before")
    @classmethod
    def _coerce_allocation(cls, v: Any) -> int:
        return int(round(clamp_percentage(v)))

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_manual(self) -> bool:
        return self.source == ProfileSource.CONFIRMED

    @property
    def allocation_fraction(self) -> float:
        return self.allocation_percentage / 100.0


# ── Project specification ────────────────────────────────


class VolumetricMetrics(QuoteModel):
    """Volumetry of one service type (the form keeps one copy per type)."""
    pipelines: int = 0
    notebooks: int = 0
    dashboards: int = 0
    ds_models: int = 0
    data_sources: int = 0

    @field_validator("*", mode="before")
    @classmethod
    def _coerce_counts(cls, v: Any) -> int:
        return safe_int(v)


class CriticalityMatrix(QuoteModel):
    """Sustain criticality answers: six 1/3/5 dimensions plus scope fields."""
    operational_impact: int = 1
    financial_impact: int = 1
    data_exposure: int = 1
    process_criticality: int = 1
    regulatory_exposure: int = 1
    recovery_effort: int = 1

    markets_impacted: int = 1
    users_impacted: int = 0
    frequency: UsageFrequency = UsageFrequency.NONE
    critical_dates: str = ""
    has_manual_process: bool = False
    dependencies: str = ""  # comma-separated external systems

    @field_validator(
        "operational_impact",
        "financial_impact",
        "data_exposure",
        "process_criticality",
        "regulatory_exposure",
        "recovery_effort",
        mode="before",
    )
    @classmethod
    def _snap_dimension(cls, v: Any) -> int:
        raw = safe_float(v, 1.0)
        return min((1, 3, 5), key=lambda allowed: abs(allowed - raw))

    @field_validator("markets_impacted", "users_impacted", mode="before")
    @classmethod
    def _coerce_scope(cls, v: Any) -> int:
        return safe_int(v)

    @field_validator("critical_dates", "dependencies", mode="before")
    @classmethod
    def _coerce_text(cls, v: Any) -> str:
        return safe_str(v)

    @field_validator("has_manual_process", mode="before")
    @classmethod
    def _coerce_flag(cls, v: Any) -> bool:
        return safe_bool(v)

    @field_validator("frequency", mode="before")
    @classmethod
    def _parse_frequency(cls, v: Any) -> UsageFrequency:
        # Unknown labels fall into the top band, like "realtime"
        return UsageFrequency.parse(v, UsageFrequency.REALTIME)

    @property
    def dependency_tags(self) -> list[str]:
        return [t.strip() for t in (self.dependencies or "").split(",") if t.strip()]


class SustainOperations(QuoteModel):
    support_window: SupportWindow = SupportWindow.BUSINESS
    weekend_usage: bool = False
    has_hypercare: bool = False
    hypercare_period: str = ""

    @field_validator("support_window", mode="before")
    @classmethod
    def _parse_window(cls, v: Any) -> SupportWindow:
        return SupportWindow.parse(v, SupportWindow.COMBINED)

    @field_validator("weekend_usage", "has_hypercare", mode="before")
    @classmethod
    def _coerce_flags(cls, v: Any) -> bool:
        return safe_bool(v)

    @field_validator("hypercare_period", mode="before")
    @classmethod
    def _coerce_period(cls, v: Any) -> str:
        return safe_str(v)


class Duration(QuoteModel):
    value: float = 1.0
    unit: DurationUnit = DurationUnit.MONTHS

    @field_validator("value", mode="before")
    @classmethod
    def _coerce_value(cls, v: Any) -> float:
        return safe_float(v)

    @field_validator("unit", mode="before")
    @classmethod
    def _parse_unit(cls, v: Any) -> DurationUnit:
        return DurationUnit.parse(v, DurationUnit.MONTHS)

    @property
    def in_months(self) -> float:
        if self.unit == DurationUnit.WEEKS:
            return self.value / WEEKS_PER_MONTH
        if self.unit == DurationUnit.DAYS:
            return self.value / DAYS_PER_MONTH
        return self.value


class Retention(QuoteModel):
    enabled: bool = False
    percentage: float = 0.0

    @field_validator("enabled", mode="before")
    @classmethod
    def _coerce_enabled(cls, v: Any) -> bool:
        return safe_bool(v)

    @field_validator("percentage", mode="before")
    @classmethod
    def _clamp(cls, v: Any) -> float:
        return clamp_percentage(v)


class ProjectSpecification(QuoteModel):
    """
    The full mutable input of a quote.

    Exactly one service type is active; it decides which metric sub-tree
    the aggregator reads.
    """
    service_type: ServiceType = ServiceType.PROJECT
    complexity: Complexity = Complexity.MEDIUM
    duration: Duration = Field(default_factory=Duration)
    tech_stack: list[str] = Field(default_factory=list)

    # Legacy per-role counters (role key → headcount), Project only
    roles: dict[str, int] = Field(default_factory=dict)
    profiles: list[StaffingProfile] = Field(default_factory=list)

    project_metrics: VolumetricMetrics = Field(default_factory=VolumetricMetrics)
    staffing_metrics: VolumetricMetrics = Field(default_factory=VolumetricMetrics)
    sustain_metrics: VolumetricMetrics = Field(default_factory=VolumetricMetrics)

    criticality: CriticalityMatrix = Field(default_factory=CriticalityMatrix)
    operations: SustainOperations = Field(default_factory=SustainOperations)

    commercial_discount: float = 0.0
    retention: Retention = Field(default_factory=Retention)

    @field_validator("service_type", mode="before")
    @classmethod
    def _parse_service_type(cls, v: Any) -> ServiceType:
        return ServiceType.parse(v, ServiceType.PROJECT)

    @field_validator("complexity", mode="before")
    @classmethod
    def _parse_complexity(cls, v: Any) -> Complexity:
        return Complexity.parse(v, Complexity.MEDIUM)

    @model_validator(mode="before")
    @classmethod
    def _require_mapping(cls, data: Any) -> Any:
        if isinstance(data, (dict, BaseModel)):
            return data
        return {}

    @field_validator(
        "duration",
        "retention",
        "criticality",
        "operations",
        "project_metrics",
        "staffing_metrics",
        "sustain_metrics",
        mode="before",
    )
    @classmethod
    def _default_when_malformed(cls, v: Any, info: ValidationInfo) -> Any:
        if isinstance(v, (dict, BaseModel)):
            return v
        # A bare number for the duration is a month count
        if info.field_name == "duration" and safe_float(v) > 0:
            return {"value": v}
        return {}

    @field_validator("profiles", mode="before")
    @classmethod
    def _drop_unreadable_profiles(cls, v: Any) -> list[Any]:
        if not isinstance(v, (list, tuple)):
            return []
        return [p for p in v if isinstance(p, (dict, StaffingProfile))]

    @field_validator("tech_stack", mode="before")
    @classmethod
    def _dedupe_stack(cls, v: Any) -> list[str]:
        if isinstance(v, str):
            v = [v]
        if not isinstance(v, (list, tuple, set)):
            return []
        seen: list[str] = []
        for tech in v:
            key = safe_str(tech).lower()
            if key and key not in seen:
                seen.append(key)
        return seen

    @field_validator("roles", mode="before")
    @classmethod
    def _coerce_roles(cls, v: Any) -> dict[str, int]:
        if not isinstance(v, dict):
            return {}
        return {str(k): safe_int(c) for k, c in v.items()}

    @field_validator("commercial_discount", mode="before")
    @classmethod
    def _clamp_discount(cls, v: Any) -> float:
        return clamp_percentage(v)

    @property
    def active_metrics(self) -> VolumetricMetrics:
        if self.service_type == ServiceType.STAFFING:
            return self.staffing_metrics
        if self.service_type == ServiceType.SUSTAIN:
            return self.sustain_metrics
        return self.project_metrics


# ── Outputs ──────────────────────────────────────────────


class SustainSubScores(FrozenQuoteModel):
    pipelines: int = 0
    notebooks: int = 0
    dashboards: int = 0
    ds_models: int = 0
    manual_process: int = 0
    frequency: int = 0
    dependencies: int = 0

    def as_list(self) -> list[int]:
        return [
            self.pipelines,
            self.notebooks,
            self.dashboards,
            self.ds_models,
            self.manual_process,
            self.frequency,
            self.dependencies,
        ]


class SustainScore(FrozenQuoteModel):
    sub_scores: SustainSubScores = Field(default_factory=SustainSubScores)
    total: float = 0.0
    tier: SustainTier = SustainTier.PENDING
    tier_base_cost: float = 0.0

    @computed_field  # type: ignore[prop-decorator]
    @property
    def tier_label(self) -> str:
        return self.tier.value


class RoleLine(FrozenQuoteModel):
    """Priced role line. ``line_total`` is before any window/complexity modifier."""
    role: str
    role_key: str = ""
    seniority: Seniority = Seniority.MED
    count: int = 0
    allocation_percentage: int = 100
    unit_rate: float = 0.0
    line_total: float = 0.0
    rate_source: str = ""


class ServiceLine(FrozenQuoteModel):
    service: str
    count: int = 0
    unit_rate: float = 0.0
    line_total: float = 0.0
    rate_source: str = ""


class CostBreakdown(FrozenQuoteModel):
    """Priced result, all amounts in USD. Derived fresh on every computation."""
    service_type: ServiceType = ServiceType.PROJECT
    roles_cost: float = 0.0
    services_cost: float = 0.0
    l2_support_cost: float = 0.0
    risk_cost: float = 0.0
    gross_total: float = 0.0
    discount_amount: float = 0.0
    discounted_total: float = 0.0
    retention_amount: float = 0.0
    final_total: float = 0.0

    duration_in_months: float = 0.0
    hypercare_cost: float = 0.0
    total_project_cost: float = 0.0

    sustain_score: Optional[SustainScore] = None
    sustain_tier: Optional[SustainTier] = None

    role_lines: list[RoleLine] = Field(default_factory=list)
    service_lines: list[ServiceLine] = Field(default_factory=list)


# ── Persisted snapshot (input of the rate freezer) ───────


class PersistedLineItem(FrozenQuoteModel):
    role: str = ""
    seniority: Optional[str] = None
    count: float = 0.0
    allocation_percentage: float = 100.0
    total_line_cost: float = Field(
        default=0.0,
        validation_alias=AliasChoices(
            "total_line_cost", "totalLineCost", "line_total", "lineTotal", "cost"
        ),
    )

    @field_validator("count", "total_line_cost", mode="before")
    @classmethod
    def _coerce(cls, v: Any) -> float:
        return safe_float(v)

    @field_validator("allocation_percentage", mode="before")
    @classmethod
    def _clamp_allocation(cls, v: Any) -> float:
        if v is None:
            return 100.0
        return clamp_percentage(v)

    @field_validator("role", mode="before")
    @classmethod
    def _coerce_role(cls, v: Any) -> str:
        return safe_str(v)

    @field_validator("seniority", mode="before")
    @classmethod
    def _coerce_seniority(cls, v: Any) -> Optional[str]:
        return safe_str(v) or None


class QuoteSnapshot(FrozenQuoteModel):
    """What a saved quote keeps of its breakdown for later re-pricing."""
    role_lines: list[PersistedLineItem] = Field(default_factory=list)
    service_lines: list[PersistedLineItem] = Field(default_factory=list)

    @field_validator("role_lines", "service_lines", mode="before")
    @classmethod
    def _drop_unreadable_lines(cls, v: Any) -> list[Any]:
        if not isinstance(v, (list, tuple)):
            return []
        return [item for item in v if isinstance(item, (dict, PersistedLineItem))]

    @classmethod
    def from_breakdown(cls, breakdown: CostBreakdown) -> "QuoteSnapshot":
        return cls(
            role_lines=[
                PersistedLineItem(
                    role=line.role,
                    seniority=line.seniority.value,
                    count=line.count,
                    allocation_percentage=line.allocation_percentage,
                    total_line_cost=line.line_total,
                )
                for line in breakdown.role_lines
            ],
            service_lines=[
                PersistedLineItem(
                    role=line.service,
                    seniority=None,
                    count=line.count,
                    allocation_percentage=100,
                    total_line_cost=line.line_total,
                )
                for line in breakdown.service_lines
            ],
        )
