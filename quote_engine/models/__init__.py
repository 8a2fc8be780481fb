"""Models — enums and pydantic data contracts of the pricing engine."""

from quote_engine.models.enums import (
    Complexity,
    DurationUnit,
    ProfileSource,
    Seniority,
    ServiceType,
    StaffingDomain,
    SupportWindow,
    SustainTier,
    UsageFrequency,
)
from quote_engine.models.schemas import (
    CostBreakdown,
    CriticalityMatrix,
    Duration,
    PersistedLineItem,
    ProjectSpecification,
    QuoteSnapshot,
    RateCatalogEntry,
    Retention,
    RoleLine,
    ServiceLine,
    StaffingProfile,
    SustainOperations,
    SustainScore,
    SustainSubScores,
    VolumetricMetrics,
)

__all__ = [
    "Complexity",
    "DurationUnit",
    "ProfileSource",
    "Seniority",
    "ServiceType",
    "StaffingDomain",
    "SupportWindow",
    "SustainTier",
    "UsageFrequency",
    "CostBreakdown",
    "CriticalityMatrix",
    "Duration",
    "PersistedLineItem",
    "ProjectSpecification",
    "QuoteSnapshot",
    "RateCatalogEntry",
    "Retention",
    "RoleLine",
    "ServiceLine",
    "StaffingProfile",
    "SustainOperations",
    "SustainScore",
    "SustainSubScores",
    "VolumetricMetrics",
]
