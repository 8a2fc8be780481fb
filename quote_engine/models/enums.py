from __future__ import annotations

from enum import Enum
from typing import Any, Optional


class LenientEnum(str, Enum):
    """String enum that parses case-insensitively and through aliases."""

    @classmethod
    def _aliases(cls) -> dict[str, str]:
        return {}

    @classmethod
    def parse(cls, value: Any, default: Optional["LenientEnum"] = None):
        if isinstance(value, cls):
            return value
        text = str(value or "").strip().lower()
        for member in cls:
            if member.value.lower() == text or member.name.lower() == text:
                return member
        alias = cls._aliases().get(text)
        if alias is not None:
            return cls(alias)
        return default


class ServiceType(LenientEnum):
    PROJECT = "Project"
    STAFFING = "Staffing"
    SUSTAIN = "Sustain"


class Complexity(LenientEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @classmethod
    def _aliases(cls) -> dict[str, str]:
        return {"baja": "low", "media": "medium", "alta": "high"}


class Seniority(LenientEnum):
    JR = "Jr"
    MED = "Med"
    SR = "Sr"
    EXPERT = "Expert"

    @classmethod
    def _aliases(cls) -> dict[str, str]:
        return {
            "trainee": "Jr",
            "junior": "Jr",
            "ssr": "Med",
            "semisenior": "Med",
            "mid": "Med",
            "senior": "Sr",
            "lead": "Expert",
            "manager": "Expert",
        }


class DurationUnit(LenientEnum):
    DAYS = "days"
    WEEKS = "weeks"
    MONTHS = "months"


class UsageFrequency(LenientEnum):
    NONE = "none"
    MONTHLY = "monthly"
    WEEKLY = "weekly"
    DAILY = "daily"
    REALTIME = "realtime"

    @classmethod
    def _aliases(cls) -> dict[str, str]:
        return {"hourly": "realtime", "real-time": "realtime", "": "none"}


class SupportWindow(LenientEnum):
    BUSINESS = "business"
    FULL = "24/7"
    COMBINED = "combined"

    @classmethod
    def _aliases(cls) -> dict[str, str]:
        return {"9x5": "business", "24x7": "24/7", "custom": "combined"}


class SustainTier(str, Enum):
    PENDING = "PENDING"
    S1 = "S1"
    S2 = "S2"
    S3 = "S3"
    PREMIUM = "PREMIUM"


class ProfileSource(LenientEnum):
    """Provenance of a staffing line: auto-suggested or human-confirmed."""
    SUGGESTED = "SUGGESTED"
    CONFIRMED = "CONFIRMED"


class StaffingDomain(str, Enum):
    DATA = "data"
    VIS = "vis"
    SCI = "sci"
