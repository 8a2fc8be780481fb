"""
Currency Presenter — display-time conversion of USD amounts.

The priced model is always USD. Conversion happens only when a figure is
shown, so FX drift can never leak into a stored quote. A missing table,
or a currency missing from it, degrades to the fallback table / a 1.0
multiplier instead of failing.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from quote_engine.config import get_settings
from quote_engine.models.schemas import CostBreakdown
from quote_engine.utils.numbers import safe_float

MONEY_FIELDS = (
    "roles_cost",
    "services_cost",
    "l2_support_cost",
    "risk_cost",
    "gross_total",
    "discount_amount",
    "discounted_total",
    "retention_amount",
    "final_total",
    "hypercare_cost",
    "total_project_cost",
)

# Project-wide figures are not multiplied again in the annual view
ONE_OFF_FIELDS = ("hypercare_cost", "total_project_cost")


def _rate_table(rate_table: Optional[Mapping[str, float]]) -> Mapping[str, float]:
    return rate_table if rate_table else get_settings().fx_rates


def exchange_rate(currency_code: str, rate_table: Optional[Mapping[str, float]] = None) -> float:
    code = (currency_code or "USD").strip().upper()
    rate = safe_float(_rate_table(rate_table).get(code, 1.0), 1.0)
    return rate if rate > 0 else 1.0


def convert(
    amount_usd: float,
    currency_code: str,
    rate_table: Optional[Mapping[str, float]] = None,
) -> float:
    return amount_usd * exchange_rate(currency_code, rate_table)


def format_amount(
    amount_usd: float,
    currency_code: str,
    rate_table: Optional[Mapping[str, float]] = None,
) -> str:
    """'EUR 1,234.56': ISO code first, two decimals, thousands separators."""
    code = (currency_code or "USD").strip().upper()
    value = convert(amount_usd, code, rate_table)
    sign = "-" if value < 0 else ""
    return f"{sign}{code} {abs(value):,.2f}"


def present_breakdown(
    breakdown: CostBreakdown,
    currency_code: str,
    rate_table: Optional[Mapping[str, float]] = None,
    annual: bool = False,
) -> dict[str, Any]:
    """
    Converted copy of the monetary figures of a breakdown.

    ``annual`` shows recurring figures × 12. The breakdown itself is not
    touched.
    """
    code = (currency_code or "USD").strip().upper()
    rate = exchange_rate(code, rate_table)
    amounts: dict[str, float] = {}
    formatted: dict[str, str] = {}
    for field in MONEY_FIELDS:
        usd = getattr(breakdown, field)
        if annual and field not in ONE_OFF_FIELDS:
            usd *= 12
        amounts[field] = round(usd * rate, 2)
        formatted[field] = format_amount(usd, code, {code: rate})
    return {
        "currency": code,
        "exchange_rate": rate,
        "period": "annual" if annual else "monthly",
        "amounts": amounts,
        "formatted": formatted,
    }
