"""
Role configuration table.

The default monthly prices are the "Med" rates of the seed catalog; they
price a role whenever the live catalog has nothing for it.
"""

from __future__ import annotations

import re
from typing import Optional

from pydantic import BaseModel

from quote_engine.models.enums import Seniority


class RoleConfig(BaseModel):
    key: str
    label: str
    base_price: float  # monthly USD at Med seniority


ROLE_CONFIG: dict[str, RoleConfig] = {
    cfg.key: cfg
    for cfg in (
        RoleConfig(key="bi_visualization_developer", label="BI Visualization Developer", base_price=4128.70),
        RoleConfig(key="azure_developer", label="Azure Developer", base_price=4128.70),
        RoleConfig(key="solution_architect", label="Solution Architect", base_price=5308.33),
        RoleConfig(key="bi_data_architect", label="BI Data Architect", base_price=5308.33),
        RoleConfig(key="data_engineer", label="Data Engineer", base_price=4954.44),
        RoleConfig(key="data_scientist", label="Data Scientist", base_price=5190.37),
        RoleConfig(key="data_operations_analyst", label="Data / Operations Analyst", base_price=3538.89),
        RoleConfig(key="project_product_manager", label="Project / Product Manager", base_price=5308.33),
        RoleConfig(key="business_analyst", label="Business Analyst", base_price=4128.70),
        RoleConfig(key="low_code_developer", label="Low Code Developer", base_price=3538.00),
        RoleConfig(key="power_app_streamlit_developer", label="Power App / Streamlit Developer", base_price=3538.00),
    )
}

SENIORITY_MULTIPLIERS: dict[Seniority, float] = {
    Seniority.JR: 0.7,
    Seniority.MED: 1.0,
    Seniority.SR: 1.3,
    Seniority.EXPERT: 1.5,
}

# Display order of catalog levels; anything unknown sorts last
LEVEL_ORDER = [
    "trainee", "jr", "junior", "ssr", "semisenior", "med",
    "sr", "senior", "expert", "lead", "manager",
]


def role_key_for(name: str) -> str:
    """'Data / Operations Analyst' -> 'data_operations_analyst'."""
    return re.sub(r"[^a-z0-9]+", "_", (name or "").lower()).strip("_")


def find_role(name: str) -> Optional[RoleConfig]:
    """Look a role up by key or by label, case-insensitively."""
    # Keys are derived from labels, so one normalisation covers both
    return ROLE_CONFIG.get(role_key_for(name))


def level_rank(level: str) -> int:
    text = (level or "").strip().lower()
    return LEVEL_ORDER.index(text) if text in LEVEL_ORDER else 99
