"""
Technology → role suggestion table used by auto-staffing.

A suggestion without a domain is informational only: it never creates or
rebalances a staffing line.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel

from quote_engine.models.enums import Seniority, StaffingDomain


class RoleSuggestion(BaseModel):
    role: str  # label, must exist in ROLE_CONFIG
    seniority: Seniority
    rationale: str = ""
    domain: Optional[StaffingDomain] = None


TECH_SUGGESTIONS: dict[str, list[RoleSuggestion]] = {
    "azure": [
        RoleSuggestion(role="Data Engineer", seniority=Seniority.MED,
                       rationale="Azure Data Factory pipeline maintenance",
                       domain=StaffingDomain.DATA),
        RoleSuggestion(role="Azure Developer", seniority=Seniority.MED,
                       rationale="Azure resource and integration runtime upkeep"),
    ],
    "databricks": [
        RoleSuggestion(role="Data Engineer", seniority=Seniority.SR,
                       rationale="Spark jobs and notebook operations",
                       domain=StaffingDomain.DATA),
    ],
    "synapse": [
        RoleSuggestion(role="Data Engineer", seniority=Seniority.SR,
                       rationale="Synapse pipelines and SQL pools",
                       domain=StaffingDomain.DATA),
        RoleSuggestion(role="BI Data Architect", seniority=Seniority.SR,
                       rationale="Warehouse model governance"),
    ],
    "snowflake": [
        RoleSuggestion(role="Data Engineer", seniority=Seniority.MED,
                       rationale="Snowflake ingestion and cost monitoring",
                       domain=StaffingDomain.DATA),
    ],
    "fabric": [
        RoleSuggestion(role="Data Engineer", seniority=Seniority.MED,
                       rationale="Fabric lakehouse and dataflows",
                       domain=StaffingDomain.DATA),
        RoleSuggestion(role="BI Visualization Developer", seniority=Seniority.MED,
                       rationale="Fabric semantic models and reports",
                       domain=StaffingDomain.VIS),
    ],
    "powerbi": [
        RoleSuggestion(role="BI Visualization Developer", seniority=Seniority.MED,
                       rationale="Power BI report fixes and refresh monitoring",
                       domain=StaffingDomain.VIS),
    ],
    "tableau": [
        RoleSuggestion(role="BI Visualization Developer", seniority=Seniority.SR,
                       rationale="Tableau workbook maintenance",
                       domain=StaffingDomain.VIS),
    ],
    "python": [
        RoleSuggestion(role="Data Engineer", seniority=Seniority.MED,
                       rationale="Airflow DAGs and Python jobs",
                       domain=StaffingDomain.DATA),
        RoleSuggestion(role="Data Scientist", seniority=Seniority.MED,
                       rationale="Model retraining and drift checks",
                       domain=StaffingDomain.SCI),
    ],
    "azure_ml": [
        RoleSuggestion(role="Data Scientist", seniority=Seniority.SR,
                       rationale="Azure ML endpoints and retraining",
                       domain=StaffingDomain.SCI),
    ],
    "power_apps": [
        RoleSuggestion(role="Low Code Developer", seniority=Seniority.MED,
                       rationale="Power Apps and Power Automate flows"),
    ],
}


def suggestions_for(tech_id: str) -> list[RoleSuggestion]:
    return TECH_SUGGESTIONS.get((tech_id or "").strip().lower(), [])
