"""
API routes — thin HTTP layer that delegates to the QuotationEngine.

Routes:
  GET  /health                                → API health check
  POST /api/quote/breakdown                   → Price a specification
  POST /api/quote/sustain-score               → Criticality score + tier
  POST /api/quote/staffing/reconcile          → Auto-staffing suggestions
  POST /api/quote/rate                        → Resolve one unit rate
  POST /api/quote/freeze                      → Frozen rate index of a snapshot
  GET  /api/quote/roles/{role_key}/seniorities → Levels a role can be staffed at

Every request carries its own catalog / snapshot: the engine keeps no
state between calls.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional, Union

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from quote_engine.config import get_settings
from quote_engine.engine import QuotationEngine, build_frozen_index
from quote_engine.knowledge.roles import find_role

logger = logging.getLogger(__name__)

# ── Routers ──────────────────────────────────────────────
health_router = APIRouter()
quote_router = APIRouter()


# ── Request schemas ──────────────────────────────────────
class BreakdownRequest(BaseModel):
    spec: dict[str, Any] = Field(default_factory=dict)
    catalog: list[Any] = Field(default_factory=list)
    snapshot: Optional[Union[dict[str, Any], list[dict[str, Any]]]] = None
    currency: Optional[str] = None
    annual: bool = False


class SpecRequest(BaseModel):
    spec: dict[str, Any] = Field(default_factory=dict)
    catalog: list[Any] = Field(default_factory=list)


class RateRequest(BaseModel):
    service_name: str
    level: str = ""
    catalog: list[Any] = Field(default_factory=list)
    snapshot: Optional[Union[dict[str, Any], list[dict[str, Any]]]] = None


class FreezeRequest(BaseModel):
    snapshot: Union[dict[str, Any], list[dict[str, Any]]] = Field(default_factory=dict)


# ── Health ───────────────────────────────────────────────

@health_router.get("/health")
async def health_check():
    settings = get_settings()
    return {
        "status": "ok",
        "app": settings.app_name,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


# ── Pricing ──────────────────────────────────────────────

@quote_router.post("/breakdown")
async def price_quote(request: BreakdownRequest):
    engine = QuotationEngine(catalog=request.catalog, snapshot=request.snapshot)
    breakdown = engine.breakdown(request.spec)
    logger.info(
        f"Priced {breakdown.service_type.value} quote: final={breakdown.final_total:.2f} USD"
        f"{' (historical)' if engine.historical else ''}"
    )
    return {
        "breakdown": breakdown.model_dump(mode="json"),
        "display": engine.present(breakdown, request.currency, annual=request.annual),
        "snapshot": engine.snapshot(breakdown).model_dump(mode="json"),
    }


@quote_router.post("/sustain-score")
async def sustain_score(request: SpecRequest):
    score = QuotationEngine().sustain_score(request.spec)
    return score.model_dump(mode="json")


@quote_router.post("/staffing/reconcile")
async def reconcile_staffing(request: SpecRequest):
    engine = QuotationEngine(catalog=request.catalog)
    profiles = engine.reconcile_staffing(request.spec)
    return {"profiles": [p.model_dump(mode="json") for p in profiles]}


@quote_router.post("/rate")
async def resolve_rate(request: RateRequest):
    engine = QuotationEngine(catalog=request.catalog, snapshot=request.snapshot)
    return {
        "service_name": request.service_name,
        "level": request.level,
        "rate": engine.resolve_rate(request.service_name, request.level),
    }


@quote_router.post("/freeze")
async def freeze_rates(request: FreezeRequest):
    index = build_frozen_index(request.snapshot)
    return {"rates": index.as_dict()}


@quote_router.get("/roles/{role_key}/seniorities")
async def role_seniorities(role_key: str):
    role = find_role(role_key)
    if role is None:
        raise HTTPException(status_code=404, detail=f"Unknown role: {role_key}")
    return {
        "role": role.label,
        "options": QuotationEngine().seniority_options(role.label),
    }
