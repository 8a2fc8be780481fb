"""
Quotation Pricing Engine — Main Entry Point

Price a quote from JSON files (CLI):
    python -m quote_engine spec.json --catalog rates.json --currency EUR

Re-price an issued quote with its frozen rates:
    python -m quote_engine spec.json --catalog rates.json --snapshot saved.json

Run as an API server:
    python -m quote_engine --serve
    # or: uvicorn quote_engine.api:app --reload --port 8000

Or import and run programmatically:
    from quote_engine.main import run
    result = run("path/to/spec.json")
"""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any, Optional

from quote_engine.config import get_settings
from quote_engine.engine import QuotationEngine
from quote_engine.utils.logger import setup_logging


def _load_json(path: str, what: str) -> Any:
    if not path:
        raise ValueError(f"No {what} path provided")
    file_path = Path(path)
    if not file_path.exists():
        raise FileNotFoundError(f"{what.capitalize()} file not found: {path}")
    return json.loads(file_path.read_text(encoding="utf-8"))


def run(
    spec_path: str = "",
    catalog_path: Optional[str] = None,
    snapshot_path: Optional[str] = None,
    currency: Optional[str] = None,
    annual: bool = False,
) -> dict:
    """Price one specification and return the breakdown as a dict."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.engine_log_level)
    logger = logging.getLogger(__name__)

    spec = _load_json(spec_path, "specification")
    catalog = _load_json(catalog_path, "catalog") if catalog_path else []
    snapshot = _load_json(snapshot_path, "snapshot") if snapshot_path else None

    engine = QuotationEngine(catalog=catalog, snapshot=snapshot)
    breakdown = engine.breakdown(spec)
    display = engine.present(breakdown, currency, annual=annual)

    logger.info("=" * 60)
    logger.info(f"  {settings.app_name.upper()}")
    logger.info(f"  Mode: {'HISTORICAL (frozen rates)' if engine.historical else 'LIVE'}")
    logger.info("=" * 60)
    _print_summary(breakdown.model_dump(mode="json"), display)

    return breakdown.model_dump(mode="json")


def _print_summary(breakdown: dict, display: dict) -> None:
    """Print a human-readable summary of the priced quote."""
    logger = logging.getLogger(__name__)
    fmt = display.get("formatted", {})

    logger.info("")
    logger.info("-" * 60)
    logger.info(f"  QUOTE SUMMARY ({display.get('period', 'monthly')}, {display.get('currency', 'USD')})")
    logger.info("-" * 60)
    logger.info(f"  Service type:   {breakdown.get('service_type', 'N/A')}")
    if breakdown.get("sustain_score"):
        score = breakdown["sustain_score"]
        logger.info(f"  Sustain score:  {score.get('total')} → {score.get('tier_label')}")
    logger.info(f"  Roles:          {fmt.get('roles_cost')}")
    logger.info(f"  Services:       {fmt.get('services_cost')}")
    if breakdown.get("l2_support_cost"):
        logger.info(f"  L2 support:     {fmt.get('l2_support_cost')}")
    if breakdown.get("risk_cost"):
        logger.info(f"  Risk/weekend:   {fmt.get('risk_cost')}")
    if breakdown.get("discount_amount"):
        logger.info(f"  Discount:       -{fmt.get('discount_amount')}")
    if breakdown.get("retention_amount"):
        logger.info(f"  Retention:      -{fmt.get('retention_amount')}")
    logger.info(f"  Final:          {fmt.get('final_total')}")
    if breakdown.get("hypercare_cost"):
        logger.info(f"  Hypercare:      {fmt.get('hypercare_cost')}")
    logger.info(
        f"  Project total:  {fmt.get('total_project_cost')} "
        f"over {breakdown.get('duration_in_months', 0):.2f} months"
    )

    lines = breakdown.get("role_lines", [])
    logger.info(f"\n  Role lines: {len(lines)}")
    for line in lines:
        logger.info(
            f"    {line.get('role')} {line.get('seniority')} × {line.get('count')} "
            f"@ {line.get('allocation_percentage')}% | {line.get('rate_source')}"
        )
    logger.info("")


def serve(host: Optional[str] = None, port: Optional[int] = None) -> None:
    """Start the FastAPI server."""
    import uvicorn

    settings = get_settings()
    setup_logging(settings.log_level, settings.engine_log_level)
    logger = logging.getLogger(__name__)
    host = host or settings.api_host
    port = port or settings.api_port
    logger.info(f"Starting API server on {host}:{port}")
    uvicorn.run("quote_engine.api:app", host=host, port=port, reload=settings.debug)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="quote_engine", description="Price an IT-services quote")
    parser.add_argument("spec", nargs="?", default="", help="Project specification JSON file")
    parser.add_argument("--catalog", help="Rate catalog JSON file (list of entries)")
    parser.add_argument("--snapshot", help="Persisted quote snapshot JSON (historical mode)")
    parser.add_argument("--currency", help="Display currency code, e.g. EUR")
    parser.add_argument("--annual", action="store_true", help="Show recurring figures × 12")
    parser.add_argument("--serve", action="store_true", help="Run the HTTP API instead")
    return parser


def main(argv: Optional[list[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    if args.serve:
        serve()
    else:
        run(args.spec, args.catalog, args.snapshot, args.currency, args.annual)


if __name__ == "__main__":
    main()
