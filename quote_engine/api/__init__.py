"""
FastAPI application factory and API package.

Run with:
    uvicorn quote_engine.api:app --reload --port 8000

Or via main.py:
    python -m quote_engine --serve
"""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from quote_engine.config import get_settings
from quote_engine.api.routes import health_router, quote_router

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Application factory — create and configure the FastAPI instance."""
    settings = get_settings()

    application = FastAPI(
        title="Quotation Pricing API",
        description="Pricing, sustain scoring and staffing suggestions for IT-services quotes",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # The quote form is served from another origin
    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.include_router(health_router, tags=["Health"])
    application.include_router(quote_router, prefix="/api/quote", tags=["Quote"])

    logger.info(f"Created {settings.app_name} API")
    return application


# Module-level instance for `uvicorn quote_engine.api:app`
app = create_app()
