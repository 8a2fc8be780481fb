"""
Application configuration using Pydantic Settings.
All environment-specific values are centralized here.

Pricing constants (tier bases, banding tables, default rates) are NOT
settings: they live next to the code that uses them so that an env
override can never re-price a quote that was already issued.
"""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # ── App ──────────────────────────────────────────────
    app_name: str = "Quotation Pricing Engine"
    debug: bool = False

    # ── Presentation ─────────────────────────────────────
    default_currency: str = "USD"
    # Used when the caller supplies no live FX table
    fx_rates: dict[str, float] = Field(
        default_factory=lambda: {
            "USD": 1.0,
            "EUR": 0.92,
            "ARS": 1200.0,
            "MXN": 17.50,
            "COP": 3900.0,
            "CLP": 980.0,
        }
    )

    # ── Engine ───────────────────────────────────────────
    breakdown_cache_size: int = 256

    # ── API ──────────────────────────────────────────────
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # ── Logging ──────────────────────────────────────────
    log_level: str = "INFO"
    # Level for rate-resolution fallbacks; defaults to log_level
    engine_log_level: Optional[str] = None

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }


@lru_cache()
def get_settings() -> Settings:
    """Return cached application settings (singleton)."""
    return Settings()
