"""Centralized logging configuration.
Call setup_logging() once at application startup.

The pricing core logs every catalog miss and default fallback at DEBUG;
``engine_level`` lets those through without turning the whole process
(uvicorn included) up to DEBUG.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

ENGINE_LOGGER = "quote_engine.engine"


def _level(name: Optional[str], fallback: int) -> int:
    return getattr(logging, (name or "").upper(), fallback)


def setup_logging(level: str = "INFO", engine_level: Optional[str] = None) -> None:
    """Configure logging for the CLI and the API server."""
    root = logging.getLogger()
    if root.handlers:
        return

    resolved = _level(level, logging.INFO)
    root.setLevel(resolved)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s │ %(levelname)-8s │ %(name)s:%(lineno)d │ %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    root.addHandler(handler)

    logging.getLogger(ENGINE_LOGGER).setLevel(_level(engine_level, resolved))

    for noisy in ("httpx", "httpcore", "uvicorn.access"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
