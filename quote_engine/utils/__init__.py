"""Utilities — logging setup, hashing, numeric coercion."""

from quote_engine.utils.hashing import fingerprint, sha256_hash
from quote_engine.utils.logger import setup_logging
from quote_engine.utils.numbers import clamp_percentage, safe_bool, safe_float, safe_int, safe_str

__all__ = [
    "fingerprint",
    "sha256_hash",
    "setup_logging",
    "clamp_percentage",
    "safe_float",
    "safe_int",
    "safe_bool",
    "safe_str",
]
