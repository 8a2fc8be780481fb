"""
Hashing utilities for cache keys and quote fingerprints.
"""

from __future__ import annotations

import hashlib
import json
from typing import Any


def sha256_hash(content: str | bytes) -> str:
    """Return the SHA-256 hex digest of the given content."""
    if isinstance(content, str):
        content = content.encode("utf-8")
    return hashlib.sha256(content).hexdigest()


def fingerprint(*parts: Any) -> str:
    """Stable digest of JSON-serialisable parts (dict key order ignored)."""
    payload = json.dumps(parts, sort_keys=True, default=str, separators=(",", ":"))
    return sha256_hash(payload)
