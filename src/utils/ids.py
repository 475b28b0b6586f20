"""
Stable Identifiers

Deterministic, platform-independent record identifiers.
"""

import hashlib

ID_LENGTH = 16  # hex chars, 64 bits


def stable_id(*parts: str) -> str:
    """Generate a deterministic ID from pipe-joined parts.

    Uses a truncated SHA-256 digest so the output is identical on every
    platform and interpreter.
    """
    key = "|".join(parts)
    return hashlib.sha256(key.encode("utf-8")).hexdigest()[:ID_LENGTH]
