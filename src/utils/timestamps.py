"""
Timestamp Normalization

Converts the assorted date formats found in LinkedIn exports to canonical
UTC instants ("2024-01-02T10:00:00.000Z") or the empty sentinel "".
"""

import logging
import re
from typing import Optional

import pandas as pd

logger = logging.getLogger(__name__)

_UTC_SUFFIX = re.compile(r"\s+UTC$", re.IGNORECASE)
_DIGIT = re.compile(r"\d")
# pandas resolves these against the wall clock
_RELATIVE_WORDS = re.compile(r"\b(now|today|tomorrow|yesterday)\b", re.IGNORECASE)

UNKNOWN_DAY = "unknown"


def normalize_timestamp(date_str: Optional[str]) -> str:
    """Parse a date string to a canonical UTC instant.

    Naive inputs are taken as UTC, inputs with an offset are converted.

    Returns:
        ISO 8601 string with millisecond precision and a "Z" designator,
        or "" when the input is empty or unparseable.
    """
    if date_str is None or pd.isna(date_str):
        return ""

    clean = _UTC_SUFFIX.sub("", str(date_str)).strip()
    if not clean:
        return ""

    if not _DIGIT.search(clean) or _RELATIVE_WORDS.search(clean):
        logger.debug(f"Ignoring non-absolute date: {clean}")
        return ""

    try:
        parsed = pd.to_datetime(clean, utc=True)
    except (ValueError, TypeError, OverflowError):
        logger.debug(f"Could not parse date: {clean}")
        return ""

    if pd.isna(parsed):
        return ""

    return parsed.strftime("%Y-%m-%dT%H:%M:%S.") + f"{parsed.microsecond // 1000:03d}Z"


def day_bucket(timestamp: str) -> str:
    """UTC calendar date of a canonical instant, or "unknown"."""
    if not timestamp:
        return UNKNOWN_DAY
    return timestamp.split("T", 1)[0]


def timestamp_warning(label: str, raw: str, parsed: str) -> Optional[str]:
    """Warning for a non-empty date that failed to parse, else None."""
    if raw and not parsed:
        return f'{label}: Could not parse date "{raw}"'
    return None
