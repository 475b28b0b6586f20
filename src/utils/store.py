"""
Parsed Result Store

Caller-owned handle holding the latest ParsedPayload in process memory.
"""

import logging
import threading
from typing import Any, Optional

from src.models.entities import ParsedPayload
from src.pipeline.diagnostics import log_parser_diagnostics

logger = logging.getLogger(__name__)


class ParsedDataStore:
    """Holds at most one ParsedPayload.

    Each set() replaces the previous payload wholesale; payloads are never
    merged or patched.
    """

    def __init__(self, max_warnings_reported: int = 10):
        """Initialize an empty store.

        Args:
            max_warnings_reported: Warnings included in the diagnostics
                report logged on every set()
        """
        self.max_warnings_reported = max_warnings_reported
        self._payload: Optional[ParsedPayload] = None
        self._lock = threading.Lock()

    def set(self, payload: ParsedPayload) -> None:
        """Replace the stored payload."""
        with self._lock:
            self._payload = payload
        logger.debug(f"Stored payload: {payload.record_counts()}")
        log_parser_diagnostics(payload, max_warnings=self.max_warnings_reported)

    def get(self) -> Optional[ParsedPayload]:
        """Return the stored payload, or None if empty."""
        with self._lock:
            return self._payload

    def clear(self) -> None:
        """Drop the stored payload."""
        with self._lock:
            self._payload = None
        logger.debug("Parsed data cleared")

    @property
    def has_data(self) -> bool:
        return self.get() is not None

    def stats(self) -> dict[str, Any]:
        """Record counts of the stored payload."""
        payload = self.get()
        if payload is None:
            return {"has_data": False}
        return {"has_data": True, **payload.record_counts()}
