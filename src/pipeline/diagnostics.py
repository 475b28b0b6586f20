"""
Parse Diagnostics

Append-only collection of processed files, row counts and warnings for one
parse invocation, plus a readable report of the result.
"""

import logging

from src.models.entities import ParsedPayload, ParseSummary

logger = logging.getLogger(__name__)


class DiagnosticsAggregator:
    """Collects per-file diagnostics. Nothing recorded here aborts a parse."""

    def __init__(self):
        self._files: list[str] = []
        self._rows: dict[str, int] = {}
        self._warnings: list[str] = []

    def record_file(self, label: str, row_count: int) -> None:
        """Record a processed file under its canonical label."""
        self._files.append(label)
        self._rows[label] = self._rows.get(label, 0) + row_count

    def warn(self, message: str) -> None:
        logger.debug(message)
        self._warnings.append(message)

    def extend(self, messages: list[str]) -> None:
        for message in messages:
            self.warn(message)

    @property
    def files_processed(self) -> int:
        return len(self._files)

    def summary(self) -> ParseSummary:
        """Snapshot of everything recorded so far."""
        return ParseSummary(
            files_processed=list(self._files),
            rows=dict(self._rows),
            warnings=list(self._warnings),
        )


def log_parser_diagnostics(payload: ParsedPayload, max_warnings: int = 10) -> None:
    """Log a diagnostics report: files, row counts, first warnings, totals."""
    summary = payload.summary

    logger.info("Parser diagnostics report")

    if summary.files_processed:
        for index, label in enumerate(summary.files_processed, 1):
            logger.info(f"  file {index}: {label}")
    else:
        logger.info("  no files processed")

    for label, count in summary.rows.items():
        logger.info(f"  {label}: {count} rows")

    for warning in summary.warnings[:max_warnings]:
        logger.info(f"  warning: {warning}")
    if len(summary.warnings) > max_warnings:
        logger.info(f"  ... and {len(summary.warnings) - max_warnings} more warnings")

    counts = payload.record_counts()
    logger.info(
        f"Final counts: {counts['contacts']} contacts, "
        f"{counts['messages']} messages, "
        f"{counts['invites']} invitations, "
        f"{counts['company_follows']} company follows, "
        f"{counts['saved_jobs']} saved jobs"
    )
