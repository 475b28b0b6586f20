"""Parser exception hierarchy.

Fatal-to-file errors are caught by the orchestrator and become warnings.
Operation-level errors reach the caller.
"""


class ParserError(Exception):
    """Base exception for all parser failures."""


class ConfigError(ParserError):
    """Raised for invalid runtime configuration."""


class ArchiveError(ParserError):
    """Raised when a ZIP archive cannot be opened."""


class TableReadError(ParserError):
    """Raised when CSV or spreadsheet content cannot be read."""


class NoUsableFilesError(ParserError):
    """Raised when an invocation yields no readable export file."""


class ParseTimeoutError(ParserError):
    """Raised when a parse does not finish within its timeout."""
