"""
Data Processing Pipeline

Components for extracting, reading and normalizing LinkedIn export files.
"""

from src.pipeline.ingest import FileBlob, extract_archive, read_table
from src.pipeline.headers import FILE_SCHEMAS, resolve_table
from src.pipeline.parse import parse_files, parse_files_async, parse_into_store
from src.pipeline.diagnostics import DiagnosticsAggregator, log_parser_diagnostics

__all__ = [
    "FileBlob",
    "extract_archive",
    "read_table",
    "FILE_SCHEMAS",
    "resolve_table",
    "parse_files",
    "parse_files_async",
    "parse_into_store",
    "DiagnosticsAggregator",
    "log_parser_diagnostics",
]
