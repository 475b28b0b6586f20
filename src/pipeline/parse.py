"""
Parse Orchestration

Runs file blobs through extraction, reading, header resolution and
normalization, and assembles one ParsedPayload per invocation.
"""

import asyncio
import logging
import threading
from typing import TYPE_CHECKING, Callable, Iterable, Optional

from src.models.entities import ParsedPayload
from src.pipeline.diagnostics import DiagnosticsAggregator
from src.pipeline.errors import (
    ArchiveError,
    NoUsableFilesError,
    ParseTimeoutError,
    TableReadError,
)
from src.pipeline.headers import DEFAULT_SCAN_ROWS, ResolvedTable, resolve_table
from src.pipeline.ingest import (
    COMPANY_FOLLOWS,
    CONNECTIONS,
    INVITATIONS,
    JOB_APPLICATIONS,
    MESSAGES,
    SAVED_JOBS,
    SUPPORTED_EXTENSIONS,
    FileBlob,
    classify_file,
    extract_archive,
    is_auxiliary_messages,
    read_table,
)
from src.pipeline.normalize import (
    normalize_company_follows,
    normalize_contacts,
    normalize_invites,
    normalize_messages,
    normalize_saved_jobs,
)

if TYPE_CHECKING:
    from src.utils.store import ParsedDataStore

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 60.0

Normalizer = Callable[[ResolvedTable], tuple[list, list[str]]]

# label -> (payload collection, normalizer)
ROUTES: dict[str, tuple[str, Normalizer]] = {
    CONNECTIONS: ("contacts", normalize_contacts),
    MESSAGES: ("messages", normalize_messages),
    INVITATIONS: ("invites", normalize_invites),
    COMPANY_FOLLOWS: ("company_follows", normalize_company_follows),
    SAVED_JOBS: ("saved_jobs", normalize_saved_jobs),
    JOB_APPLICATIONS: ("saved_jobs", normalize_saved_jobs),
}


def _collect_sources(
    blobs: Iterable[FileBlob],
    diagnostics: DiagnosticsAggregator,
    extensions: tuple[str, ...],
) -> list[tuple[str, bytes]]:
    """Expand archives and filter standalone files to readable exports."""
    sources: list[tuple[str, bytes]] = []

    for blob in blobs:
        if blob.is_archive:
            try:
                extraction = extract_archive(blob, extensions)
            except ArchiveError as e:
                logger.warning(str(e))
                diagnostics.warn(str(e))
                continue
            diagnostics.extend(extraction.warnings)
            sources.extend((entry.path, entry.content) for entry in extraction.entries)
            continue

        if is_auxiliary_messages(blob.name):
            diagnostics.warn(f"Ignoring auxiliary messages file {blob.name}")
            continue
        if classify_file(blob.name) is None:
            diagnostics.warn(f"Unrecognized file: {blob.name}")
            continue
        if blob.extension not in extensions:
            diagnostics.warn(f"Unsupported file format: {blob.name}")
            continue

        sources.append((blob.name, blob.content))

    return sources


def parse_files(
    blobs: Iterable[FileBlob],
    header_scan_rows: int = DEFAULT_SCAN_ROWS,
    extensions: tuple[str, ...] = SUPPORTED_EXTENSIONS,
) -> ParsedPayload:
    """Parse export files into a fresh ParsedPayload.

    Files are processed strictly in order. Problems with a single file or row
    become warnings in the payload summary.

    Args:
        blobs: ZIP archives and/or standalone CSV/XLSX exports
        header_scan_rows: How many leading rows to search for a header
        extensions: Readable table extensions

    Returns:
        ParsedPayload with all five collections and diagnostics

    Raises:
        NoUsableFilesError: If no blob yielded a readable export table
    """
    diagnostics = DiagnosticsAggregator()
    collections: dict[str, list] = {name: [] for name, _ in ROUTES.values()}

    for path, content in _collect_sources(blobs, diagnostics, extensions):
        label = classify_file(path)
        collection, normalizer = ROUTES[label]

        try:
            rows = read_table(path, content)
        except TableReadError as e:
            logger.warning(f"Skipping {path}: {e}")
            diagnostics.warn(f"Error processing {path}: {e}")
            continue

        diagnostics.record_file(label, len(rows))

        table, warnings = resolve_table(rows, label, path, header_scan_rows)
        diagnostics.extend(warnings)
        if table is None:
            continue

        records, warnings = normalizer(table)
        diagnostics.extend(warnings)
        collections[collection].extend(records)

    if diagnostics.files_processed == 0:
        raise NoUsableFilesError(
            "No usable LinkedIn export files found: "
            + "; ".join(diagnostics.summary().warnings or ["no input files"])
        )

    payload = ParsedPayload(summary=diagnostics.summary(), **collections)

    logger.info(
        f"Parsed {diagnostics.files_processed} files: "
        f"{len(payload.contacts)} contacts, "
        f"{len(payload.messages)} messages, "
        f"{len(payload.invites)} invitations, "
        f"{len(payload.company_follows)} company follows, "
        f"{len(payload.saved_jobs)} saved jobs"
    )

    return payload


def _run_in_daemon_thread(func: Callable[..., ParsedPayload], *args) -> asyncio.Future:
    """Run func on a daemon thread and resolve a future on the running loop.

    An abandoned thread neither blocks loop shutdown nor interpreter exit.
    """
    loop = asyncio.get_running_loop()
    future = loop.create_future()

    def _deliver(result, error):
        if future.done():
            return
        if error is not None:
            future.set_exception(error)
        else:
            future.set_result(result)

    def _worker():
        try:
            result, error = func(*args), None
        except Exception as e:
            result, error = None, e
        try:
            loop.call_soon_threadsafe(_deliver, result, error)
        except RuntimeError:
            logger.debug("Event loop closed before an abandoned parse finished")

    threading.Thread(target=_worker, name="export-parser", daemon=True).start()
    return future


async def parse_files_async(
    blobs: Iterable[FileBlob],
    timeout_seconds: Optional[float] = DEFAULT_TIMEOUT_SECONDS,
    header_scan_rows: int = DEFAULT_SCAN_ROWS,
    extensions: tuple[str, ...] = SUPPORTED_EXTENSIONS,
) -> ParsedPayload:
    """Run parse_files in a worker thread under a wall-clock timeout.

    On timeout the worker is abandoned and no partial result is returned.
    The caller gets ParseTimeoutError as soon as the timeout expires.

    Raises:
        ParseTimeoutError: If parsing does not finish in time
        NoUsableFilesError: If no blob yielded a readable export table
    """
    blobs = list(blobs)
    try:
        return await asyncio.wait_for(
            _run_in_daemon_thread(parse_files, blobs, header_scan_rows, extensions),
            timeout=timeout_seconds,
        )
    except asyncio.TimeoutError as e:
        logger.error(f"Parser timeout after {timeout_seconds}s, abandoning parse")
        raise ParseTimeoutError(
            f"Parser timeout - processing took longer than {timeout_seconds}s"
        ) from e


async def parse_into_store(
    store: "ParsedDataStore",
    blobs: Iterable[FileBlob],
    timeout_seconds: Optional[float] = DEFAULT_TIMEOUT_SECONDS,
    header_scan_rows: int = DEFAULT_SCAN_ROWS,
    extensions: tuple[str, ...] = SUPPORTED_EXTENSIONS,
) -> ParsedPayload:
    """Parse and replace the store's content; the store is untouched on failure."""
    payload = await parse_files_async(blobs, timeout_seconds, header_scan_rows, extensions)
    store.set(payload)
    return payload
