"""
LinkedIn Data Export Ingestion

Classifies export files, unpacks ZIP archives and reads CSV/XLSX content
into matrices of normalized text cells.
"""

import csv
import io
import logging
import re
import zipfile
from contextlib import contextmanager
from pathlib import Path, PurePosixPath
from typing import Any, Optional

import pandas as pd
from pydantic import BaseModel, Field

from src.pipeline.errors import ArchiveError, TableReadError

logger = logging.getLogger(__name__)

# Canonical labels, in classification order
CONNECTIONS = "Connections"
MESSAGES = "messages"
INVITATIONS = "Invitations"
COMPANY_FOLLOWS = "Company Follows"
SAVED_JOBS = "Saved Jobs"
JOB_APPLICATIONS = "Job Applications"

CANONICAL_LABELS = (
    CONNECTIONS,
    MESSAGES,
    INVITATIONS,
    COMPANY_FOLLOWS,
    SAVED_JOBS,
    JOB_APPLICATIONS,
)

CANONICAL_MESSAGES_FILE = "messages.csv"
SUPPORTED_EXTENSIONS = (".csv", ".xlsx")

_WHITESPACE = re.compile(r"\s+")


class FileBlob(BaseModel):
    """A named file handed to the parser."""
    name: str
    content: bytes

    @classmethod
    def from_path(cls, path: str | Path) -> "FileBlob":
        path = Path(path)
        return cls(name=path.name, content=path.read_bytes())

    @property
    def extension(self) -> str:
        return PurePosixPath(self.name.lower()).suffix

    @property
    def is_archive(self) -> bool:
        return self.extension == ".zip"


class ArchiveEntry(BaseModel):
    """A recognized file extracted from an archive."""
    path: str
    content: bytes


class ArchiveExtraction(BaseModel):
    """Entries kept from one archive plus the warnings raised on the way."""
    archive_name: str
    entries: list[ArchiveEntry] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


def base_name(path: str) -> str:
    """Final component of an archive or file path."""
    return PurePosixPath(path.replace("\\", "/")).name


def classify_file(path: str) -> Optional[str]:
    """Canonical label for a file path, matched on its base name."""
    name = base_name(path).lower()
    for label in CANONICAL_LABELS:
        if label.lower() in name:
            return label
    return None


def is_auxiliary_messages(path: str) -> bool:
    """True for any "messages" file other than a top-level messages.csv."""
    normalized = path.replace("\\", "/")
    name = base_name(normalized).lower()
    if "messages" not in name:
        return False
    is_top_level = "/" not in normalized.strip("/")
    return not (is_top_level and name == CANONICAL_MESSAGES_FILE)


def extract_archive(
    blob: FileBlob,
    extensions: tuple[str, ...] = SUPPORTED_EXTENSIONS,
) -> ArchiveExtraction:
    """Extract recognized export files from a ZIP archive.

    Args:
        blob: The archive
        extensions: File extensions that are read; others are reported

    Returns:
        ArchiveExtraction with kept entries and per-entry warnings

    Raises:
        ArchiveError: If the archive itself cannot be opened
    """
    extraction = ArchiveExtraction(archive_name=blob.name)

    try:
        archive = zipfile.ZipFile(io.BytesIO(blob.content))
    except (zipfile.BadZipFile, zipfile.LargeZipFile, OSError, ValueError) as e:
        raise ArchiveError(f"Failed to extract ZIP file {blob.name}: {e}") from e

    with archive:
        for info in archive.infolist():
            if info.is_dir():
                continue

            path = info.filename
            if classify_file(path) is None:
                logger.debug(f"Skipping unrelated archive entry {path}")
                continue

            if is_auxiliary_messages(path):
                extraction.warnings.append(f"Ignoring auxiliary messages file {path}")
                continue

            if PurePosixPath(path.lower()).suffix not in extensions:
                extraction.warnings.append(f"Unsupported file format: {path}")
                continue

            try:
                content = archive.read(info)
            except (zipfile.BadZipFile, OSError, RuntimeError, EOFError, NotImplementedError) as e:
                logger.warning(f"Failed to extract {path} from {blob.name}: {e}")
                extraction.warnings.append(f"Failed to extract {path} from {blob.name}: {e}")
                continue

            extraction.entries.append(ArchiveEntry(path=path, content=content))

    extraction.warnings.append(
        f"Extracted {len(extraction.entries)} files from {blob.name}"
    )
    logger.info(f"Extracted {len(extraction.entries)} files from {blob.name}")

    return extraction


def normalize_text(value: Any) -> str:
    """Strip a leading BOM, trim and collapse whitespace runs."""
    if value is None:
        return ""
    if not isinstance(value, str) and pd.isna(value):
        return ""
    text = str(value).lstrip("\ufeff").strip()
    return _WHITESPACE.sub(" ", text)


def _decode(content: bytes) -> str:
    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError:
        return content.decode("latin-1")


def _frame_to_rows(df: pd.DataFrame) -> list[list[str]]:
    return [
        [normalize_text(cell) for cell in row]
        for row in df.itertuples(index=False, name=None)
    ]


@contextmanager
def _csv_field_limit(limit: int):
    """Raise the csv module field size limit used by the python engine."""
    previous = csv.field_size_limit()
    csv.field_size_limit(max(previous, limit))
    try:
        yield
    finally:
        csv.field_size_limit(previous)


def read_csv_rows(text: str) -> list[list[str]]:
    """Read delimited text into rows without assuming a header.

    LinkedIn prefixes some exports with a short "Notes" preamble, so rows
    are ragged. A first pass finds the widest row, the second reads every
    row at that width.
    """
    if not text.strip():
        return []

    wide_rows: list[int] = []

    def _measure(bad_line: list[str]) -> None:
        wide_rows.append(len(bad_line))
        return None

    options = dict(
        header=None,
        dtype=str,
        keep_default_na=False,
        skip_blank_lines=False,
        engine="python",
    )

    try:
        with _csv_field_limit(len(text) + 1):
            first_pass = pd.read_csv(io.StringIO(text), on_bad_lines=_measure, **options)
            width = max([first_pass.shape[1], *wide_rows])
            df = pd.read_csv(io.StringIO(text), names=list(range(width)), **options)
    except (pd.errors.ParserError, pd.errors.EmptyDataError, ValueError) as e:
        raise TableReadError(f"Could not read CSV content: {e}") from e

    return _frame_to_rows(df.fillna(""))


def read_xlsx_rows(content: bytes) -> list[list[str]]:
    """Read the first sheet of a spreadsheet; absent cells become ""."""
    try:
        df = pd.read_excel(
            io.BytesIO(content),
            sheet_name=0,
            header=None,
            dtype=str,
            engine="openpyxl",
        )
    except Exception as e:
        raise TableReadError(f"Could not read spreadsheet: {e}") from e

    return _frame_to_rows(df.fillna(""))


def read_table(name: str, content: bytes) -> list[list[str]]:
    """Read CSV or XLSX content, chosen by file extension.

    Raises:
        TableReadError: For unsupported formats or unreadable content
    """
    suffix = PurePosixPath(name.lower()).suffix
    if suffix == ".csv":
        return read_csv_rows(_decode(content))
    if suffix == ".xlsx":
        return read_xlsx_rows(content)
    raise TableReadError(f"Unsupported file format: {name}")
