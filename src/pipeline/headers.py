"""
Header Resolution

Finds the real header row below any descriptive preamble and maps logical
field names to column positions. Aliases live in one declarative table,
FILE_SCHEMAS, shared by every record kind.
"""

import logging
import re
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from src.pipeline.ingest import (
    COMPANY_FOLLOWS,
    CONNECTIONS,
    INVITATIONS,
    JOB_APPLICATIONS,
    MESSAGES,
    SAVED_JOBS,
)

logger = logging.getLogger(__name__)

DEFAULT_SCAN_ROWS = 10

# A literal alias matches a header cell exactly; a pattern uses re.search.
Alias = Union[str, re.Pattern[str]]


def _ci(pattern: str) -> re.Pattern[str]:
    return re.compile(pattern, re.IGNORECASE)


class TableSchema(BaseModel):
    """Header marker and field aliases for one canonical file kind."""
    model_config = ConfigDict(frozen=True)

    markers: tuple[Alias, ...]
    fields: dict[str, tuple[Alias, ...]]


_JOB_SCHEMA = TableSchema(
    markers=(_ci(r"^(job )?title$"), _ci(r"^company( name)?$")),
    fields={
        "title": ("Title", "Job Title"),
        "company": ("Company", "Company Name"),
        "date": (
            "Saved On",
            "Saved Date",
            "Date",
            "Applied On",
            "Application Date",
            "Created On",
        ),
    },
)

FILE_SCHEMAS: dict[str, TableSchema] = {
    CONNECTIONS: TableSchema(
        markers=("First Name",),
        fields={
            "first_name": ("First Name",),
            "last_name": ("Last Name",),
            "url": ("URL", "Profile URL"),
            "email": ("Email Address", "Email"),
            "company": ("Company", "Company Name"),
            "position": ("Position", "Title", "Job Title"),
            "connected_on": ("Connected On", "Connected on", "Connected"),
            "location": ("Location", "City", "City, State", "City/Region"),
        },
    ),
    MESSAGES: TableSchema(
        markers=(_ci(r"^CONVERSATION ID$"), _ci(r"^FROM$"), _ci(r"^CONTENT$")),
        fields={
            "conversation_id": (_ci(r"^CONVERSATION ID$"),),
            "from": (_ci(r"^FROM$"),),
            "to": (_ci(r"^TO$"),),
            "sender_url": (_ci(r"SENDER PROFILE URL"),),
            "recipient_urls": (_ci(r"RECIPIENT PROFILE URLS?"),),
            "date": (_ci(r"^DATE$"), _ci(r"Sent On")),
            "content": (_ci(r"^CONTENT$"), _ci(r"Message")),
        },
    ),
    INVITATIONS: TableSchema(
        markers=(_ci(r"^From$"), _ci(r"^To$")),
        fields={
            "from": ("From",),
            "to": ("To",),
            "sent_at": ("Sent At", "Date", "Sent On"),
            "message": ("Message", "Note"),
            "direction": ("Direction", "Type"),
            "title": ("Title", "Headline"),
            "company": ("Company",),
        },
    ),
    COMPANY_FOLLOWS: TableSchema(
        markers=(_ci(r"^Organization$"),),
        fields={
            "organization": ("Organization", "Company"),
            "followed_on": ("Followed On", "Date"),
        },
    ),
    SAVED_JOBS: _JOB_SCHEMA,
    JOB_APPLICATIONS: _JOB_SCHEMA,
}


def alias_matches(alias: Alias, cell: str) -> bool:
    """Check a normalized header cell against a literal or pattern alias."""
    if isinstance(alias, str):
        return cell == alias
    return alias.search(cell) is not None


def locate_header(
    rows: list[list[str]],
    markers: tuple[Alias, ...],
    scan_rows: int = DEFAULT_SCAN_ROWS,
) -> Optional[int]:
    """Index of the first row within the scan window holding a marker cell."""
    for index, row in enumerate(rows[:scan_rows]):
        if any(alias_matches(marker, cell) for cell in row for marker in markers):
            return index
    return None


def resolve_columns(
    headers: list[str],
    fields: dict[str, tuple[Alias, ...]],
) -> dict[str, int]:
    """Map each logical field to a column index.

    For each field the first alias, in list order, that matches any header
    cell wins. Unresolved fields are left out.
    """
    columns: dict[str, int] = {}
    for name, aliases in fields.items():
        for alias in aliases:
            index = next(
                (i for i, cell in enumerate(headers) if alias_matches(alias, cell)),
                None,
            )
            if index is not None:
                columns[name] = index
                break
    return columns


class ResolvedTable(BaseModel):
    """Data rows of one file plus the resolved field → column map."""
    label: str
    source: str
    headers: list[str]
    columns: dict[str, int]
    rows: list[list[str]] = Field(default_factory=list)
    row_numbers: list[int] = Field(
        default_factory=list,
        description="1-based position of each data row in the source table",
    )

    def value(self, row: list[str], name: str) -> str:
        """Cell for a logical field, "" when unresolved or missing."""
        index = self.columns.get(name)
        if index is None or index >= len(row):
            return ""
        return row[index]

    def numbered_rows(self) -> list[tuple[int, list[str]]]:
        """Data rows paired with their source row number."""
        numbers = self.row_numbers or range(1, len(self.rows) + 1)
        return list(zip(numbers, self.rows))


def resolve_table(
    rows: list[list[str]],
    label: str,
    source: str,
    scan_rows: int = DEFAULT_SCAN_ROWS,
) -> tuple[Optional[ResolvedTable], list[str]]:
    """Locate the header, drop preamble and empty rows, resolve columns.

    Returns:
        (table, warnings); table is None when no header row was found
    """
    schema = FILE_SCHEMAS[label]
    warnings: list[str] = []

    header_index = locate_header(rows, schema.markers, scan_rows)
    if header_index is None:
        warnings.append(f"{label}: Could not find header row in {source}")
        logger.warning(f"{label}: no header row within first {scan_rows} rows of {source}")
        return None, warnings

    headers = list(rows[header_index])
    numbered = [
        (number, row)
        for number, row in enumerate(rows, start=1)
        if number > header_index + 1 and any(row)
    ]
    data_rows = [row for _, row in numbered]

    warnings.append(f"{label}: Detected headers: {' | '.join(h for h in headers if h)}")
    warnings.append(f"{label}: {len(data_rows)} data rows found in {source}")

    table = ResolvedTable(
        label=label,
        source=source,
        headers=headers,
        columns=resolve_columns(headers, schema.fields),
        rows=data_rows,
        row_numbers=[number for number, _ in numbered],
    )
    logger.debug(f"{label}: resolved columns {table.columns} in {source}")

    return table, warnings
