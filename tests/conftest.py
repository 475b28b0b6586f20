"""
Pytest Configuration and Shared Fixtures
"""

import io
import zipfile
from pathlib import Path
from typing import Callable

import pytest

from src.pipeline.headers import resolve_table
from src.pipeline.ingest import FileBlob, read_csv_rows


@pytest.fixture
def fixtures_dir() -> Path:
    """Return path to test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def export_files(fixtures_dir) -> dict[str, str]:
    """Sample export files keyed by their path inside a LinkedIn archive."""
    layout = {
        "Connections.csv": "Connections.csv",
        "messages.csv": "messages.csv",
        "Invitations.csv": "Invitations.csv",
        "Company Follows.csv": "Company Follows.csv",
        "Jobs/Saved Jobs.csv": "Saved Jobs.csv",
        "Jobs/Job Applications.csv": "Job Applications.csv",
    }
    return {
        archive_path: (fixtures_dir / name).read_text(encoding="utf-8")
        for archive_path, name in layout.items()
    }


@pytest.fixture
def make_zip() -> Callable[[dict], bytes]:
    """Build an in-memory ZIP archive from {path: content}."""
    def _build(entries: dict) -> bytes:
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w") as archive:
            for path, content in entries.items():
                if path.endswith("/"):
                    archive.writestr(zipfile.ZipInfo(path), "")
                else:
                    archive.writestr(path, content)
        return buffer.getvalue()

    return _build


@pytest.fixture
def export_zip(make_zip, export_files) -> FileBlob:
    """A LinkedIn export archive with every supported file kind."""
    entries = {
        "Connections.csv": export_files["Connections.csv"],
        "messages.csv": export_files["messages.csv"],
        "Invitations.csv": export_files["Invitations.csv"],
        "Company Follows.csv": export_files["Company Follows.csv"],
        "Jobs/": "",
        "Jobs/Saved Jobs.csv": export_files["Jobs/Saved Jobs.csv"],
        "Jobs/Job Applications.csv": export_files["Jobs/Job Applications.csv"],
        "Profile.csv": "First Name,Last Name\nMe,Myself\n",
    }
    return FileBlob(name="Basic_LinkedInDataExport.zip", content=make_zip(entries))


@pytest.fixture
def table_from_csv():
    """Read CSV text and resolve it as the given canonical file kind."""
    def _resolve(text: str, label: str, source: str = "test.csv"):
        table, _ = resolve_table(read_csv_rows(text), label, source)
        assert table is not None
        return table

    return _resolve
