"""
Tests for Parse Orchestration
"""

import asyncio
import time

import pytest

import src.pipeline.parse as parse_module
from src.models.entities import ParsedPayload
from src.pipeline.errors import NoUsableFilesError, ParseTimeoutError
from src.pipeline.ingest import FileBlob
from src.pipeline.parse import parse_files, parse_files_async, parse_into_store
from src.utils.store import ParsedDataStore


def _csv_blob(name: str, text: str) -> FileBlob:
    return FileBlob(name=name, content=text.encode("utf-8"))


class TestParseFiles:
    """Tests for the synchronous parse over whole exports."""

    def test_full_export(self, export_zip):
        payload = parse_files([export_zip])

        assert payload.record_counts() == {
            "contacts": 2,
            "messages": 2,
            "invites": 2,
            "company_follows": 2,
            "saved_jobs": 3,
        }
        assert payload.summary.files_processed == [
            "Connections",
            "messages",
            "Invitations",
            "Company Follows",
            "Saved Jobs",
            "Job Applications",
        ]
        assert payload.summary.rows["Connections"] == 6
        assert payload.summary.rows["messages"] == 4
        assert "Extracted 6 files from Basic_LinkedInDataExport.zip" in payload.summary.warnings

    def test_deterministic(self, export_zip):
        assert parse_files([export_zip]).to_dict() == parse_files([export_zip]).to_dict()

    def test_saved_jobs_and_applications_combined(self, export_zip):
        payload = parse_files([export_zip])

        assert [job.title for job in payload.saved_jobs] == [
            "Data Engineer",
            "Platform Engineer",
            "Analyst",
        ]
        assert set(payload.to_dict()["savedJobs"][0]) == {"id", "company", "title", "savedAt"}

    def test_rows_summed_per_label(self, export_files):
        blobs = [
            _csv_blob("Connections.csv", export_files["Connections.csv"]),
            _csv_blob("connections.csv", "First Name,Last Name\nAda,Lovelace\n"),
        ]

        payload = parse_files(blobs)

        assert payload.summary.files_processed == ["Connections", "Connections"]
        assert payload.summary.rows == {"Connections": 8}
        assert len(payload.contacts) == 3

    def test_auxiliary_messages_ignored(self, make_zip, export_files):
        blob = FileBlob(name="export.zip", content=make_zip({
            "Connections.csv": export_files["Connections.csv"],
            "guide_messages.csv": export_files["messages.csv"],
            "learning_coach_messages.csv": export_files["messages.csv"],
        }))

        payload = parse_files([blob])
        warnings = payload.summary.warnings

        assert payload.messages == []
        assert payload.summary.files_processed == ["Connections"]
        assert warnings.count("Ignoring auxiliary messages file guide_messages.csv") == 1
        assert warnings.count("Ignoring auxiliary messages file learning_coach_messages.csv") == 1

    def test_standalone_auxiliary_messages_ignored(self, export_files):
        blobs = [
            _csv_blob("Connections.csv", export_files["Connections.csv"]),
            _csv_blob("guide_messages.csv", export_files["messages.csv"]),
        ]

        payload = parse_files(blobs)

        assert payload.messages == []
        assert "Ignoring auxiliary messages file guide_messages.csv" in payload.summary.warnings

    def test_bad_archive_does_not_stop_other_files(self, export_files):
        blobs = [
            FileBlob(name="broken.zip", content=b"not a zip at all"),
            _csv_blob("Connections.csv", export_files["Connections.csv"]),
        ]

        payload = parse_files(blobs)

        assert len(payload.contacts) == 2
        assert any(
            w.startswith("Failed to extract ZIP file broken.zip") for w in payload.summary.warnings
        )

    def test_unrecognized_standalone_file_warns(self, export_files):
        blobs = [
            _csv_blob("Profile.csv", "First Name,Last Name\nMe,Myself\n"),
            _csv_blob("Connections.csv", export_files["Connections.csv"]),
        ]

        payload = parse_files(blobs)

        assert "Unrecognized file: Profile.csv" in payload.summary.warnings
        assert payload.summary.files_processed == ["Connections"]

    def test_file_without_header_counts_as_processed(self):
        blob = _csv_blob("Connections.csv", "Name,Link\nAda,https://example.com\n")

        payload = parse_files([blob])

        assert payload.summary.files_processed == ["Connections"]
        assert payload.contacts == []
        assert "Connections: Could not find header row in Connections.csv" in payload.summary.warnings

    def test_long_message_keeps_file(self):
        body = "word " * 40_000
        text = (
            "CONVERSATION ID,FROM,TO,DATE,CONTENT\n"
            f"c1,John Doe,You,2024-06-15 10:30:00 UTC,{body}\n"
            "c1,You,John Doe,2024-06-15 11:00:00 UTC,Thanks!\n"
        )

        payload = parse_files([_csv_blob("messages.csv", text)])

        assert len(payload.messages) == 2
        assert len(payload.messages[0].body) > 131072
        assert not any(w.startswith("Error processing") for w in payload.summary.warnings)

    def test_no_input(self):
        with pytest.raises(NoUsableFilesError):
            parse_files([])

    def test_only_unrecognized_files(self):
        with pytest.raises(NoUsableFilesError, match="Unrecognized file: notes.txt"):
            parse_files([FileBlob(name="notes.txt", content=b"hello")])

    def test_extension_filter(self, export_files):
        blob = _csv_blob("Connections.csv", export_files["Connections.csv"])

        with pytest.raises(NoUsableFilesError, match="Unsupported file format"):
            parse_files([blob], extensions=(".xlsx",))


class TestParseFilesAsync:
    """Tests for the timed asynchronous parse."""

    def test_success(self, export_zip):
        payload = asyncio.run(parse_files_async([export_zip], timeout_seconds=30))

        assert len(payload.contacts) == 2

    def test_timeout(self, monkeypatch, export_zip):
        def slow_parse(*args, **kwargs):
            time.sleep(0.5)
            return ParsedPayload()

        monkeypatch.setattr(parse_module, "parse_files", slow_parse)

        with pytest.raises(ParseTimeoutError, match="longer than 0.05s"):
            asyncio.run(parse_files_async([export_zip], timeout_seconds=0.05))

    def test_timeout_does_not_wait_for_worker(self, monkeypatch, export_zip):
        def slow_parse(*args, **kwargs):
            time.sleep(2)
            return ParsedPayload()

        monkeypatch.setattr(parse_module, "parse_files", slow_parse)

        started = time.monotonic()
        with pytest.raises(ParseTimeoutError):
            asyncio.run(parse_files_async([export_zip], timeout_seconds=0.1))

        assert time.monotonic() - started < 1.5

    def test_errors_propagate(self):
        with pytest.raises(NoUsableFilesError):
            asyncio.run(parse_files_async([]))


class TestParseIntoStore:
    """Tests for parsing into a caller-owned store."""

    def test_replaces_payload(self, export_zip, export_files):
        store = ParsedDataStore()
        asyncio.run(parse_into_store(store, [export_zip]))
        first = store.get()

        second = asyncio.run(parse_into_store(
            store,
            [_csv_blob("Connections.csv", export_files["Connections.csv"])],
        ))

        assert store.get() is second
        assert store.get() is not first
        assert store.get().messages == []

    def test_store_untouched_on_failure(self, export_zip):
        store = ParsedDataStore()
        asyncio.run(parse_into_store(store, [export_zip]))
        before = store.get()

        with pytest.raises(NoUsableFilesError):
            asyncio.run(parse_into_store(store, [FileBlob(name="notes.txt", content=b"")]))

        assert store.get() is before

    def test_store_untouched_on_timeout(self, monkeypatch, export_zip):
        def slow_parse(*args, **kwargs):
            time.sleep(0.5)
            return ParsedPayload()

        monkeypatch.setattr(parse_module, "parse_files", slow_parse)
        store = ParsedDataStore()

        with pytest.raises(ParseTimeoutError):
            asyncio.run(parse_into_store(store, [export_zip], timeout_seconds=0.05))

        assert not store.has_data
