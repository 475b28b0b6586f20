"""
Tests for the Command-Line Interface
"""

import json
import time

import pytest
from click.testing import CliRunner

import src.pipeline.parse as parse_module
from src import __version__
from src.main import cli


def _write_export(tmp_path, export_zip):
    path = tmp_path / export_zip.name
    path.write_bytes(export_zip.content)
    return path


class TestParseCommand:
    """Tests for `parse`."""

    def test_json_output(self, tmp_path, export_zip):
        path = _write_export(tmp_path, export_zip)

        result = CliRunner().invoke(cli, ["-q", "parse", str(path), "--json"], obj={})

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert set(data) == {
            "contacts", "messages", "invites", "companyFollows", "savedJobs", "summary",
        }
        assert len(data["contacts"]) == 2
        assert data["contacts"][0]["connectedAt"] == "2024-01-15T00:00:00.000Z"
        assert data["summary"]["filesProcessed"][0] == "Connections"

    def test_summary_output(self, tmp_path, export_zip):
        path = _write_export(tmp_path, export_zip)

        result = CliRunner().invoke(cli, ["-q", "parse", str(path)], obj={})

        assert result.exit_code == 0, result.output
        assert "Contacts" in result.output
        assert "Job Applications" in result.output

    def test_no_usable_files(self, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("nothing to see")

        result = CliRunner().invoke(cli, ["-q", "parse", str(path)], obj={})

        assert result.exit_code == 1
        assert "No usable LinkedIn export files found" in result.output

    def test_timeout_returns_promptly(self, tmp_path, export_zip, monkeypatch):
        def slow_parse(*args, **kwargs):
            time.sleep(3)

        monkeypatch.setattr(parse_module, "parse_files", slow_parse)
        path = _write_export(tmp_path, export_zip)

        started = time.monotonic()
        result = CliRunner().invoke(cli, ["-q", "parse", str(path), "--timeout", "0.2"], obj={})
        elapsed = time.monotonic() - started

        assert result.exit_code == 1
        assert "Parser timeout" in result.output
        assert elapsed < 2

    @pytest.mark.parametrize("value", ["0", "-1"])
    def test_non_positive_timeout_rejected(self, tmp_path, export_zip, value):
        path = _write_export(tmp_path, export_zip)

        result = CliRunner().invoke(cli, ["-q", "parse", str(path), "--timeout", value], obj={})

        assert result.exit_code == 2

    def test_missing_path(self, tmp_path):
        result = CliRunner().invoke(cli, ["parse", str(tmp_path / "absent.zip")], obj={})

        assert result.exit_code == 2


class TestVersionCommand:
    """Tests for `version`."""

    def test_version(self):
        result = CliRunner().invoke(cli, ["-q", "version"], obj={})

        assert result.exit_code == 0
        assert __version__ in result.output
