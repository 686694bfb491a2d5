"""
Unit tests for BaseSource helpers.

Tests read_file, parse_key_value and run_command.
"""

from __future__ import annotations

from unittest.mock import patch

import pytest

from pinger_core.errors import ExternalQueryError, SourceParseError, SourceReadError
from pinger_core.sources.base import BaseSource


class TestBaseSourceReadFile:
    """Test read_file()."""

    def test_read_file_success(self, tmp_path):
        path = tmp_path / "file"
        path.write_text("test content\nline 2")
        assert BaseSource().read_file(str(path)) == "test content\nline 2"

    def test_read_file_missing(self, tmp_path):
        with pytest.raises(SourceReadError) as exc_info:
            BaseSource().read_file(str(tmp_path / "missing"))
        assert exc_info.value.path == str(tmp_path / "missing")


class TestBaseSourceParseKeyValue:
    """Test parse_key_value()."""

    def test_parse(self):
        content = (
            "# comment\n"
            "\n"
            "KEY1=value1\n"
            'KEY2="quoted value"\n'
            "KEY3='single'\n"
            "INVALID LINE WITHOUT EQUALS\n"
            "=incomplete\n"
            "KEY4=a=b\n"
        )
        assert BaseSource().parse_key_value(content) == {
            "KEY1": "value1",
            "KEY2": "quoted value",
            "KEY3": "single",
            "KEY4": "a=b",
        }

    def test_keep_quotes(self):
        assert BaseSource().parse_key_value('K="v"', strip_quotes=False) == {"K": '"v"'}


class TestBaseSourceRunCommand:
    """Test run_command()."""

    def test_run_command_success(self):
        assert "test" in BaseSource().run_command(["echo", "test"])

    def test_run_command_failure(self):
        with pytest.raises(ExternalQueryError):
            BaseSource().run_command(["false"])

    def test_run_command_timeout(self):
        with pytest.raises(ExternalQueryError, match="timed out"):
            BaseSource().run_command(["sleep", "10"], timeout=0.1)

    def test_run_command_not_found(self):
        with pytest.raises(ExternalQueryError, match="nonexistent_command_xyz123"):
            BaseSource().run_command(["nonexistent_command_xyz123"])

    @patch("pinger_core.sources.base.subprocess.run")
    def test_run_command_undecodable_output(self, mock_run):
        mock_run.side_effect = UnicodeDecodeError("utf-8", b"\xff", 0, 1, "invalid start byte")

        with pytest.raises(SourceParseError, match="undecodable output") as exc_info:
            BaseSource().run_command(["rpm-ostree", "status", "--json"])

        assert exc_info.value.path == "rpm-ostree"
        assert isinstance(exc_info.value.__cause__, UnicodeDecodeError)
