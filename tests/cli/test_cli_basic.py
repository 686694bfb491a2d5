"""
Basic CLI tests for Pinger Core.

Tests help, version, status and init-config.
"""

from __future__ import annotations

import unittest
from pathlib import Path
from tempfile import TemporaryDirectory
from unittest.mock import patch

import pytest
import yaml
from click.testing import CliRunner

from pinger_core.cli import main
from pinger_core.config import Config


@pytest.mark.cli
class TestCliBasic(unittest.TestCase):
    """Test basic CLI functionality."""

    def setUp(self):
        self.runner = CliRunner()

    def test_cli_help(self):
        result = self.runner.invoke(main, ["--help"])

        self.assertEqual(result.exit_code, 0)
        self.assertIn("Pinger Core", result.output)
        self.assertIn("--config", result.output)
        self.assertIn("--verbose", result.output)
        self.assertIn("identity", result.output)
        self.assertIn("ping", result.output)
        self.assertIn("status", result.output)
        self.assertIn("init-config", result.output)

    def test_cli_version_option(self):
        result = self.runner.invoke(main, ["--version"])

        self.assertEqual(result.exit_code, 0)
        self.assertIn("pinger-core", result.output)
        self.assertRegex(result.output, r"\d+\.\d+\.\d+")

    def test_version_command(self):
        result = self.runner.invoke(main, ["version"])

        self.assertEqual(result.exit_code, 0)
        self.assertIn("Pinger Core", result.output)
        self.assertIn("Python", result.output)

    def test_missing_config_file(self):
        result = self.runner.invoke(main, ["-c", "/nonexistent/config.yaml", "version"])
        self.assertNotEqual(result.exit_code, 0)

    def test_status_without_url(self):
        with patch.dict("os.environ", {"PINGER_REPORTING_URL": "", "PINGER_COLLECTING_LEVEL": "full"}):
            result = self.runner.invoke(main, ["status"])

        self.assertEqual(result.exit_code, 0)
        self.assertIn("Pinger Core Status", result.output)
        self.assertIn("Not configured", result.output)
        self.assertIn("full", result.output)

    def test_status_tests_connection(self):
        with patch.dict("os.environ", {"PINGER_REPORTING_URL": "https://test.example.com/ping"}), patch(
            "pinger_core.uploader.Uploader.check_endpoint", return_value=True
        ):
            result = self.runner.invoke(main, ["status"])

        self.assertEqual(result.exit_code, 0)
        self.assertIn("Server is reachable", result.output)


@pytest.mark.cli
class TestCliInitConfig(unittest.TestCase):
    """Test the 'pinger init-config' command."""

    def test_init_config_writes_loadable_yaml(self):
        runner = CliRunner()
        with TemporaryDirectory() as tmp:
            path = Path(tmp) / "nested" / "config.yaml"

            result = runner.invoke(main, ["init-config", str(path)])

            self.assertEqual(result.exit_code, 0)
            self.assertTrue(path.exists())
            data = yaml.safe_load(path.read_text())
            self.assertEqual(data["collecting"]["level"], "minimal")

            config = Config.from_file(path)
            self.assertEqual(config.reporting_url, "https://your-server.example.com/api/v1/ping")
            self.assertEqual(config.status_timeout, 30)
