"""
Pytest fixtures and configuration for Pinger Core tests.

Provides on-disk identity sources, sample command outputs and a fake
deployment status interface.
"""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from pinger_core.config import Config
from pinger_core.identity import IdentitySources
from pinger_core.sources.rpm_ostree import Deployment


class FakeStatus:
    """Deployment status returning fixed data."""

    def __init__(self, version: str = "mock-os-version"):
        self.version = version
        self.calls = 0

    def booted(self) -> Deployment:
        self.calls += 1
        return Deployment(version=self.version, checksum="abc123", booted=True)


# Test Data Fixtures - Source Contents
@pytest.fixture
def sample_cmdline():
    """Sample /proc/cmdline on a QEMU guest."""
    return (
        "BOOT_IMAGE=(hd0,gpt1)/ostree/fedora-coreos-abc/vmlinuz-5.3.7-301.fc31.x86_64 "
        "mitigations=auto,nosmt rd.luks.options=discard ostree=/ostree/boot.1/fedora-coreos/abc/0 "
        "ignition.platform.id=qemu console=tty0 console=ttyS0,115200n8"
    )


@pytest.fixture
def sample_aleph_version():
    """Sample aleph version marker."""
    return {
        "build": "30.20190923.dev.2-2",
        "ref": "fedora/x86_64/coreos/testing-devel",
        "ostree-commit": "4ed8d83ca2df1c9d4bbc6c3b3ae1b3f1f1b8c7c1f0e5a2c5ab1b4c2f3e4d5a6b",
        "imgid": "fedora-coreos-30.20190923.dev.2-2-qemu.qcow2",
    }


@pytest.fixture
def sample_rpm_ostree_status():
    """Sample `rpm-ostree status --json` output with a pending deployment."""
    return {
        "deployments": [
            {
                "id": "fedora-coreos-def-0",
                "origin": "fedora/x86_64/coreos/testing",
                "version": "31.20191217.2.0",
                "checksum": "def456",
                "booted": False,
            },
            {
                "id": "fedora-coreos-abc-0",
                "origin": "fedora/x86_64/coreos/testing",
                "version": "31.20191211.1.0",
                "checksum": "abc123",
                "booted": True,
            },
        ],
        "transaction": None,
        "cached-update": None,
    }


@pytest.fixture
def sample_afterburn_metadata():
    """Sample cloud metadata file written by the first-boot agent."""
    return (
        "AFTERBURN_AWS_HOSTNAME=ip-10-0-0-12.ec2.internal\n"
        "AFTERBURN_AWS_INSTANCE_ID=i-0123456789abcdef0\n"
        "AFTERBURN_AWS_INSTANCE_TYPE=m5.large\n"
        "AFTERBURN_AWS_IPV4_LOCAL=10.0.0.12\n"
        "AFTERBURN_AWS_REGION=us-east-1\n"
    )


# On-disk Source Fixtures
@pytest.fixture
def source_dir(tmp_path, sample_cmdline, sample_aleph_version, sample_afterburn_metadata) -> Path:
    """Directory holding cmdline, aleph marker and metadata files."""
    (tmp_path / "cmdline").write_text(sample_cmdline + "\n")
    (tmp_path / "aleph-version.json").write_text(json.dumps(sample_aleph_version))
    (tmp_path / "afterburn").write_text(sample_afterburn_metadata)
    return tmp_path


@pytest.fixture
def identity_sources(source_dir) -> IdentitySources:
    """IdentitySources pointing at the fixture files."""
    return IdentitySources(
        cmdline_path=str(source_dir / "cmdline"),
        aleph_version_path=str(source_dir / "aleph-version.json"),
        metadata_path=str(source_dir / "afterburn"),
    )


@pytest.fixture
def fake_status() -> FakeStatus:
    """Deployment status reporting 'mock-os-version'."""
    return FakeStatus()


@pytest.fixture
def test_config(source_dir) -> Config:
    """Config pointing at the fixture files with reporting configured."""
    return Config(
        cmdline_path=str(source_dir / "cmdline"),
        aleph_version_path=str(source_dir / "aleph-version.json"),
        metadata_path=str(source_dir / "afterburn"),
        reporting_url="https://test.example.com/api/v1/ping",
        reporting_retries=1,
        compress_output=False,
    )


# HTTP Fixtures
@pytest.fixture
def mock_upload_response():
    """Successful upload response."""
    response = MagicMock()
    response.status_code = 200
    response.ok = True
    response.text = '{"status": "ok"}'
    response.json.return_value = {"status": "ok"}
    response.headers = {}
    return response
