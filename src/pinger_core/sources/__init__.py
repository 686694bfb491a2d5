"""
Identity sources for Pinger Core.

Each source reads one input (boot arguments, version marker, deployment
status, cloud metadata) and either returns its value or raises.
"""

from __future__ import annotations

from pinger_core.sources.base import BaseSource
from pinger_core.sources.instance_type import (
    InstanceTypeSource,
    read_instance_type,
    resolve_instance_type,
)
from pinger_core.sources.os_release import OsReleaseSource, read_original_os_version
from pinger_core.sources.platform import Platform, PlatformKind, PlatformSource, get_platform
from pinger_core.sources.rpm_ostree import Deployment, DeploymentStatus, RpmOstreeStatus, booted

__all__ = [
    "BaseSource",
    "Deployment",
    "DeploymentStatus",
    "InstanceTypeSource",
    "OsReleaseSource",
    "Platform",
    "PlatformKind",
    "PlatformSource",
    "RpmOstreeStatus",
    "booted",
    "get_platform",
    "read_instance_type",
    "read_original_os_version",
    "resolve_instance_type",
]
