"""
Platform detection from kernel boot arguments.

The OS records the platform it was provisioned for in the
`ignition.platform.id` boot parameter.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from pinger_core.sources.base import BaseSource

logger = logging.getLogger(__name__)

PLATFORM_KEY = "ignition.platform.id"
DEFAULT_PLATFORM = "metal"

# Platforms exposing an instance type in the cloud metadata file
CLOUD_PLATFORMS = frozenset({"aliyun", "aws", "azure", "gcp", "openstack"})


class PlatformKind(Enum):
    """Broad class of the platform a machine runs on."""

    BARE_METAL = "bare_metal"
    HYPERVISOR = "hypervisor"
    CLOUD = "cloud"


@dataclass(frozen=True)
class Platform:
    """A platform identifier together with its kind."""

    name: str
    kind: PlatformKind

    @classmethod
    def from_id(cls, name: str) -> Platform:
        """Classify a platform identifier."""
        name = name.strip().lower() or DEFAULT_PLATFORM
        if name == DEFAULT_PLATFORM:
            return cls(name, PlatformKind.BARE_METAL)
        if name in CLOUD_PLATFORMS:
            return cls(name, PlatformKind.CLOUD)
        return cls(name, PlatformKind.HYPERVISOR)

    @property
    def is_cloud(self) -> bool:
        return self.kind is PlatformKind.CLOUD

    def __str__(self) -> str:
        return self.name


class PlatformSource(BaseSource):
    """Reads the platform identifier from the kernel command line."""

    name = "platform"
    description = "Platform identifier from kernel boot arguments"

    def __init__(self, cmdline_path: str):
        super().__init__()
        self.cmdline_path = cmdline_path

    def get(self) -> Platform:
        cmdline = self.read_file(self.cmdline_path)
        return Platform.from_id(parse_platform_id(cmdline))


def parse_platform_id(cmdline: str) -> str:
    """
    Extract the platform identifier from a boot argument string.

    The last occurrence of the key wins. A missing key or an empty value
    falls back to the bare-metal default.
    """
    value = None
    for token in cmdline.split():
        key, sep, arg = token.partition("=")
        if key == PLATFORM_KEY and sep:
            value = arg.strip('"')

    if not value:
        logger.debug(f"No '{PLATFORM_KEY}' boot argument, assuming '{DEFAULT_PLATFORM}'")
        return DEFAULT_PLATFORM

    return value.lower()


def get_platform(cmdline_path: str) -> Platform:
    """Read and classify the platform from the boot argument file."""
    return PlatformSource(cmdline_path).get()
