"""
System identity assembly.

Combines the platform, the original and current OS versions and, on cloud
platforms, the instance type into one immutable record.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from pinger_core.errors import IdentityError
from pinger_core.sources.instance_type import resolve_instance_type
from pinger_core.sources.os_release import read_original_os_version
from pinger_core.sources.platform import get_platform
from pinger_core.sources.rpm_ostree import DeploymentStatus, RpmOstreeStatus

if TYPE_CHECKING:
    from pinger_core.config import Config

logger = logging.getLogger(__name__)

KERNEL_ARGS_FILE = "/proc/cmdline"
OS_ALEPH_VERSION_FILE = "/.coreos-aleph-version.json"
AFTERBURN_METADATA = "/run/metadata/afterburn"


class CollectionLevel(Enum):
    """How much is collected. Both levels currently gather the same fields."""

    MINIMAL = "minimal"
    FULL = "full"

    @classmethod
    def parse(cls, value: Any) -> CollectionLevel:
        """Convert an untrusted value, falling back to MINIMAL."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value)
            except ValueError:
                pass
        logger.debug(f"Unknown collecting level {value!r}, using 'minimal'")
        return cls.MINIMAL

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Identity:
    """Agent identity reported to the server."""

    level: CollectionLevel
    platform: str
    original_os_version: str
    current_os_version: str
    instance_type: str | None = None

    def __post_init__(self):
        object.__setattr__(self, "level", CollectionLevel.parse(self.level))

    def flatten(self) -> dict[str, str]:
        """Return the identity as a flat mapping of strings."""
        return {
            "level": self.level.value,
            "platform": self.platform,
            "original_os_version": self.original_os_version,
            "current_os_version": self.current_os_version,
            "instance_type": self.instance_type or "",
        }

    get_data = flatten

    def to_json(self, indent: int = 2) -> str:
        """Serialize the flattened identity to JSON."""
        return json.dumps(self.flatten(), indent=indent)


@dataclass(frozen=True)
class IdentitySources:
    """Locations of the on-disk identity inputs."""

    cmdline_path: str = KERNEL_ARGS_FILE
    aleph_version_path: str = OS_ALEPH_VERSION_FILE
    metadata_path: str = AFTERBURN_METADATA

    @classmethod
    def from_config(cls, config: Config) -> IdentitySources:
        return cls(
            cmdline_path=config.cmdline_path,
            aleph_version_path=config.aleph_version_path,
            metadata_path=config.metadata_path,
        )


class IdentityAssembler:
    """
    Builds an Identity from the system.

    The deployment status interface is injected so tests can replace the
    rpm-ostree query with fixed data.
    """

    def __init__(
        self,
        sources: IdentitySources | None = None,
        status: DeploymentStatus | None = None,
    ):
        self.sources = sources or IdentitySources()
        self.status = status or RpmOstreeStatus()

    def assemble(self, level: Any = CollectionLevel.MINIMAL) -> Identity:
        """
        Build the identity for a collection level.

        Args:
            level: Requested level; unknown values become 'minimal'.

        Returns:
            The assembled Identity.

        Raises:
            IdentityError: The first source failure, with the level named
                in the message. No partial identity is returned.
        """
        collection_level = CollectionLevel.parse(level)

        try:
            identity = self._collect(collection_level)
        except IdentityError as e:
            raise type(e)(
                f"failed to build '{collection_level}' identity: {e}", path=e.path
            ) from e

        logger.info(
            f"Built '{identity.level}' identity on platform '{identity.platform}'"
        )
        return identity

    def _collect(self, level: CollectionLevel) -> Identity:
        platform = get_platform(self.sources.cmdline_path)
        logger.debug(f"Platform: {platform.name} ({platform.kind.value})")

        original_os_version = read_original_os_version(self.sources.aleph_version_path)
        current_os_version = self.status.booted().version
        logger.debug(f"OS versions: original={original_os_version} current={current_os_version}")

        instance_type = resolve_instance_type(self.sources.metadata_path, platform)
        if instance_type is not None:
            logger.debug(f"Instance type: {instance_type}")

        return Identity(
            level=level,
            platform=platform.name,
            original_os_version=original_os_version,
            current_os_version=current_os_version,
            instance_type=instance_type,
        )


def build_identity(config: Config, status: DeploymentStatus | None = None) -> Identity:
    """Build the identity described by a configuration."""
    if status is None:
        status = RpmOstreeStatus(timeout=config.status_timeout)
    assembler = IdentityAssembler(IdentitySources.from_config(config), status)
    return assembler.assemble(config.collecting_level)
