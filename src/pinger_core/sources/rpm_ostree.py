"""
Current OS version from the booted rpm-ostree deployment.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Protocol

from pinger_core.errors import SourceParseError
from pinger_core.sources.base import BaseSource

DEFAULT_STATUS_COMMAND = ("rpm-ostree", "status", "--json")


@dataclass(frozen=True)
class Deployment:
    """An installed OS deployment as reported by rpm-ostree."""

    version: str
    checksum: str = ""
    origin: str = ""
    booted: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Deployment:
        version = data.get("version")
        if not isinstance(version, str) or not version:
            raise SourceParseError("booted deployment has no version", path="rpm-ostree")
        return cls(
            version=version,
            checksum=str(data.get("checksum", "")),
            origin=str(data.get("origin", "")),
            booted=bool(data.get("booted", False)),
        )


class DeploymentStatus(Protocol):
    """Anything that can report the booted deployment."""

    def booted(self) -> Deployment: ...


class RpmOstreeStatus(BaseSource):
    """Queries `rpm-ostree status --json` for the booted deployment."""

    name = "rpm_ostree"
    description = "Booted deployment from rpm-ostree"

    def __init__(self, command: tuple[str, ...] = DEFAULT_STATUS_COMMAND, timeout: int = 30):
        super().__init__()
        self.command = list(command)
        self.timeout = timeout

    def booted(self) -> Deployment:
        output = self.run_command(self.command, timeout=self.timeout)
        return parse_booted_deployment(output)


def parse_booted_deployment(output: str) -> Deployment:
    """Find the booted entry in rpm-ostree status JSON output."""
    try:
        status = json.loads(output)
    except json.JSONDecodeError as e:
        raise SourceParseError(f"invalid rpm-ostree status output: {e}", path="rpm-ostree") from e

    deployments = status.get("deployments") if isinstance(status, dict) else None
    if not isinstance(deployments, list):
        raise SourceParseError("rpm-ostree status has no deployments", path="rpm-ostree")

    for entry in deployments:
        if isinstance(entry, dict) and entry.get("booted") is True:
            return Deployment.from_dict(entry)

    raise SourceParseError("no booted deployment found", path="rpm-ostree")


def booted(status: DeploymentStatus | None = None) -> Deployment:
    """Return the booted deployment, querying rpm-ostree by default."""
    return (status or RpmOstreeStatus()).booted()
