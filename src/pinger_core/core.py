"""
Core orchestration module for Pinger Core.

Builds the system identity, wraps it in a report and hands it to the
uploader.
"""

from __future__ import annotations

import json
import logging
import uuid
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any

from pinger_core import __version__
from pinger_core.config import Config
from pinger_core.identity import Identity, build_identity
from pinger_core.sources.rpm_ostree import DeploymentStatus
from pinger_core.uploader import Uploader, UploadError

logger = logging.getLogger(__name__)


@dataclass
class PingReport:
    """A single identity report."""

    identity: Identity
    report_id: str
    timestamp: str
    agent_version: str

    def to_dict(self) -> dict[str, Any]:
        """Convert report to dictionary for serialization."""
        return {
            "meta": {
                "report_id": self.report_id,
                "timestamp": self.timestamp,
                "agent_version": self.agent_version,
            },
            "identity": self.identity.flatten(),
        }

    def to_json(self, indent: int = 2) -> str:
        """Serialize report to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)


class PingerCore:
    """
    Main orchestrator for identity reporting.

    Identity failures propagate to the caller; upload failures are logged.
    """

    def __init__(self, config: Config | None = None, status: DeploymentStatus | None = None):
        self.config = config or Config()
        self.status = status
        self.uploader = Uploader(self.config) if self.config.reporting_url else None

    def identify(self, level: str | None = None) -> Identity:
        """
        Build the system identity.

        Args:
            level: Optional override of the configured collecting level.
        """
        config = self.config
        if level is not None:
            config = replace(self.config, collecting_level=level)
        return build_identity(config, self.status)

    def build_report(self, level: str | None = None) -> PingReport:
        """Build the identity and wrap it in a report."""
        return PingReport(
            identity=self.identify(level),
            report_id=str(uuid.uuid4()),
            timestamp=datetime.now(timezone.utc).isoformat(),
            agent_version=__version__,
        )

    def upload(self, report: PingReport) -> dict[str, Any]:
        """
        Upload a report to the configured endpoint.

        Raises:
            ValueError: If no reporting URL is configured.
        """
        if not self.uploader:
            raise ValueError("No reporting URL configured. Set 'reporting.url' in config.")

        return self.uploader.upload(report)

    def ping(self, level: str | None = None) -> tuple[PingReport, dict[str, Any] | None]:
        """
        Build a report and upload it when reporting is enabled.

        Returns:
            Tuple of (report, upload_response). upload_response is None
            if reporting is disabled or the upload fails.
        """
        report = self.build_report(level)

        if not self.config.reporting_enabled:
            logger.info("Reporting disabled, not sending identity")
            return report, None

        if not self.uploader:
            logger.warning("No reporting URL configured, not sending identity")
            return report, None

        try:
            return report, self.upload(report)
        except (UploadError, ValueError) as e:
            logger.error(f"Upload failed: {e}")
            return report, None
