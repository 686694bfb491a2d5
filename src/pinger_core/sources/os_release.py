"""
Original OS version from the aleph version marker.

The marker is written once, when the image is first installed, so it
records the version the machine was provisioned with.
"""

from __future__ import annotations

import json

from pinger_core.errors import SourceParseError
from pinger_core.sources.base import BaseSource

VERSION_FIELD = "build"


class OsReleaseSource(BaseSource):
    """Reads the original OS version from the aleph marker file."""

    name = "os_release"
    description = "Original OS version from the aleph version marker"

    def __init__(self, path: str):
        super().__init__()
        self.path = path

    def get(self) -> str:
        content = self.read_file(self.path)

        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise SourceParseError(f"invalid JSON in {self.path}: {e}", path=self.path) from e

        if not isinstance(data, dict):
            raise SourceParseError(f"expected a JSON object in {self.path}", path=self.path)

        version = data.get(VERSION_FIELD)
        if not isinstance(version, str) or not version:
            raise SourceParseError(
                f"missing or invalid '{VERSION_FIELD}' field in {self.path}", path=self.path
            )

        return version


def read_original_os_version(path: str) -> str:
    """Return the OS version recorded at first boot."""
    return OsReleaseSource(path).get()
