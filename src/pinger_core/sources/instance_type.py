"""
Cloud instance type from the metadata file written at first boot.

The metadata agent stores provider attributes as KEY=VALUE lines; the
instance type lives under a different key for each provider.
"""

from __future__ import annotations

from pinger_core.errors import SourceParseError
from pinger_core.sources.base import BaseSource
from pinger_core.sources.platform import Platform

INSTANCE_TYPE_KEYS: dict[str, str] = {
    "aliyun": "AFTERBURN_ALIYUN_INSTANCE_TYPE",
    "aws": "AFTERBURN_AWS_INSTANCE_TYPE",
    "azure": "AFTERBURN_AZURE_VMSIZE",
    "gcp": "AFTERBURN_GCP_MACHINE_TYPE",
    "openstack": "AFTERBURN_OPENSTACK_INSTANCE_TYPE",
}


class InstanceTypeSource(BaseSource):
    """Reads the instance type for a cloud platform."""

    name = "instance_type"
    description = "Cloud instance type from provider metadata"

    def __init__(self, metadata_path: str):
        super().__init__()
        self.metadata_path = metadata_path

    def get(self, platform: Platform) -> str:
        if not platform.is_cloud or platform.name not in INSTANCE_TYPE_KEYS:
            raise ValueError(f"no instance type source for platform '{platform.name}'")

        key = INSTANCE_TYPE_KEYS[platform.name]
        metadata = self.parse_key_value(self.read_file(self.metadata_path))

        value = metadata.get(key, "")
        if not value:
            raise SourceParseError(
                f"missing '{key}' in {self.metadata_path}", path=self.metadata_path
            )

        if platform.name == "gcp":
            # projects/<id>/machineTypes/<type>
            value = value.rstrip("/").rsplit("/", 1)[-1]

        return value


def read_instance_type(metadata_path: str, platform: Platform) -> str:
    """Return the instance type of a cloud platform."""
    return InstanceTypeSource(metadata_path).get(platform)


def resolve_instance_type(metadata_path: str, platform: Platform) -> str | None:
    """Return the instance type, or None when the platform is not a cloud."""
    if not platform.is_cloud:
        return None
    return read_instance_type(metadata_path, platform)
