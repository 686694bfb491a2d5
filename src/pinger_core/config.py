"""
Configuration management for Pinger Core.

Supports configuration via YAML files, drop-in fragments, environment
variables, and programmatic access.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATHS = [
    Path("/etc/pinger-core/config.yaml"),
    Path.home() / ".config" / "pinger-core" / "config.yaml",
    Path("pinger-config.yaml"),
]

# Drop-in fragment directories, vendor first so admin fragments win
DEFAULT_DROPIN_DIRS = [
    Path("/usr/lib/pinger-core/config.d"),
    Path("/etc/pinger-core/config.d"),
]

# Prefix applied to keys of each YAML section when flattening
SECTION_PREFIXES = {
    "collecting": "collecting_",
    "reporting": "reporting_",
    "logging": "log_",
    "sources": "",
    "auth": "",
}


@dataclass
class Config:
    """
    Configuration container for Pinger Core.

    Priority (highest to lowest):
    1. Programmatic values passed to __init__
    2. Environment variables (prefixed with PINGER_)
    3. Config file and drop-in fragment values
    4. Default values
    """

    # Collection settings; the level is not validated here
    collecting_level: str = "minimal"

    # Identity sources
    cmdline_path: str = "/proc/cmdline"
    aleph_version_path: str = "/.coreos-aleph-version.json"
    metadata_path: str = "/run/metadata/afterburn"
    status_timeout: int = 30

    # Reporting settings
    reporting_enabled: bool = True
    reporting_url: str | None = None
    reporting_timeout: int = 30
    reporting_retries: int = 3
    compress_output: bool = True

    # Authentication
    api_key: str | None = None

    # Logging
    log_level: str = "INFO"
    log_file: str | None = None

    @classmethod
    def from_file(cls, path: str | Path) -> Config:
        """Load configuration from a YAML file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        return cls.from_dict(_read_yaml(path))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Config:
        """Create config from a dictionary."""
        return cls(**_known_fields(_flatten(data)))

    @classmethod
    def load(
        cls,
        config_path: str | Path | None = None,
        dropin_dirs: list[Path] | None = None,
    ) -> Config:
        """
        Load configuration with full resolution order.

        Args:
            config_path: Explicit path to config file. If given, default
                        locations and drop-in directories are skipped.
            dropin_dirs: Override for the drop-in fragment directories.

        Returns:
            Fully resolved Config instance.
        """
        merged: dict[str, Any] = {}

        if config_path:
            path = Path(config_path)
            if path.exists():
                merged.update(_flatten(_read_yaml(path)))
        else:
            for path in DEFAULT_CONFIG_PATHS:
                if path.exists():
                    merged.update(_flatten(_read_yaml(path)))
                    break

            dirs = DEFAULT_DROPIN_DIRS if dropin_dirs is None else dropin_dirs
            for fragment in _find_fragments(dirs):
                logger.debug(f"Loading config fragment {fragment}")
                merged.update(_flatten(_read_yaml(fragment)))

        config = cls(**_known_fields(merged))

        # Override with environment variables
        config._apply_env_overrides()

        return config

    def _apply_env_overrides(self) -> None:
        """Apply environment variable overrides."""
        env_mappings = {
            "PINGER_COLLECTING_LEVEL": "collecting_level",
            "PINGER_CMDLINE_PATH": "cmdline_path",
            "PINGER_ALEPH_VERSION_PATH": "aleph_version_path",
            "PINGER_METADATA_PATH": "metadata_path",
            "PINGER_REPORTING_URL": "reporting_url",
            "PINGER_REPORTING_ENABLED": "reporting_enabled",
            "PINGER_REPORTING_TIMEOUT": "reporting_timeout",
            "PINGER_API_KEY": "api_key",
            "PINGER_LOG_LEVEL": "log_level",
            "PINGER_LOG_FILE": "log_file",
        }

        for env_var, attr in env_mappings.items():
            value = os.environ.get(env_var)
            if value is not None:
                # Type coercion
                current = getattr(self, attr)
                if isinstance(current, bool):
                    setattr(self, attr, value.lower() in ("true", "1", "yes"))
                elif isinstance(current, int):
                    setattr(self, attr, int(value))
                else:
                    setattr(self, attr, value)

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary."""
        return {
            "collecting": {
                "level": self.collecting_level,
            },
            "sources": {
                "cmdline_path": self.cmdline_path,
                "aleph_version_path": self.aleph_version_path,
                "metadata_path": self.metadata_path,
                "status_timeout": self.status_timeout,
            },
            "reporting": {
                "enabled": self.reporting_enabled,
                "url": self.reporting_url,
                "timeout": self.reporting_timeout,
                "retries": self.reporting_retries,
            },
            "auth": {
                "api_key": "***" if self.api_key else None,
            },
            "logging": {
                "level": self.log_level,
                "file": self.log_file,
            },
        }

    def save(self, path: str | Path) -> None:
        """Save configuration to a YAML file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)


def _read_yaml(path: Path) -> dict[str, Any]:
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping")
    return data


def _flatten(data: dict[str, Any]) -> dict[str, Any]:
    """Flatten sectioned config into field names."""
    flat = {}
    for key, value in data.items():
        if isinstance(value, dict):
            prefix = SECTION_PREFIXES.get(key, "")
            for subkey, subvalue in value.items():
                flat[f"{prefix}{subkey}"] = subvalue
        else:
            flat[key] = value
    return flat


def _known_fields(flat: dict[str, Any]) -> dict[str, Any]:
    known_fields = set(Config.__dataclass_fields__)
    return {k: v for k, v in flat.items() if k in known_fields}


def _find_fragments(dirs: list[Path]) -> list[Path]:
    """
    Collect drop-in fragments from all directories.

    A fragment name present in a later directory masks the same name in an
    earlier one; the result is ordered by file name.
    """
    fragments: dict[str, Path] = {}
    for directory in dirs:
        if not directory.is_dir():
            continue
        for path in directory.glob("*.yaml"):
            fragments[path.name] = path
    return [fragments[name] for name in sorted(fragments)]
