"""
Base class for identity sources.

Unlike a best-effort collector, an identity source must either return the
value it was asked for or raise, so the helpers here never substitute
defaults.
"""

from __future__ import annotations

import logging
import subprocess

from pinger_core.errors import ExternalQueryError, SourceParseError, SourceReadError

logger = logging.getLogger(__name__)


class BaseSource:
    """
    Shared helpers for reading files and running commands.

    Subclasses set `name` and use `read_file`, `parse_key_value` and
    `run_command` to reach their input.
    """

    name: str = "base"
    description: str = "Base source"

    def __init__(self):
        self.logger = logging.getLogger(f"{__name__}.{self.name}")

    def read_file(self, path: str) -> str:
        """
        Read a file and return its contents.

        Raises:
            SourceReadError: If the file is missing or unreadable.
        """
        try:
            with open(path) as f:
                return f.read()
        except OSError as e:
            raise SourceReadError(f"could not read {path}: {e}", path=path) from e
        except UnicodeDecodeError as e:
            raise SourceParseError(f"{path} is not valid text: {e}", path=path) from e

    def parse_key_value(
        self,
        content: str,
        separator: str = "=",
        strip_quotes: bool = True,
    ) -> dict[str, str]:
        """
        Parse key=value lines.

        Blank lines, comments and lines without the separator are skipped.
        """
        result = {}
        for line in content.splitlines():
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            if separator in line:
                key, _, value = line.partition(separator)
                key = key.strip()
                value = value.strip()
                if strip_quotes and len(value) >= 2:
                    if (value.startswith('"') and value.endswith('"')) or (
                        value.startswith("'") and value.endswith("'")
                    ):
                        value = value[1:-1]
                if key:
                    result[key] = value
        return result

    def run_command(self, cmd: list[str], timeout: int = 30) -> str:
        """
        Run a command and return its stdout.

        Raises:
            ExternalQueryError: If the command is missing, times out or
                exits with a non-zero status.
        """
        command = " ".join(cmd)
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            raise ExternalQueryError(f"command timed out: {command}", path=cmd[0]) from e
        except OSError as e:
            raise ExternalQueryError(f"could not run {cmd[0]}: {e}", path=cmd[0]) from e
        except UnicodeDecodeError as e:
            raise SourceParseError(f"{command} wrote undecodable output: {e}", path=cmd[0]) from e

        if result.returncode != 0:
            stderr = (result.stderr or "").strip()
            raise ExternalQueryError(
                f"{command} exited with status {result.returncode}: {stderr[:200]}",
                path=cmd[0],
            )

        self.logger.debug(f"Command succeeded: {command}")
        return result.stdout
