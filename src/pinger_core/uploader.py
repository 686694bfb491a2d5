"""
Ping delivery for Pinger Core.

A report is sent once per run. The report id travels in the `X-Report-Id`
header so the server can discard a repeated delivery of the same ping.
"""

from __future__ import annotations

import gzip
import json
import logging
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import requests

if TYPE_CHECKING:
    from pinger_core.config import Config
    from pinger_core.core import PingReport

logger = logging.getLogger(__name__)

# Statuses worth another attempt; anything else is final
RETRYABLE_STATUS = frozenset({429, 500, 502, 503, 504})
MAX_BACKOFF = 60


class UploadError(Exception):
    """Raised when a ping could not be delivered."""

    def __init__(self, message: str, status_code: int | None = None, attempts: int = 0):
        super().__init__(message)
        self.status_code = status_code
        self.attempts = attempts


@dataclass
class Delivery:
    """A ping accepted by the server."""

    report_id: str
    status_code: int
    attempts: int
    response_data: dict[str, Any] = field(default_factory=dict)


class Uploader:
    """Delivers ping reports to the configured reporting URL."""

    def __init__(self, config: Config):
        from pinger_core import __version__

        self.config = config
        self.url = config.reporting_url
        self.session = requests.Session()
        self.session.headers.update(
            {
                "User-Agent": f"pinger-core/{__version__}",
                "Accept": "application/json",
            }
        )
        if config.api_key:
            self.session.headers["X-API-Key"] = config.api_key

    def upload(self, report: PingReport) -> dict[str, Any]:
        """
        Send a report and return the server's JSON reply.

        Raises:
            ValueError: If no reporting URL is configured.
            UploadError: If the server rejects the ping or every attempt fails.
        """
        if not self.url:
            raise ValueError("No reporting URL configured")

        body, headers = self.encode(report)
        delivery = self._deliver(report.report_id, body, headers)
        logger.info(
            f"Ping {delivery.report_id} accepted with HTTP {delivery.status_code} "
            f"after {delivery.attempts} attempt(s)"
        )
        return delivery.response_data

    def encode(self, report: PingReport) -> tuple[bytes, dict[str, str]]:
        """Serialize a report into a request body and its headers."""
        headers = {
            "Content-Type": "application/json",
            "X-Report-Id": report.report_id,
        }
        body = json.dumps(report.to_dict(), separators=(",", ":"), sort_keys=True).encode("utf-8")
        if self.config.compress_output:
            body = gzip.compress(body)
            headers["Content-Encoding"] = "gzip"
        return body, headers

    def _deliver(self, report_id: str, body: bytes, headers: dict[str, str]) -> Delivery:
        attempts = max(self.config.reporting_retries, 1)
        error = UploadError("no attempt made")

        for attempt in range(1, attempts + 1):
            delay = _backoff(attempt)
            try:
                response = self.session.post(
                    self.url,
                    data=body,
                    headers=headers,
                    timeout=self.config.reporting_timeout,
                )
            except requests.exceptions.RequestException as e:
                error = UploadError(f"{type(e).__name__}: {e}", attempts=attempt)
            else:
                if response.ok:
                    return Delivery(report_id, response.status_code, attempt, _reply(response))

                error = UploadError(
                    f"HTTP {response.status_code}: {response.text[:200]}",
                    status_code=response.status_code,
                    attempts=attempt,
                )
                if response.status_code not in RETRYABLE_STATUS:
                    raise error
                delay = _retry_after(response) or delay

            logger.warning(f"Ping attempt {attempt}/{attempts} failed: {error}")
            if attempt < attempts:
                logger.debug(f"Retrying in {delay} seconds...")
                time.sleep(delay)

        raise UploadError(
            f"Ping not delivered after {attempts} attempts: {error}",
            status_code=error.status_code,
            attempts=attempts,
        )

    def check_endpoint(self) -> bool:
        """Return True if the reporting URL answers without a server error."""
        if not self.url:
            return False

        try:
            response = self.session.head(self.url, timeout=10, allow_redirects=True)
        except requests.exceptions.RequestException as e:
            logger.debug(f"Reporting endpoint unreachable: {e}")
            return False
        return response.status_code < 500


def _backoff(attempt: int) -> int:
    return min(2**attempt, MAX_BACKOFF)


def _retry_after(response: requests.Response) -> int | None:
    """Seconds requested by a Retry-After header, if given in seconds."""
    value = response.headers.get("Retry-After", "")
    if value.isdigit():
        return min(int(value), MAX_BACKOFF)
    return None


def _reply(response: requests.Response) -> dict[str, Any]:
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}
