"""
Exceptions raised while resolving the system identity.
"""

from __future__ import annotations


class IdentityError(Exception):
    """Base class for identity resolution failures."""

    def __init__(self, message: str, path: str | None = None):
        super().__init__(message)
        self.path = path


class SourceReadError(IdentityError, OSError):
    """Raised when an identity source cannot be read. Also an OSError."""

    pass


class SourceParseError(IdentityError):
    """Raised when a source is readable but malformed or missing a field."""

    pass


class ExternalQueryError(IdentityError):
    """Raised when the deployment status command fails."""

    pass
