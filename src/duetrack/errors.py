# src/duetrack/errors.py

"""
Error taxonomy.

Raised by the store client and the draft validation helpers; caught at the
lifecycle controller's operation boundary and turned into a short message.
"""

from __future__ import annotations


class DuetrackError(Exception):
    """Base class for every failure the core surfaces to the user."""


class ConfigurationError(DuetrackError):
    """Required configuration (the store endpoint) is missing."""


class ValidationError(DuetrackError):
    """Local precondition failure; never reaches the network."""

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class NetworkError(DuetrackError):
    """Transport failure or non-success response from the remote store."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
