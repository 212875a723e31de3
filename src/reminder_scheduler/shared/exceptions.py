"""
Base exceptions shared across packages.
"""

from typing import Any


class ReminderSchedulerError(Exception):
    """Base exception for the reminder scheduler.

    Carries an optional machine-readable error code and the raw payload
    returned by an external system, when there is one.
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}


class ConfigurationError(ReminderSchedulerError):
    """Missing or invalid configuration. Fatal at startup."""
