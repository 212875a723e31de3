"""
Notifier interface definition.

A notifier places a voice call or sends a text message to a destination
number and returns the provider's receipt id. Delivery itself is the
provider's concern.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from reminder_scheduler.shared.exceptions import ReminderSchedulerError


class Channel(str, Enum):
    """Outbound channel."""

    VOICE = "voice"
    SMS = "sms"


@dataclass(frozen=True)
class NotificationReceipt:
    """Provider acknowledgement for an outbound request."""

    receipt_id: str
    channel: Channel
    destination: str
    created_at: datetime
    raw_response: dict[str, Any] = field(default_factory=dict)


class NotifierError(ReminderSchedulerError):
    """Base exception for notifier errors."""

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        provider_response: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, error_code=error_code, details=provider_response)
        self.provider_response = provider_response or {}


class CallPlacementError(NotifierError):
    """Error while placing a voice call."""


class MessageDeliveryError(NotifierError):
    """Error while submitting a text message."""


class Notifier(ABC):
    """Abstract interface for outbound notification providers."""

    @abstractmethod
    def place_call(self, destination: str, callback_url: str) -> NotificationReceipt:
        """Place a voice call; the provider fetches call instructions from ``callback_url``."""
        ...

    @abstractmethod
    def send_message(self, destination: str, body: str) -> NotificationReceipt:
        """Send a text message."""
        ...

    def close(self) -> None:
        """Release resources held by the adapter."""
