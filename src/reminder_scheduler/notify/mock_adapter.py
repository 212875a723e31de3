"""
Mock notifier adapter for development and testing.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from reminder_scheduler.notify.interface import (
    CallPlacementError,
    Channel,
    MessageDeliveryError,
    NotificationReceipt,
    Notifier,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SentNotification:
    channel: Channel
    destination: str
    payload: str


class MockNotifier(Notifier):
    """Records every request; can be told to fail per channel or destination."""

    def __init__(self) -> None:
        self._sent: list[SentNotification] = []
        self._next_id: int = 1
        self._failing_channels: set[Channel] = set()
        self._failing_destinations: set[str] = set()
        self._fail_error: str = "Mock failure"
        self._fail_code: str = "MOCK_ERROR"

    def reset(self) -> None:
        self._sent.clear()
        self._next_id = 1
        self._failing_channels.clear()
        self._failing_destinations.clear()

    def configure_failure(
        self,
        channel: Channel | None = None,
        destination: str | None = None,
        error_message: str = "Mock failure",
        error_code: str = "MOCK_ERROR",
    ) -> None:
        if channel is None and destination is None:
            self._failing_channels.update(Channel)
        if channel is not None:
            self._failing_channels.add(channel)
        if destination is not None:
            self._failing_destinations.add(destination)
        self._fail_error = error_message
        self._fail_code = error_code

    @property
    def sent(self) -> list[SentNotification]:
        return self._sent.copy()

    @property
    def calls(self) -> list[SentNotification]:
        return [n for n in self._sent if n.channel is Channel.VOICE]

    @property
    def messages(self) -> list[SentNotification]:
        return [n for n in self._sent if n.channel is Channel.SMS]

    def place_call(self, destination: str, callback_url: str) -> NotificationReceipt:
        logger.info("Mock: placing call", extra={"to": destination})
        if self._should_fail(Channel.VOICE, destination):
            raise CallPlacementError(message=self._fail_error, error_code=self._fail_code)
        return self._record(Channel.VOICE, destination, callback_url)

    def send_message(self, destination: str, body: str) -> NotificationReceipt:
        logger.info("Mock: sending message", extra={"to": destination})
        if self._should_fail(Channel.SMS, destination):
            raise MessageDeliveryError(message=self._fail_error, error_code=self._fail_code)
        return self._record(Channel.SMS, destination, body)

    def _should_fail(self, channel: Channel, destination: str) -> bool:
        return channel in self._failing_channels or destination in self._failing_destinations

    def _record(self, channel: Channel, destination: str, payload: str) -> NotificationReceipt:
        self._sent.append(SentNotification(channel=channel, destination=destination, payload=payload))
        receipt_id = f"MOCK_{channel.value.upper()}_{self._next_id:06d}"
        self._next_id += 1
        return NotificationReceipt(
            receipt_id=receipt_id,
            channel=channel,
            destination=destination,
            created_at=datetime.now(timezone.utc),
            raw_response={"mock": True},
        )
