"""
Record store interface definition.

The store is the single source of truth for contact records. Adapters
translate between the provider's wire format and the domain model.
"""

from abc import ABC, abstractmethod
from typing import Any

from reminder_scheduler.records.models import Record, RecordPatch, UpdateResult
from reminder_scheduler.shared.exceptions import ReminderSchedulerError


class StoreError(ReminderSchedulerError):
    """Base exception for record store errors."""

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        response: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, error_code=error_code, details=response)
        self.response = response or {}


class StoreFetchError(StoreError):
    """The collection could not be fetched or was malformed."""


class StoreUpdateError(StoreError):
    """A record update could not be delivered to the store."""


class RecordStore(ABC):
    """Abstract interface for record stores."""

    @abstractmethod
    def fetch_all(self) -> list[Record]:
        """Fetch the full record collection as one consistent snapshot.

        Raises:
            StoreFetchError: If the store is unreachable or the payload is malformed.
        """
        ...

    @abstractmethod
    def update(self, record_id: str, patch: RecordPatch) -> UpdateResult:
        """Apply a partial update to a single record.

        Returns a failed UpdateResult when the store rejects the patch.

        Raises:
            StoreUpdateError: If the request could not be delivered (network, timeout).
        """
        ...

    def close(self) -> None:
        """Release resources held by the adapter."""
