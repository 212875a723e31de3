"""
In-memory record store for local runs and tests.
"""

from __future__ import annotations

import logging
import threading
from typing import Iterable

from reminder_scheduler.records.interface import RecordStore, StoreFetchError, StoreUpdateError
from reminder_scheduler.records.models import Record, RecordPatch, UpdateResult

logger = logging.getLogger(__name__)


class InMemoryRecordStore(RecordStore):
    """Record store keeping records in a dict, in insertion order."""

    def __init__(self, records: Iterable[Record] = ()) -> None:
        self._lock = threading.Lock()
        self._records: dict[str, Record] = {r.id: r for r in records}
        self._updates: list[tuple[str, RecordPatch]] = []
        self._fetch_error: str | None = None
        self._rejected_ids: set[str] = set()
        self._unreachable_ids: set[str] = set()

    def reset(self, records: Iterable[Record] = ()) -> None:
        with self._lock:
            self._records = {r.id: r for r in records}
            self._updates.clear()
            self._fetch_error = None
            self._rejected_ids.clear()
            self._unreachable_ids.clear()

    def configure_fetch_failure(self, message: str | None = "Mock fetch failure") -> None:
        self._fetch_error = message

    def configure_update_failure(
        self,
        record_id: str,
        rejected: bool = True,
        unreachable: bool = False,
    ) -> None:
        """Make updates for ``record_id`` fail.

        ``rejected`` returns a failed UpdateResult; ``unreachable`` raises
        StoreUpdateError as a network failure would.
        """
        if unreachable:
            self._unreachable_ids.add(record_id)
        elif rejected:
            self._rejected_ids.add(record_id)

    @property
    def updates(self) -> list[tuple[str, RecordPatch]]:
        return self._updates.copy()

    def get(self, record_id: str) -> Record | None:
        return self._records.get(record_id)

    def put(self, record: Record) -> None:
        """Replace a record, as an operator editing the store would."""
        with self._lock:
            self._records[record.id] = record

    def fetch_all(self) -> list[Record]:
        if self._fetch_error:
            raise StoreFetchError(message=self._fetch_error, error_code="MOCK_ERROR")
        with self._lock:
            return list(self._records.values())

    def update(self, record_id: str, patch: RecordPatch) -> UpdateResult:
        logger.debug("Memory store update", extra={"record_id": record_id})
        if record_id in self._unreachable_ids:
            raise StoreUpdateError(message="Mock store unreachable", error_code="MOCK_ERROR")
        if record_id in self._rejected_ids:
            return UpdateResult(record_id=record_id, ok=False, error={"message": "Mock rejection"})

        with self._lock:
            current = self._records.get(record_id)
            if current is None:
                return UpdateResult(record_id=record_id, ok=False, error={"message": "Not found"})
            self._records[record_id] = patch.apply_to(current)
            self._updates.append((record_id, patch))
        return UpdateResult(record_id=record_id, ok=True)
