"""
Domain model for contact records.

Records are owned by the external store. The scheduler reads snapshots and
writes partial patches; it never creates or deletes a record.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any


class ContactFlag(str, Enum):
    """Contact state of a record, independent of the store's wire encoding."""

    NEEDS_CONTACT = "needs_contact"
    CONTACTED = "contacted"


@dataclass(frozen=True)
class Record:
    """Snapshot of one contactable party.

    ``due_date`` and ``callback_time`` keep the provider's raw values; the
    eligibility policy parses them so that bad values become INVALID
    decisions instead of fetch failures. ``flag`` is None when the raw value
    could not be decoded.
    """

    id: str
    name: str | None = None
    phone_number: str | None = None
    due_date: Any = None
    callback_time: str | None = None
    flag: ContactFlag | None = None
    do_not_call: bool = False
    callback_active: bool = False
    fallback_required: bool = False


@dataclass(frozen=True)
class RecordPatch:
    """Partial update for a record. None means 'leave unchanged'."""

    flag: ContactFlag | None = None
    fallback_required: bool | None = None
    callback_active: bool | None = None

    @property
    def is_empty(self) -> bool:
        return self.flag is None and self.fallback_required is None and self.callback_active is None

    def apply_to(self, record: Record) -> Record:
        changes: dict[str, Any] = {}
        if self.flag is not None:
            changes["flag"] = self.flag
        if self.fallback_required is not None:
            changes["fallback_required"] = self.fallback_required
        if self.callback_active is not None:
            changes["callback_active"] = self.callback_active
        return replace(record, **changes)


@dataclass(frozen=True)
class UpdateResult:
    """Outcome of a store update."""

    record_id: str
    ok: bool
    record: dict[str, Any] | None = None
    error: dict[str, Any] | None = None
