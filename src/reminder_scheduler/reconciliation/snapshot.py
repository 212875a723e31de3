"""
Best-effort detection of manual edits between consecutive polls.

Compares the contact flag and callback marker of each record with what the
previous poll saw (plus what this process wrote since). State lives in
memory only and is lost on restart; the first poll after a restart reports
nothing. Nothing depends on it for correctness.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from reminder_scheduler.records.models import ContactFlag, Record


@dataclass(frozen=True)
class _Seen:
    flag: ContactFlag | None
    callback_active: bool


class SnapshotTracker:
    def __init__(self) -> None:
        self._last: dict[str, _Seen] | None = None

    @property
    def has_baseline(self) -> bool:
        return self._last is not None

    def detect_manual_changes(self, records: Iterable[Record]) -> list[str]:
        """Ids re-armed or given an active callback since the last poll."""
        if self._last is None:
            return []
        changed: list[str] = []
        for record in records:
            previous = self._last.get(record.id)
            if previous is None:
                continue
            rearmed = (
                previous.flag is ContactFlag.CONTACTED
                and record.flag is ContactFlag.NEEDS_CONTACT
            )
            callback_armed = not previous.callback_active and record.callback_active
            if rearmed or callback_armed:
                changed.append(record.id)
        return changed

    def remember(self, records: Iterable[Record]) -> None:
        """Store the post-run view (snapshot with this run's writes applied)."""
        self._last = {r.id: _Seen(flag=r.flag, callback_active=r.callback_active) for r in records}

    def clear(self) -> None:
        self._last = None
