"""
Pytest configuration and shared fixtures.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

import pytest

from reminder_scheduler.clock import FixedClock
from reminder_scheduler.notify.mock_adapter import MockNotifier
from reminder_scheduler.policy.eligibility import EligibilityPolicy, PolicySettings
from reminder_scheduler.policy.matching import CallbackWindow
from reminder_scheduler.reconciliation.service import ReconciliationRun, RunOptions
from reminder_scheduler.reconciliation.snapshot import SnapshotTracker
from reminder_scheduler.records.memory_adapter import InMemoryRecordStore
from reminder_scheduler.records.models import ContactFlag, Record

# Sunday, 10:00 UTC
SUNDAY_NOW = datetime(2024, 3, 10, 10, 0, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def _restore_root_logging():
    """setup_logging() replaces root handlers; put pytest's back afterwards."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers = handlers
    root.setLevel(level)


@pytest.fixture
def now() -> datetime:
    return SUNDAY_NOW


@pytest.fixture
def clock(now: datetime) -> FixedClock:
    return FixedClock(now)


@pytest.fixture
def make_record(now: datetime) -> Callable[..., Record]:
    """Factory for records due ``days`` days after ``now`` (or on ``due``)."""

    counter = {"n": 0}

    def _make(
        days: int | None = None,
        *,
        due: Any = None,
        record_id: str | None = None,
        flag: ContactFlag | None = ContactFlag.NEEDS_CONTACT,
        **fields: Any,
    ) -> Record:
        counter["n"] += 1
        if due is None and days is not None:
            due = (now.date() + timedelta(days=days)).isoformat()
        fields.setdefault("name", f"Customer {counter['n']}")
        fields.setdefault("phone_number", f"+1415555{counter['n']:04d}")
        return Record(
            id=record_id or str(counter["n"]),
            due_date=due,
            flag=flag,
            **fields,
        )

    return _make


@pytest.fixture
def policy() -> EligibilityPolicy:
    return EligibilityPolicy(
        PolicySettings(lead_days=5, weekend_fallback=True, callback_window=CallbackWindow())
    )


@pytest.fixture
def store() -> InMemoryRecordStore:
    return InMemoryRecordStore()


@pytest.fixture
def notifier() -> MockNotifier:
    return MockNotifier()


@pytest.fixture
def tracker() -> SnapshotTracker:
    return SnapshotTracker()


@pytest.fixture
def reconciliation(
    store: InMemoryRecordStore,
    policy: EligibilityPolicy,
    clock: FixedClock,
    notifier: MockNotifier,
    tracker: SnapshotTracker,
) -> ReconciliationRun:
    counter = iter(range(1, 10_000))
    return ReconciliationRun(
        store=store,
        policy=policy,
        clock=clock,
        notifier=notifier,
        options=RunOptions(place_calls=True, voice_callback_url="https://example.com/twiml"),
        tracker=tracker,
        run_id_factory=lambda: f"run-{next(counter)}",
    )
