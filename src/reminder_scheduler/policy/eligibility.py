"""
Eligibility policy: maps (record, now) to a Decision.

Rules, in order:
1. do-not-call records are skipped, always.
2. Active callbacks are matched on time of day (when the callback strategy is on).
3. Unparseable due dates and undecodable flags are INVALID.
4. Due within [0, lead_days] and not yet contacted: TRIGGER, or
   WEEKEND_FALLBACK when the reminder anchor (due date - lead_days) falls on
   a Saturday or Sunday.
5. Overdue and already contacted: RESET, re-arming the record.
6. Anything else is skipped as not in window.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone

from reminder_scheduler.config import Settings
from reminder_scheduler.policy.matching import CallbackWindow, build_callback_window
from reminder_scheduler.policy.models import Action, Decision, InvalidReason, SkipReason
from reminder_scheduler.records.models import ContactFlag, Record
from reminder_scheduler.records.parsing import (
    parse_callback_time,
    parse_due_date,
    seconds_since_midnight,
)

SATURDAY = 5
SUNDAY = 6


@dataclass(frozen=True)
class PolicySettings:
    lead_days: int = 5
    weekend_fallback: bool = True
    callback_window: CallbackWindow | None = None

    def __post_init__(self) -> None:
        if self.lead_days < 0:
            raise ValueError("lead_days must be >= 0")

    @classmethod
    def from_settings(cls, settings: Settings) -> "PolicySettings":
        return cls(
            lead_days=settings.reminder_lead_days,
            weekend_fallback=settings.weekend_fallback_enabled,
            callback_window=build_callback_window(
                settings.callback_mode,
                early_trigger_seconds=settings.callback_early_seconds,
                late_grace_seconds=settings.callback_late_grace_seconds,
            ),
        )


def days_until(due: date, today: date) -> int:
    """Whole calendar days from ``today`` to ``due``; negative when overdue."""
    return (due - today).days


def reminder_anchor(due: date, lead_days: int) -> date:
    return due - timedelta(days=lead_days)


def is_weekend(day: date) -> bool:
    return day.weekday() in (SATURDAY, SUNDAY)


class EligibilityPolicy:
    """Pure decision function over one record snapshot.

    ``now`` must be an aware datetime already expressed in the local offset;
    its calendar date is "today" for due-date comparisons.
    """

    def __init__(self, settings: PolicySettings | None = None) -> None:
        self._settings = settings or PolicySettings()

    @property
    def settings(self) -> PolicySettings:
        return self._settings

    def evaluate(self, record: Record, now: datetime) -> Decision:
        if record.do_not_call:
            return Decision.skip(SkipReason.EXCLUDED)

        window = self._settings.callback_window
        if window is not None and record.callback_active and record.callback_time:
            return self._evaluate_callback(record, now, window)

        due = parse_due_date(record.due_date, now.tzinfo or timezone.utc)
        if due is None:
            return Decision.invalid(InvalidReason.BAD_DATE)
        if record.flag is None:
            return Decision.invalid(InvalidReason.BAD_FLAG)

        remaining = days_until(due, now.date())
        lead_days = self._settings.lead_days

        if 0 <= remaining <= lead_days and record.flag is ContactFlag.NEEDS_CONTACT:
            if self._settings.weekend_fallback and is_weekend(reminder_anchor(due, lead_days)):
                return Decision.weekend_fallback(days_until_due=remaining)
            return Decision.trigger(Action.VOICE_CALL, days_until_due=remaining)

        if remaining < 0 and record.flag is ContactFlag.CONTACTED:
            return Decision.reset(days_until_due=remaining)

        return Decision.skip(SkipReason.NOT_IN_WINDOW, days_until_due=remaining)

    @staticmethod
    def _evaluate_callback(record: Record, now: datetime, window: CallbackWindow) -> Decision:
        callback_seconds = parse_callback_time(record.callback_time)
        if callback_seconds is None:
            return Decision.invalid(InvalidReason.BAD_TIME)
        if window.matches(callback_seconds, seconds_since_midnight(now)):
            return Decision.trigger(Action.CALLBACK_CALL)
        return Decision.skip(SkipReason.NOT_IN_WINDOW)
