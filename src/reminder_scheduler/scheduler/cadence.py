"""
Run cadences: a fixed interval or a crontab expression.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone, tzinfo
from typing import TYPE_CHECKING

from apscheduler.triggers.cron import CronTrigger

from reminder_scheduler.shared.exceptions import ConfigurationError

if TYPE_CHECKING:
    from reminder_scheduler.config import Settings

# crontab numbering: 0 and 7 are Sunday
_CRONTAB_WEEKDAYS = ("sun", "mon", "tue", "wed", "thu", "fri", "sat", "sun")

_NUMERIC_WEEKDAY_TOKEN = re.compile(r"^(?:(?P<first>\d+)(?:-(?P<last>\d+))?|\*)(?:/(?P<step>\d+))?$")


def _crontab_day_of_week(field: str) -> str:
    """Rewrite numeric crontab weekdays as day names.

    APScheduler counts weekdays from Monday, so numbers are expanded into an
    explicit list of names (``1-5`` becomes ``mon,tue,wed,thu,fri``). Named
    tokens and a bare ``*`` are passed through unchanged.
    """
    names: list[str] = []
    for token in field.split(","):
        match = _NUMERIC_WEEKDAY_TOKEN.match(token)
        if token == "*" or not match:
            names.append(token)
            continue

        step = int(match.group("step") or 1)
        if match.group("first") is None:
            first, last = 0, 6
        else:
            first = int(match.group("first"))
            if match.group("last") is not None:
                last = int(match.group("last"))
            else:
                last = 7 if match.group("step") else first

        if step < 1 or not 0 <= first <= last <= 7:
            raise ValueError(f"Invalid day-of-week value {token!r}")
        names.extend(_CRONTAB_WEEKDAYS[day] for day in range(first, last + 1, step))

    return ",".join(dict.fromkeys(names))


def crontab_trigger(expression: str, tz: tzinfo = timezone.utc) -> CronTrigger:
    """Build a trigger from a 5-field crontab expression with crontab weekday numbering."""
    fields = expression.split()
    if len(fields) != 5:
        raise ValueError(f"Wrong number of fields; got {len(fields)}, expected 5")
    minute, hour, day, month, day_of_week = fields
    return CronTrigger(
        minute=minute,
        hour=hour,
        day=day,
        month=month,
        day_of_week=_crontab_day_of_week(day_of_week),
        timezone=tz,
    )


class Cadence(ABC):
    @abstractmethod
    def next_run_after(self, now: datetime) -> datetime:
        """Instant of the next scheduled run strictly after ``now``."""
        ...


class IntervalCadence(Cadence):
    def __init__(self, seconds: float) -> None:
        if seconds <= 0:
            raise ValueError("interval must be > 0")
        self.seconds = seconds

    def next_run_after(self, now: datetime) -> datetime:
        return now + timedelta(seconds=self.seconds)

    def __repr__(self) -> str:
        return f"IntervalCadence(seconds={self.seconds})"


class CronCadence(Cadence):
    """Crontab cadence (minute hour day month day_of_week) in a local offset."""

    def __init__(self, expression: str, tz: tzinfo = timezone.utc) -> None:
        self.expression = expression
        self._trigger = crontab_trigger(expression, tz)

    def next_run_after(self, now: datetime) -> datetime:
        # APScheduler treats 'now' as a candidate; push past it for "strictly after".
        fire_time = self._trigger.get_next_fire_time(None, now + timedelta(microseconds=1))
        if fire_time is None:
            raise RuntimeError(f"Cron expression {self.expression!r} has no future fire time")
        return fire_time

    def __repr__(self) -> str:
        return f"CronCadence(expression={self.expression!r})"


def build_cadence(settings: Settings) -> Cadence:
    try:
        if settings.schedule_cron:
            return CronCadence(settings.schedule_cron, tz=settings.local_timezone)
        return IntervalCadence(settings.schedule_interval_seconds)
    except ValueError as e:
        raise ConfigurationError(f"Invalid schedule: {e}", error_code="INVALID_SCHEDULE") from e
