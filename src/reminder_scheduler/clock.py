"""
Clock abstractions.

Policy and run logic receive the current time through an injected callable so
tests can pin it.
"""

from __future__ import annotations

from datetime import datetime, timezone, tzinfo
from typing import Callable

Clock = Callable[[], datetime]


class LocalClock:
    """Wall clock expressed in a fixed local offset."""

    def __init__(self, tz: tzinfo = timezone.utc) -> None:
        self._tz = tz

    @property
    def tz(self) -> tzinfo:
        return self._tz

    def __call__(self) -> datetime:
        return datetime.now(self._tz)


class FixedClock:
    """Clock frozen at a given instant. Naive datetimes are taken as UTC."""

    def __init__(self, now: datetime) -> None:
        self.set(now)

    def set(self, now: datetime) -> None:
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        self._now = now

    def __call__(self) -> datetime:
        return self._now
