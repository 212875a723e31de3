"""
Parsing of provider-supplied values: due dates, callback times, flags.

Every parser returns None on input it cannot understand; callers decide what
an unparseable value means.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, timezone, tzinfo
from enum import Enum
from typing import Any

from reminder_scheduler.records.models import ContactFlag

SECONDS_PER_DAY = 24 * 60 * 60

# Epoch values above this are milliseconds (year 5138 in seconds)
_EPOCH_MS_THRESHOLD = 100_000_000_000

_NUMERIC_PATTERN = re.compile(r"^-?\d+(\.\d+)?$")

# YYYYMMDD; takes precedence over epoch seconds, which only reach 8 digits before 1974
_COMPACT_DATE_PATTERN = re.compile(r"^\d{8}$")

_DATE_FORMATS = (
    "%m/%d/%Y",
    "%Y/%m/%d",
    "%d %B %Y",
    "%d %b %Y",
    "%B %d, %Y",
    "%b %d, %Y",
)

# 14:30, 14:30:15, 2:30 PM, 2PM, 12:05 a.m.
_TIME_PATTERN = re.compile(
    r"^\s*(?P<hour>\d{1,2})(?::(?P<minute>\d{2}))?(?::(?P<second>\d{2}))?"
    r"\s*(?P<marker>[AaPp]\.?\s*[Mm]\.?)?\s*$"
)

_TRUE_STRINGS = {"1", "true", "yes", "y", "on"}
_FALSE_STRINGS = {"0", "false", "no", "n", "off"}


def coerce_bool(value: Any) -> bool | None:
    """Interpret a provider boolean (true/false, 1/0 and their strings)."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        if value in (0, 1):
            return bool(value)
        return None
    if isinstance(value, str):
        v = value.strip().lower()
        if v in _TRUE_STRINGS:
            return True
        if v in _FALSE_STRINGS:
            return False
    return None


def _from_epoch(value: float, tz: tzinfo) -> date | None:
    if value > _EPOCH_MS_THRESHOLD:
        value = value / 1000
    try:
        return datetime.fromtimestamp(value, tz).date()
    except (OverflowError, OSError, ValueError):
        return None


def parse_due_date(value: Any, tz: tzinfo = timezone.utc) -> date | None:
    """Parse a due date into a calendar date in the local offset ``tz``.

    Accepts date objects, ISO dates, ISO datetimes (aware values are
    converted to ``tz`` first), compact ``YYYYMMDD`` strings, a few common
    human formats and epoch seconds or milliseconds.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value.astimezone(tz).date() if value.tzinfo else value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, (int, float)):
        return _from_epoch(float(value), tz)
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None
    if _COMPACT_DATE_PATTERN.match(text):
        try:
            return datetime.strptime(text, "%Y%m%d").date()
        except ValueError:
            return None
    if _NUMERIC_PATTERN.match(text):
        return _from_epoch(float(text), tz)

    try:
        return date.fromisoformat(text)
    except ValueError:
        pass

    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00").replace("z", "+00:00"))
    except ValueError:
        parsed = None
    if parsed is not None:
        return parsed.astimezone(tz).date() if parsed.tzinfo else parsed.date()

    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def parse_callback_time(value: Any) -> int | None:
    """Parse a time of day into seconds since midnight (24-hour).

    A bare hour is only accepted together with an AM/PM marker.
    """
    if not isinstance(value, str):
        return None
    match = _TIME_PATTERN.match(value)
    if not match:
        return None

    hour = int(match.group("hour"))
    minute = int(match.group("minute") or 0)
    second = int(match.group("second") or 0)
    marker = match.group("marker")

    if minute > 59 or second > 59:
        return None

    if marker:
        if not 1 <= hour <= 12:
            return None
        is_pm = marker.lower().startswith("p")
        hour = hour % 12 + (12 if is_pm else 0)
    else:
        if match.group("minute") is None or hour > 23:
            return None

    return hour * 3600 + minute * 60 + second


def seconds_since_midnight(moment: datetime) -> int:
    return moment.hour * 3600 + moment.minute * 60 + moment.second


class FlagEncoding(str, Enum):
    """Wire encodings seen for the contact flag."""

    NUMERIC = "numeric"
    BOOLEAN = "boolean"


@dataclass(frozen=True)
class FlagCodec:
    """Translates the store's contact flag to and from ContactFlag.

    Stores disagree on polarity: ``callUser=1`` means "call now" in some and
    ``callUser=false`` means "eligible" in others. ``needs_contact_truthy``
    selects which truth value means NEEDS_CONTACT.
    """

    encoding: FlagEncoding = FlagEncoding.NUMERIC
    needs_contact_truthy: bool = True

    def decode(self, raw: Any) -> ContactFlag | None:
        if raw is None:
            return None
        truthy = coerce_bool(raw)
        if truthy is None:
            return None
        if truthy == self.needs_contact_truthy:
            return ContactFlag.NEEDS_CONTACT
        return ContactFlag.CONTACTED

    def encode(self, flag: ContactFlag) -> int | bool:
        truthy = (flag is ContactFlag.NEEDS_CONTACT) == self.needs_contact_truthy
        if self.encoding is FlagEncoding.NUMERIC:
            return int(truthy)
        return truthy
