"""
Time-of-day matching strategies for callback records.
"""

from __future__ import annotations

from dataclasses import dataclass

from reminder_scheduler.records.parsing import SECONDS_PER_DAY

_HALF_DAY = SECONDS_PER_DAY // 2


@dataclass(frozen=True)
class CallbackWindow:
    """Fires when the callback time is at most ``early_trigger_seconds`` ahead
    of now or at most ``late_grace_seconds`` behind it.

    The tolerance absorbs scheduler jitter; with both set to 0 only an exact
    second match fires.
    """

    early_trigger_seconds: int = 30
    late_grace_seconds: int = 60

    def __post_init__(self) -> None:
        if self.early_trigger_seconds < 0 or self.late_grace_seconds < 0:
            raise ValueError("callback tolerances must be >= 0")

    @classmethod
    def exact(cls) -> "CallbackWindow":
        return cls(early_trigger_seconds=0, late_grace_seconds=0)

    @staticmethod
    def offset(callback_seconds: int, now_seconds: int) -> int:
        """Signed seconds from now until the callback, wrapped into (-12h, 12h]."""
        delta = (callback_seconds - now_seconds) % SECONDS_PER_DAY
        if delta > _HALF_DAY:
            delta -= SECONDS_PER_DAY
        return delta

    def matches(self, callback_seconds: int, now_seconds: int) -> bool:
        delta = self.offset(callback_seconds, now_seconds)
        return -self.late_grace_seconds <= delta <= self.early_trigger_seconds


def build_callback_window(
    mode: str,
    early_trigger_seconds: int = 30,
    late_grace_seconds: int = 60,
) -> CallbackWindow | None:
    """Select the callback strategy by configuration; None disables it."""
    if mode == "disabled":
        return None
    if mode == "exact":
        return CallbackWindow.exact()
    if mode == "window":
        return CallbackWindow(
            early_trigger_seconds=early_trigger_seconds,
            late_grace_seconds=late_grace_seconds,
        )
    raise ValueError(f"Unsupported callback mode: {mode}")
