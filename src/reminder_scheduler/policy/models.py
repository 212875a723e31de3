"""
Decision model produced by the eligibility policy.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class DecisionKind(str, Enum):
    TRIGGER = "trigger"
    RESET = "reset"
    WEEKEND_FALLBACK = "weekend_fallback"
    SKIP = "skip"
    INVALID = "invalid"


class Action(str, Enum):
    """Outbound action attached to TRIGGER and WEEKEND_FALLBACK."""

    VOICE_CALL = "voice_call"
    CALLBACK_CALL = "callback_call"
    TEXT_MESSAGE = "text_message"


class SkipReason(str, Enum):
    EXCLUDED = "excluded"
    NOT_IN_WINDOW = "not_in_window"


class InvalidReason(str, Enum):
    BAD_DATE = "bad_date"
    BAD_TIME = "bad_time"
    BAD_FLAG = "bad_flag"


@dataclass(frozen=True)
class Decision:
    """Tagged decision for one record at one instant."""

    kind: DecisionKind
    action: Action | None = None
    reason: SkipReason | InvalidReason | None = None
    days_until_due: int | None = None

    @classmethod
    def trigger(cls, action: Action = Action.VOICE_CALL, days_until_due: int | None = None) -> "Decision":
        return cls(DecisionKind.TRIGGER, action=action, days_until_due=days_until_due)

    @classmethod
    def reset(cls, days_until_due: int | None = None) -> "Decision":
        return cls(DecisionKind.RESET, days_until_due=days_until_due)

    @classmethod
    def weekend_fallback(cls, days_until_due: int | None = None) -> "Decision":
        return cls(
            DecisionKind.WEEKEND_FALLBACK,
            action=Action.TEXT_MESSAGE,
            days_until_due=days_until_due,
        )

    @classmethod
    def skip(cls, reason: SkipReason, days_until_due: int | None = None) -> "Decision":
        return cls(DecisionKind.SKIP, reason=reason, days_until_due=days_until_due)

    @classmethod
    def invalid(cls, reason: InvalidReason) -> "Decision":
        return cls(DecisionKind.INVALID, reason=reason)

    def describe(self) -> str:
        if self.action is not None:
            return f"{self.kind.value}({self.action.value})"
        if self.reason is not None:
            return f"{self.kind.value}({self.reason.value})"
        return self.kind.value
