"""
Notifier factory.

Single source of truth for configuration: NotifierConfig (pydantic-settings),
which loads from OS env + .env. Never read raw os.getenv("TWILIO_*") here.
"""

from __future__ import annotations

import logging

from reminder_scheduler.notify.config import NotifierConfig, ProviderType, get_notifier_config
from reminder_scheduler.notify.interface import Notifier
from reminder_scheduler.notify.mock_adapter import MockNotifier
from reminder_scheduler.notify.twilio_adapter import TwilioNotifier

logger = logging.getLogger(__name__)


def _mask(s: str, keep: int = 6) -> str:
    if not s:
        return ""
    if len(s) <= keep:
        return "*" * len(s)
    return f"{s[:keep]}***"


def build_notifier(config: NotifierConfig | None = None) -> Notifier | None:
    """Create the configured notifier, or None when notifications are disabled."""
    cfg = config or get_notifier_config()

    logger.info(
        "Notifier config resolved",
        extra={
            "provider_type": cfg.provider_type.value,
            "twilio_account_sid": _mask(cfg.twilio_account_sid),
            "twilio_from_number": cfg.twilio_from_number,
            "place_calls": cfg.place_calls,
            "timeout_seconds": cfg.timeout_seconds,
        },
    )

    if cfg.provider_type == ProviderType.NONE:
        return None

    if cfg.provider_type == ProviderType.TWILIO:
        return TwilioNotifier(cfg)

    if cfg.provider_type == ProviderType.MOCK:
        return MockNotifier()

    raise ValueError(f"Unsupported notifier provider_type: {cfg.provider_type}")
