"""
Record store factory.
"""

from __future__ import annotations

import logging

from reminder_scheduler.config import Settings
from reminder_scheduler.records.interface import RecordStore
from reminder_scheduler.records.memory_adapter import InMemoryRecordStore
from reminder_scheduler.records.rest_adapter import RestRecordStore

logger = logging.getLogger(__name__)


def build_record_store(settings: Settings) -> RecordStore:
    logger.info(
        "Record store resolved",
        extra={
            "store_provider": settings.store_provider,
            "collection_url": settings.collection_url if settings.store_provider == "rest" else None,
            "timeout_seconds": settings.store_timeout_seconds,
        },
    )

    if settings.store_provider == "rest":
        return RestRecordStore.from_settings(settings)

    if settings.store_provider == "memory":
        return InMemoryRecordStore()

    raise ValueError(f"Unsupported store_provider: {settings.store_provider}")
