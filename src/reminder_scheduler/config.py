"""
Application configuration with environment-driven settings.
"""

import os
from datetime import timedelta, timezone, tzinfo
from functools import lru_cache
from typing import Literal

from pydantic import Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from reminder_scheduler.scheduler.cadence import crontab_trigger
from reminder_scheduler.shared.exceptions import ConfigurationError

DEFAULT_MESSAGE_TEMPLATE = (
    "Hi {name}, this is a reminder that your payment is due on {due_date}. "
    "Please reply or call us if you have any questions."
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "reminder-scheduler"
    app_env: Literal["dev", "qa", "uat", "prod"] = "dev"
    debug: bool = False
    log_level: str = "INFO"
    port: int = Field(default=10000, ge=1, le=65535)

    # Record store
    store_provider: Literal["rest", "memory"] = Field(
        default="rest",
        description="rest talks to a MockAPI-style collection; memory is for local runs.",
    )
    store_base_url: str = Field(
        default="",
        description="Base URL of the record store, e.g. https://<id>.mockapi.io",
    )
    store_collection: str = Field(default="Calllist")
    store_timeout_seconds: float = Field(default=10.0, gt=0, le=120)
    store_update_method: Literal["PUT", "PATCH"] = "PUT"

    # Wire field names of the record store
    store_field_id: str = "id"
    store_field_name: str = "name"
    store_field_first_name: str = "firstName"
    store_field_last_name: str = "lastName"
    store_field_phone: str = "phoneNumber"
    store_field_due_date: str = "paymentduedate"
    store_field_flag: str = "callUser"
    store_field_do_not_call: str = Field(
        default="doNotCall,wrongNumber",
        description="Comma-separated exclusion fields; any truthy value excludes the record.",
    )
    store_field_callback_time: str = "callbackTime"
    store_field_callback_active: str = "isCallbackActive"
    store_field_fallback: str = "smsRequired"

    # Contact flag encoding at the store boundary
    flag_encoding: Literal["numeric", "boolean"] = "numeric"
    flag_needs_contact_truthy: bool = Field(
        default=True,
        description="True when 1/true means 'needs contact' (callUser=1).",
    )

    # Clock
    local_utc_offset_minutes: int = Field(default=0, ge=-720, le=840)

    # Scheduler
    scheduler_enabled: bool = Field(
        default=True,
        description="Start the background reconciliation loop at app startup.",
    )
    schedule_interval_seconds: int = Field(
        default=6 * 60 * 60,
        ge=5,
        le=7 * 24 * 60 * 60,
        description="Fixed cadence between scheduled runs.",
    )
    schedule_cron: str = Field(
        default="",
        description="Crontab expression (minute hour day month day_of_week). Overrides the interval.",
    )
    overlap_policy: Literal["reject", "queue"] = "reject"
    manual_detection_enabled: bool = True

    # Eligibility policy
    reminder_lead_days: int = Field(default=5, ge=0, le=60)
    weekend_fallback_enabled: bool = True
    callback_mode: Literal["disabled", "window", "exact"] = "window"
    callback_early_seconds: int = Field(default=30, ge=0, le=3600)
    callback_late_grace_seconds: int = Field(default=60, ge=0, le=3600)

    # Outbound content
    message_template: str = DEFAULT_MESSAGE_TEMPLATE

    @field_validator("store_base_url", mode="before")
    @classmethod
    def strip_base_url(cls, v: str) -> str:
        return v.strip().rstrip("/") if isinstance(v, str) else v

    @field_validator("schedule_cron")
    @classmethod
    def validate_cron(cls, v: str) -> str:
        v = v.strip()
        if v:
            try:
                crontab_trigger(v)
            except ValueError as e:
                raise ValueError(f"Invalid crontab expression {v!r}: {e}") from e
        return v

    @model_validator(mode="after")
    def validate_store(self) -> "Settings":
        if self.store_provider == "rest" and not self.store_base_url:
            raise ValueError("STORE_BASE_URL is required when STORE_PROVIDER=rest")
        return self

    @property
    def local_timezone(self) -> tzinfo:
        """Fixed local offset used for calendar and time-of-day comparisons."""
        return timezone(timedelta(minutes=self.local_utc_offset_minutes))

    @property
    def do_not_call_fields(self) -> list[str]:
        return [f.strip() for f in self.store_field_do_not_call.split(",") if f.strip()]

    @property
    def collection_url(self) -> str:
        return f"{self.store_base_url}/{self.store_collection.strip('/')}"


def load_settings(**overrides: object) -> Settings:
    """Build settings, turning validation failures into ConfigurationError."""
    try:
        return Settings(**overrides)  # type: ignore[arg-type]
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid configuration: {e}",
            error_code="INVALID_CONFIGURATION",
            details={"errors": e.errors(include_url=False)},
        ) from e


@lru_cache(maxsize=1)
def _get_settings_cached() -> Settings:
    return load_settings()


def get_settings() -> Settings:
    # Environment is patched per test; never serve a frozen instance there.
    if os.environ.get("PYTEST_CURRENT_TEST"):
        return load_settings()
    return _get_settings_cached()
