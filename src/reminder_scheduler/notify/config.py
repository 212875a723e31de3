"""
Notifier provider configuration.
"""

from enum import Enum

from pydantic import Field, ValidationError, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from reminder_scheduler.shared.exceptions import ConfigurationError


class ProviderType(str, Enum):
    """Supported notifier provider types."""

    NONE = "none"
    TWILIO = "twilio"
    MOCK = "mock"


class NotifierConfig(BaseSettings):
    """Notifier configuration from environment (NOTIFIER_ prefix)."""

    model_config = SettingsConfigDict(
        env_prefix="NOTIFIER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # "none": the flag flip is the trigger, read by an external voice system
    provider_type: ProviderType = Field(default=ProviderType.NONE)

    # Provider credentials
    twilio_account_sid: str = Field(default="")
    twilio_auth_token: str = Field(default="")
    twilio_from_number: str = Field(default="")
    twilio_api_base_url: str = Field(default="https://api.twilio.com")

    # URL the provider fetches call instructions (TwiML) from
    voice_callback_url: str = Field(default="")

    place_calls: bool = Field(
        default=True,
        description="Place voice calls for TRIGGER decisions; otherwise only flip the flag.",
    )
    timeout_seconds: float = Field(default=15.0, gt=0, le=120)

    @model_validator(mode="after")
    def validate_credentials(self) -> "NotifierConfig":
        if self.provider_type == ProviderType.TWILIO:
            missing = [
                name
                for name in ("twilio_account_sid", "twilio_auth_token", "twilio_from_number")
                if not getattr(self, name)
            ]
            if self.place_calls and not self.voice_callback_url:
                missing.append("voice_callback_url")
            if missing:
                raise ValueError(
                    "Twilio notifier requires " + ", ".join(f"NOTIFIER_{m.upper()}" for m in missing)
                )
        return self


def get_notifier_config(**overrides: object) -> NotifierConfig:
    try:
        return NotifierConfig(**overrides)  # type: ignore[arg-type]
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid notifier configuration: {e}",
            error_code="INVALID_CONFIGURATION",
        ) from e
