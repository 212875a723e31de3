"""
Twilio notifier adapter.

Places calls through Calls.json and sends SMS through Messages.json using
the REST API with HTTP basic auth (account SID, auth token).
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

import httpx

from reminder_scheduler.notify.config import NotifierConfig
from reminder_scheduler.notify.interface import (
    CallPlacementError,
    Channel,
    MessageDeliveryError,
    NotificationReceipt,
    Notifier,
    NotifierError,
)

logger = logging.getLogger(__name__)


class TwilioNotifier(Notifier):
    """Twilio notifier adapter using a synchronous httpx client."""

    def __init__(
        self,
        config: NotifierConfig,
        http_client: httpx.Client | None = None,
    ) -> None:
        self._config = config
        self._http_client = http_client
        self._owns_client = http_client is None

    def _get_client(self) -> httpx.Client:
        if self._http_client is None:
            self._http_client = httpx.Client(timeout=httpx.Timeout(self._config.timeout_seconds))
        return self._http_client

    def close(self) -> None:
        if self._owns_client and self._http_client is not None:
            self._http_client.close()
            self._http_client = None

    def _get_auth(self) -> tuple[str, str]:
        return (self._config.twilio_account_sid, self._config.twilio_auth_token)

    def _get_api_url(self, endpoint: str) -> str:
        base = self._config.twilio_api_base_url.rstrip("/")
        return f"{base}/2010-04-01/Accounts/{self._config.twilio_account_sid}{endpoint}"

    def place_call(self, destination: str, callback_url: str) -> NotificationReceipt:
        payload = {
            "To": destination,
            "From": self._config.twilio_from_number,
            "Url": callback_url,
            "Method": "POST",
        }
        logger.info("Placing Twilio call", extra={"to": destination})
        data = self._post("/Calls.json", payload, CallPlacementError)
        return self._receipt(data, Channel.VOICE, destination)

    def send_message(self, destination: str, body: str) -> NotificationReceipt:
        payload = {
            "To": destination,
            "From": self._config.twilio_from_number,
            "Body": body,
        }
        logger.info("Sending Twilio message", extra={"to": destination})
        data = self._post("/Messages.json", payload, MessageDeliveryError)
        return self._receipt(data, Channel.SMS, destination)

    def _post(
        self,
        endpoint: str,
        payload: dict[str, str],
        error_cls: type[NotifierError],
    ) -> dict[str, Any]:
        client = self._get_client()
        try:
            response = client.post(
                self._get_api_url(endpoint),
                data=payload,
                auth=self._get_auth(),
            )
        except httpx.HTTPError as e:
            logger.exception(
                "HTTP error during Twilio request",
                extra={"endpoint": endpoint, "to": payload.get("To")},
            )
            raise error_cls(
                message=f"HTTP error: {e!s}",
                error_code="HTTP_ERROR",
            ) from e

        if response.status_code >= 400:
            try:
                error_data = response.json() if response.content else {}
            except ValueError:
                error_data = {"body": response.text}
            if not isinstance(error_data, dict):
                error_data = {"body": error_data}
            logger.error(
                "Twilio request failed",
                extra={
                    "endpoint": endpoint,
                    "status_code": response.status_code,
                    "error": error_data,
                },
            )
            raise error_cls(
                message=error_data.get("message", f"Twilio API error: {response.status_code}"),
                error_code=str(error_data.get("code", response.status_code)),
                provider_response=error_data,
            )

        # Accepted by Twilio from here on; an odd body must not fail the notification
        try:
            data = response.json() if response.content else {}
        except ValueError:
            logger.warning(
                "Twilio accepted request with a non-JSON body",
                extra={"endpoint": endpoint, "status_code": response.status_code},
            )
            return {"body": response.text}
        return data if isinstance(data, dict) else {"body": data}

    @staticmethod
    def _receipt(data: dict[str, Any], channel: Channel, destination: str) -> NotificationReceipt:
        created_at = datetime.now(timezone.utc)
        if data.get("date_created"):
            try:
                created_at = datetime.fromisoformat(data["date_created"].replace("Z", "+00:00"))
            except (ValueError, TypeError):
                # Twilio sends RFC 2822 dates on some endpoints
                pass
        return NotificationReceipt(
            receipt_id=str(data.get("sid") or ""),
            channel=channel,
            destination=destination,
            created_at=created_at,
            raw_response=data,
        )
