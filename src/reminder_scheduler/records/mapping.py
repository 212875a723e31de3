"""
Translation between the store's wire payloads and domain records.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from reminder_scheduler.config import Settings
from reminder_scheduler.records.models import Record, RecordPatch
from reminder_scheduler.records.parsing import FlagCodec, FlagEncoding, coerce_bool


@dataclass(frozen=True)
class RecordMapper:
    """Field mapping for one store. Defaults match the MockAPI call list."""

    codec: FlagCodec = field(default_factory=FlagCodec)
    id_field: str = "id"
    name_field: str = "name"
    first_name_field: str = "firstName"
    last_name_field: str = "lastName"
    phone_field: str = "phoneNumber"
    due_date_field: str = "paymentduedate"
    flag_field: str = "callUser"
    do_not_call_fields: tuple[str, ...] = ("doNotCall", "wrongNumber")
    callback_time_field: str = "callbackTime"
    callback_active_field: str = "isCallbackActive"
    fallback_field: str = "smsRequired"

    @classmethod
    def from_settings(cls, settings: Settings) -> "RecordMapper":
        return cls(
            codec=FlagCodec(
                encoding=FlagEncoding(settings.flag_encoding),
                needs_contact_truthy=settings.flag_needs_contact_truthy,
            ),
            id_field=settings.store_field_id,
            name_field=settings.store_field_name,
            first_name_field=settings.store_field_first_name,
            last_name_field=settings.store_field_last_name,
            phone_field=settings.store_field_phone,
            due_date_field=settings.store_field_due_date,
            flag_field=settings.store_field_flag,
            do_not_call_fields=tuple(settings.do_not_call_fields),
            callback_time_field=settings.store_field_callback_time,
            callback_active_field=settings.store_field_callback_active,
            fallback_field=settings.store_field_fallback,
        )

    def to_record(self, payload: Any) -> Record | None:
        """Build a Record from a wire item; None when it has no usable id."""
        if not isinstance(payload, dict):
            return None
        raw_id = payload.get(self.id_field)
        if raw_id is None or str(raw_id).strip() == "":
            return None

        callback_time = payload.get(self.callback_time_field)
        phone = payload.get(self.phone_field)
        return Record(
            id=str(raw_id),
            name=self._name(payload),
            phone_number=str(phone).strip() if phone not in (None, "") else None,
            due_date=payload.get(self.due_date_field),
            callback_time=str(callback_time) if callback_time not in (None, "") else None,
            flag=self.codec.decode(payload.get(self.flag_field)),
            do_not_call=any(coerce_bool(payload.get(f)) is True for f in self.do_not_call_fields),
            callback_active=coerce_bool(payload.get(self.callback_active_field)) is True,
            fallback_required=coerce_bool(payload.get(self.fallback_field)) is True,
        )

    def to_wire(self, patch: RecordPatch) -> dict[str, Any]:
        body: dict[str, Any] = {}
        if patch.flag is not None:
            body[self.flag_field] = self.codec.encode(patch.flag)
        if patch.fallback_required is not None:
            body[self.fallback_field] = patch.fallback_required
        if patch.callback_active is not None:
            body[self.callback_active_field] = patch.callback_active
        return body

    def _name(self, payload: dict[str, Any]) -> str | None:
        name = payload.get(self.name_field)
        if isinstance(name, str) and name.strip():
            return name.strip()
        parts = [
            str(payload[f]).strip()
            for f in (self.first_name_field, self.last_name_field)
            if payload.get(f) not in (None, "")
        ]
        return " ".join(parts) or None
