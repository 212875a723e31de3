"""
Tests for record models, value parsing, flag codec and wire mapping.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from reminder_scheduler.records.mapping import RecordMapper
from reminder_scheduler.records.models import ContactFlag, Record, RecordPatch
from reminder_scheduler.records.parsing import (
    FlagCodec,
    FlagEncoding,
    coerce_bool,
    parse_callback_time,
    parse_due_date,
    seconds_since_midnight,
)


class TestRecordPatch:
    def test_empty_patch(self) -> None:
        assert RecordPatch().is_empty

    def test_apply_only_set_fields(self) -> None:
        record = Record(id="1", flag=ContactFlag.NEEDS_CONTACT, fallback_required=True)

        updated = RecordPatch(flag=ContactFlag.CONTACTED).apply_to(record)

        assert updated.flag is ContactFlag.CONTACTED
        assert updated.fallback_required is True
        assert record.flag is ContactFlag.NEEDS_CONTACT


class TestCoerceBool:
    @pytest.mark.parametrize("value", [True, 1, "1", "true", "TRUE", " yes ", "on"])
    def test_truthy(self, value) -> None:
        assert coerce_bool(value) is True

    @pytest.mark.parametrize("value", [False, 0, "0", "false", "No", "off"])
    def test_falsy(self, value) -> None:
        assert coerce_bool(value) is False

    @pytest.mark.parametrize("value", [None, "", "maybe", 2, [], {}])
    def test_unknown(self, value) -> None:
        assert coerce_bool(value) is None


class TestParseDueDate:
    @pytest.mark.parametrize(
        "value",
        [
            "2024-03-15",
            "03/15/2024",
            "2024/03/15",
            "15 March 2024",
            "15 Mar 2024",
            "March 15, 2024",
            "2024-03-15T08:00:00",
            "2024-03-15T08:00:00Z",
            date(2024, 3, 15),
            datetime(2024, 3, 15, 8, 0),
        ],
    )
    def test_supported_formats(self, value) -> None:
        assert parse_due_date(value) == date(2024, 3, 15)

    def test_epoch_seconds_and_milliseconds(self) -> None:
        seconds = int(datetime(2024, 3, 15, 12, tzinfo=timezone.utc).timestamp())

        assert parse_due_date(seconds) == date(2024, 3, 15)
        assert parse_due_date(seconds * 1000) == date(2024, 3, 15)
        assert parse_due_date(str(seconds)) == date(2024, 3, 15)

    def test_compact_date_string(self) -> None:
        assert parse_due_date("20240315") == date(2024, 3, 15)

    def test_invalid_compact_date_string(self) -> None:
        assert parse_due_date("20240230") is None

    def test_aware_value_converted_to_local_offset(self) -> None:
        local = timezone(timedelta(hours=-5))

        assert parse_due_date("2024-03-15T02:00:00Z", local) == date(2024, 3, 14)

    @pytest.mark.parametrize("value", [None, "", "soon", "2024-02-30", True, [2024, 3, 15]])
    def test_unparseable(self, value) -> None:
        assert parse_due_date(value) is None


class TestParseCallbackTime:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("14:30", 14 * 3600 + 30 * 60),
            ("14:30:15", 14 * 3600 + 30 * 60 + 15),
            ("2:30 PM", 14 * 3600 + 30 * 60),
            ("2:30pm", 14 * 3600 + 30 * 60),
            ("2PM", 14 * 3600),
            ("12:05 a.m.", 5 * 60),
            ("12 PM", 12 * 3600),
            ("00:00", 0),
        ],
    )
    def test_valid(self, value: str, expected: int) -> None:
        assert parse_callback_time(value) == expected

    @pytest.mark.parametrize("value", ["14", "24:00", "12:60", "0 AM", "13:00 PM", "", None, 1430])
    def test_invalid(self, value) -> None:
        assert parse_callback_time(value) is None

    def test_seconds_since_midnight(self) -> None:
        assert seconds_since_midnight(datetime(2024, 3, 10, 1, 2, 3)) == 3723


class TestFlagCodec:
    def test_numeric_truthy_means_needs_contact(self) -> None:
        codec = FlagCodec(FlagEncoding.NUMERIC, needs_contact_truthy=True)

        assert codec.decode(1) is ContactFlag.NEEDS_CONTACT
        assert codec.decode("0") is ContactFlag.CONTACTED
        assert codec.encode(ContactFlag.NEEDS_CONTACT) == 1
        assert codec.encode(ContactFlag.CONTACTED) == 0

    def test_boolean_inverted_polarity(self) -> None:
        codec = FlagCodec(FlagEncoding.BOOLEAN, needs_contact_truthy=False)

        assert codec.decode(False) is ContactFlag.NEEDS_CONTACT
        assert codec.decode(True) is ContactFlag.CONTACTED
        assert codec.encode(ContactFlag.NEEDS_CONTACT) is False
        assert codec.encode(ContactFlag.CONTACTED) is True

    @pytest.mark.parametrize("raw", [None, "", "pending", 7])
    def test_undecodable(self, raw) -> None:
        assert FlagCodec().decode(raw) is None


class TestRecordMapper:
    def test_to_record_defaults(self) -> None:
        payload = {
            "id": 12,
            "name": "  Ada Lovelace ",
            "phoneNumber": "+14155550101",
            "paymentduedate": "2024-03-15",
            "callUser": 1,
            "doNotCall": False,
            "callbackTime": "10:00",
            "isCallbackActive": "true",
            "smsRequired": 0,
        }

        record = RecordMapper().to_record(payload)

        assert record == Record(
            id="12",
            name="Ada Lovelace",
            phone_number="+14155550101",
            due_date="2024-03-15",
            callback_time="10:00",
            flag=ContactFlag.NEEDS_CONTACT,
            do_not_call=False,
            callback_active=True,
            fallback_required=False,
        )

    def test_name_from_first_and_last(self) -> None:
        record = RecordMapper().to_record({"id": "1", "firstName": "Grace", "lastName": "Hopper"})

        assert record is not None
        assert record.name == "Grace Hopper"

    @pytest.mark.parametrize("field", ["doNotCall", "wrongNumber"])
    def test_any_exclusion_field_excludes(self, field: str) -> None:
        record = RecordMapper().to_record({"id": "1", field: "true"})

        assert record is not None
        assert record.do_not_call is True

    @pytest.mark.parametrize("payload", [None, "x", [], {}, {"id": ""}, {"id": None}])
    def test_payload_without_id(self, payload) -> None:
        assert RecordMapper().to_record(payload) is None

    def test_to_wire_only_changed_fields(self) -> None:
        mapper = RecordMapper()

        assert mapper.to_wire(RecordPatch(flag=ContactFlag.CONTACTED)) == {"callUser": 0}
        assert mapper.to_wire(RecordPatch(flag=ContactFlag.CONTACTED, fallback_required=True)) == {
            "callUser": 0,
            "smsRequired": True,
        }
        assert mapper.to_wire(RecordPatch(callback_active=False)) == {"isCallbackActive": False}
        assert mapper.to_wire(RecordPatch()) == {}

    def test_custom_field_names(self) -> None:
        mapper = RecordMapper(
            codec=FlagCodec(FlagEncoding.BOOLEAN, needs_contact_truthy=False),
            flag_field="called",
            due_date_field="due",
        )

        record = mapper.to_record({"id": "1", "due": "2024-03-15", "called": False})

        assert record is not None
        assert record.flag is ContactFlag.NEEDS_CONTACT
        assert record.due_date == "2024-03-15"
        assert mapper.to_wire(RecordPatch(flag=ContactFlag.CONTACTED)) == {"called": True}
