"""Tests for run cadences."""

from datetime import datetime, timedelta, timezone

import pytest

from reminder_scheduler.config import Settings
from reminder_scheduler.scheduler.cadence import CronCadence, IntervalCadence, build_cadence

NOW = datetime(2024, 3, 10, 10, 0, 0, tzinfo=timezone.utc)


class TestIntervalCadence:
    def test_next_run(self) -> None:
        cadence = IntervalCadence(6 * 60 * 60)

        assert cadence.next_run_after(NOW) == NOW + timedelta(hours=6)

    def test_non_positive_interval(self) -> None:
        with pytest.raises(ValueError):
            IntervalCadence(0)


class TestCronCadence:
    def test_next_weekday_morning(self) -> None:
        # Sunday 10:00 -> Monday 09:00
        cadence = CronCadence("0 9 * * mon-fri")

        assert cadence.next_run_after(NOW) == datetime(2024, 3, 11, 9, 0, tzinfo=timezone.utc)

    def test_strictly_after_now(self) -> None:
        cadence = CronCadence("0 10 * * *")

        assert cadence.next_run_after(NOW) == datetime(2024, 3, 11, 10, 0, tzinfo=timezone.utc)

    def test_evaluated_in_local_offset(self) -> None:
        local = timezone(timedelta(hours=2))
        cadence = CronCadence("0 13 * * *", tz=local)

        # 10:00 UTC is 12:00 local; next 13:00 local is 11:00 UTC
        fire = cadence.next_run_after(NOW)

        assert fire == datetime(2024, 3, 10, 11, 0, tzinfo=timezone.utc)

    @pytest.mark.parametrize(
        ("expression", "expected"),
        [
            ("0 9 * * 1-5", datetime(2024, 3, 11, 9, 0, tzinfo=timezone.utc)),
            ("0 9 * * 0", datetime(2024, 3, 17, 9, 0, tzinfo=timezone.utc)),
            ("0 9 * * 7", datetime(2024, 3, 17, 9, 0, tzinfo=timezone.utc)),
            ("0 9 * * 5-7", datetime(2024, 3, 15, 9, 0, tzinfo=timezone.utc)),
            ("0 9 * * 3,6", datetime(2024, 3, 13, 9, 0, tzinfo=timezone.utc)),
            ("0 9 * * */2", datetime(2024, 3, 12, 9, 0, tzinfo=timezone.utc)),
        ],
    )
    def test_numeric_day_of_week_uses_crontab_numbering(self, expression: str, expected: datetime) -> None:
        # Sunday 10:00; 0 and 7 are Sunday, 1 is Monday
        assert CronCadence(expression).next_run_after(NOW) == expected

    def test_invalid_expression(self) -> None:
        with pytest.raises(ValueError):
            CronCadence("not a cron")

    @pytest.mark.parametrize("expression", ["0 9 * * 8", "0 9 * * 5-2", "0 9 * * 1/0"])
    def test_out_of_range_day_of_week(self, expression: str) -> None:
        with pytest.raises(ValueError):
            CronCadence(expression)


class TestBuildCadence:
    def test_interval_by_default(self) -> None:
        cadence = build_cadence(Settings(store_provider="memory", schedule_interval_seconds=60, schedule_cron=""))

        assert isinstance(cadence, IntervalCadence)
        assert cadence.seconds == 60

    def test_cron_takes_precedence(self) -> None:
        settings = Settings(
            store_provider="memory",
            schedule_interval_seconds=60,
            schedule_cron="*/15 * * * *",
            local_utc_offset_minutes=60,
        )

        cadence = build_cadence(settings)

        assert isinstance(cadence, CronCadence)
        assert cadence.expression == "*/15 * * * *"
