"""
Unit tests for RRULE generation.
"""

from datetime import datetime, timedelta, timezone

from services.meetings.models.recurrence import Recurrence, RecurrenceType
from services.meetings.services.rrule import generate_rrule


class TestGenerateRRule:
    """Test translation of recurrence patterns into RFC5545 rules."""

    def test_daily_with_count(self):
        recurrence = Recurrence(type=RecurrenceType.daily, repeat_interval=1, end_times=10)
        assert generate_rrule(recurrence) == "FREQ=DAILY;COUNT=10"

    def test_daily_with_interval(self):
        recurrence = Recurrence(type=RecurrenceType.daily, repeat_interval=3)
        assert generate_rrule(recurrence) == "FREQ=DAILY;INTERVAL=3"

    def test_weekly_with_days(self):
        recurrence = Recurrence(
            type=RecurrenceType.weekly,
            repeat_interval=2,
            weekly_days="2,4,6",
            end_times=20,
        )
        assert (
            generate_rrule(recurrence)
            == "FREQ=WEEKLY;INTERVAL=2;BYDAY=MO,WE,FR;COUNT=20"
        )

    def test_weekly_preserves_input_order(self):
        recurrence = Recurrence(type=RecurrenceType.weekly, weekly_days="6,2")
        assert generate_rrule(recurrence) == "FREQ=WEEKLY;BYDAY=FR,MO"

    def test_weekly_drops_unmappable_days(self):
        recurrence = Recurrence(type=RecurrenceType.weekly, weekly_days="2,9,4")
        assert generate_rrule(recurrence) == "FREQ=WEEKLY;BYDAY=MO,WE"

    def test_weekly_without_mappable_days_omits_byday(self):
        recurrence = Recurrence(type=RecurrenceType.weekly, weekly_days="0,8")
        assert generate_rrule(recurrence) == "FREQ=WEEKLY"

    def test_weekly_without_days(self):
        recurrence = Recurrence(type=RecurrenceType.weekly)
        assert generate_rrule(recurrence) == "FREQ=WEEKLY"

    def test_monthly_by_day(self):
        recurrence = Recurrence(type=RecurrenceType.monthly, monthly_day=15, end_times=12)
        assert generate_rrule(recurrence) == "FREQ=MONTHLY;BYMONTHDAY=15;COUNT=12"

    def test_monthly_by_nth_weekday_with_until(self):
        recurrence = Recurrence(
            type=RecurrenceType.monthly,
            monthly_week=2,
            monthly_week_day=3,
            end_date_time=datetime(2024, 12, 31, 23, 59, 59, tzinfo=timezone.utc),
        )
        rrule = generate_rrule(recurrence)
        assert rrule.startswith("FREQ=MONTHLY;BYDAY=2TU;UNTIL=")
        assert rrule == "FREQ=MONTHLY;BYDAY=2TU;UNTIL=20241231T235959Z"

    def test_monthly_without_qualifier(self):
        recurrence = Recurrence(type=RecurrenceType.monthly, repeat_interval=3)
        assert generate_rrule(recurrence) == "FREQ=MONTHLY;INTERVAL=3"

    def test_monthly_with_unmappable_weekday(self):
        """Only reachable with unvalidated data."""
        recurrence = Recurrence.model_construct(
            type=RecurrenceType.monthly, monthly_week=2, monthly_week_day=9
        )
        assert generate_rrule(recurrence) == "FREQ=MONTHLY"

    def test_until_is_converted_to_utc(self):
        plus_two = timezone(timedelta(hours=2))
        recurrence = Recurrence(
            type=RecurrenceType.daily,
            end_date_time=datetime(2025, 3, 1, 10, 0, tzinfo=plus_two),
        )
        assert generate_rrule(recurrence) == "FREQ=DAILY;UNTIL=20250301T080000Z"

    def test_count_takes_precedence_over_nothing(self):
        recurrence = Recurrence(type=RecurrenceType.weekly, weekly_days="2")
        assert "COUNT" not in generate_rrule(recurrence)
        assert "UNTIL" not in generate_rrule(recurrence)

    def test_none_and_unknown_type(self):
        assert generate_rrule(None) == ""
        assert generate_rrule(Recurrence.model_construct(type=9)) == ""

    def test_deterministic(self):
        recurrence = Recurrence(
            type=RecurrenceType.weekly,
            repeat_interval=2,
            weekly_days="2,4,6",
            end_times=20,
        )
        same = Recurrence(
            type=RecurrenceType.weekly,
            repeat_interval=2,
            weekly_days=[2, 4, 6],
            end_times=20,
        )
        assert generate_rrule(recurrence) == generate_rrule(same)
