"""
Unit tests for the Recurrence and Meeting models.
"""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from services.meetings.models import Meeting, Recurrence, RecurrenceType


class TestRecurrence:
    def test_weekly_days_from_stored_string(self):
        recurrence = Recurrence(type=RecurrenceType.weekly, weekly_days="2,4,6")
        assert recurrence.weekly_days == (2, 4, 6)
        assert recurrence.weekly_days_text == "2,4,6"

    def test_weekly_days_drops_non_numeric_tokens(self):
        recurrence = Recurrence(type=RecurrenceType.weekly, weekly_days="2, x ,4,")
        assert recurrence.weekly_days == (2, 4)

    def test_weekly_days_accepts_sequences_and_none(self):
        assert Recurrence(type=2, weekly_days=[1, 7]).weekly_days == (1, 7)
        assert Recurrence(type=2, weekly_days=None).weekly_days == ()

    def test_type_from_int(self):
        assert Recurrence(type=3).type == RecurrenceType.monthly

    def test_rejects_both_end_conditions(self):
        with pytest.raises(ValidationError):
            Recurrence(
                type=RecurrenceType.daily,
                end_times=5,
                end_date_time=datetime(2025, 1, 1, tzinfo=timezone.utc),
            )

    def test_rejects_conflicting_monthly_pattern(self):
        with pytest.raises(ValidationError):
            Recurrence(
                type=RecurrenceType.monthly,
                monthly_day=15,
                monthly_week=2,
                monthly_week_day=3,
            )

    def test_rejects_zero_interval(self):
        with pytest.raises(ValidationError):
            Recurrence(type=RecurrenceType.daily, repeat_interval=0)

    @pytest.mark.parametrize(
        "field,value",
        [("monthly_day", 32), ("monthly_week", 6), ("monthly_week_day", 8)],
    )
    def test_rejects_out_of_range_monthly_fields(self, field, value):
        with pytest.raises(ValidationError):
            Recurrence(type=RecurrenceType.monthly, **{field: value})

    def test_accepts_monthly_upper_bounds(self):
        assert Recurrence(type=3, monthly_day=31).monthly_day == 31
        recurrence = Recurrence(type=3, monthly_week=5, monthly_week_day=7)
        assert (recurrence.monthly_week, recurrence.monthly_week_day) == (5, 7)

    def test_naive_end_date_treated_as_utc(self):
        recurrence = Recurrence(
            type=RecurrenceType.daily, end_date_time=datetime(2025, 1, 1, 12, 0)
        )
        assert recurrence.end_date_time == datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)

    def test_is_frozen(self):
        recurrence = Recurrence(type=RecurrenceType.daily)
        with pytest.raises(ValidationError):
            recurrence.repeat_interval = 2  # type: ignore[misc]

    def test_is_bounded(self):
        assert not Recurrence(type=1).is_bounded
        assert Recurrence(type=1, end_times=3).is_bounded
        assert Recurrence(
            type=1, end_date_time=datetime(2025, 1, 1, tzinfo=timezone.utc)
        ).is_bounded


class TestMeeting:
    def test_requires_uid(self):
        with pytest.raises(ValidationError):
            Meeting(
                uid="",
                title="Standup",
                start_time=datetime(2024, 1, 1, tzinfo=timezone.utc),
                duration=30,
            )

    def test_naive_start_treated_as_utc(self):
        meeting = Meeting(
            uid="m-1", title="Standup", start_time=datetime(2024, 1, 1, 9), duration=30
        )
        assert meeting.start_time.tzinfo is not None
        assert meeting.timezone == "UTC"
        assert meeting.occurrences == []
