"""
Recurrence pattern of a meeting series.

The numeric codes match what the persistence layer stores:
type 1=daily, 2=weekly, 3=monthly; weekdays 1=Sunday ... 7=Saturday;
monthly_week 1..5 selects the nth weekday of the month.
"""

import enum
from datetime import datetime, timezone
from typing import Any, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class RecurrenceType(int, enum.Enum):
    daily = 1
    weekly = 2
    monthly = 3


def as_aware(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive datetimes as UTC instants."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class Recurrence(BaseModel):
    """Immutable repeat pattern attached to a meeting version."""

    model_config = ConfigDict(frozen=True)

    type: RecurrenceType
    repeat_interval: int = Field(1, ge=1, description="Every N days/weeks/months")
    weekly_days: Tuple[int, ...] = Field(
        default=(), description="Weekday codes, 1=Sunday ... 7=Saturday"
    )
    monthly_day: int = Field(0, ge=0, le=31, description="Day of month, 0 when unused")
    monthly_week: int = Field(0, ge=0, le=5, description="Week of month, 0 when unused")
    monthly_week_day: int = Field(0, ge=0, le=7, description="Weekday code for monthly_week")
    end_times: int = Field(0, ge=0, description="Total occurrences, 0 when unbounded")
    end_date_time: Optional[datetime] = Field(
        None, description="Inclusive upper bound on occurrence start"
    )

    @field_validator("weekly_days", mode="before")
    @classmethod
    def parse_weekly_days(cls, v: Any) -> Any:
        """Accept the stored "2,4,6" form; tokens that are not numbers are dropped."""
        if v is None:
            return ()
        if isinstance(v, str):
            return tuple(
                int(token) for token in (t.strip() for t in v.split(",")) if token.isdigit()
            )
        return v

    @field_validator("end_date_time")
    @classmethod
    def end_date_time_is_aware(cls, v: Optional[datetime]) -> Optional[datetime]:
        return as_aware(v)

    @model_validator(mode="after")
    def validate_pattern(self) -> "Recurrence":
        if self.end_times > 0 and self.end_date_time is not None:
            raise ValueError("only one of end_times and end_date_time may be set")
        if (
            self.type == RecurrenceType.monthly
            and self.monthly_day > 0
            and self.monthly_week > 0
            and self.monthly_week_day > 0
        ):
            raise ValueError(
                "monthly_day cannot be combined with monthly_week/monthly_week_day"
            )
        return self

    @property
    def is_bounded(self) -> bool:
        return self.end_times > 0 or self.end_date_time is not None

    @property
    def weekly_days_text(self) -> str:
        """Weekday codes in their stored comma-separated form."""
        return ",".join(str(day) for day in self.weekly_days)
