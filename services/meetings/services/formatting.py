"""
Human-readable renderings of meeting times and recurrence patterns for
email bodies. Best-effort: unknown zones fall back to UTC and unknown codes
are left out instead of raising.
"""

from datetime import datetime, tzinfo
from typing import Iterable, List, Optional, Union

import pytz

from services.meetings.models.recurrence import Recurrence, RecurrenceType
from services.meetings.services.weekdays import ordinal_word, weekday_full_name


def _timezone_or_utc(name: str) -> tzinfo:
    try:
        return pytz.timezone(name)
    except pytz.exceptions.UnknownTimeZoneError:
        return pytz.utc


def _day_suffix(day: int) -> str:
    if 11 <= day <= 13:
        return "th"
    return {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")


def format_time(t: datetime, timezone: str) -> str:
    """
    e.g. "Wednesday, September 15th, 10:30 Africa/Johannesburg". An unknown
    zone renders in UTC and is labelled "UTC".
    """
    tz = _timezone_or_utc(timezone)
    local = t.astimezone(tz)
    label = tz.zone  # type: ignore[attr-defined]
    return (
        f"{local.strftime('%A')}, {local.strftime('%B')} "
        f"{local.day}{_day_suffix(local.day)}, {local.strftime('%H:%M')} {label}"
    )


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}" if count == 1 else f"{count} {unit}s"


def format_duration(minutes: int) -> str:
    if minutes < 60:
        return _plural(minutes, "minute")
    hours, remaining = divmod(minutes, 60)
    if remaining == 0:
        return _plural(hours, "hour")
    return f"{_plural(hours, 'hour')} {_plural(remaining, 'minute')}"


def format_weekly_days_text(weekly_days: Union[str, Iterable[int]]) -> str:
    """e.g. "2,4,6" -> "Monday, Wednesday and Friday"."""
    if isinstance(weekly_days, str):
        codes = [int(t) for t in (s.strip() for s in weekly_days.split(",")) if t.isdigit()]
    else:
        codes = list(weekly_days)
    names = [name for name in map(weekday_full_name, codes) if name]

    if not names:
        return ""
    if len(names) == 1:
        return names[0]
    return ", ".join(names[:-1]) + " and " + names[-1]


def _every(interval: int, single: str, unit: str) -> str:
    return single if interval == 1 else f"Every {interval} {unit}s"


def format_recurrence(
    recurrence: Optional[Recurrence], t: datetime, timezone: str
) -> str:
    """
    Describe a recurrence, e.g.
    "Every 2 weeks on Monday and Friday at 10:00 UTC (5 occurrences)".
    """
    if recurrence is None:
        return ""

    interval = recurrence.repeat_interval
    parts: List[str] = []

    if recurrence.type == RecurrenceType.daily:
        parts.append(_every(interval, "Daily", "day"))
    elif recurrence.type == RecurrenceType.weekly:
        parts.append(_every(interval, "Weekly", "week"))
        days = format_weekly_days_text(recurrence.weekly_days)
        if days:
            parts.append(f"on {days}")
    elif recurrence.type == RecurrenceType.monthly:
        parts.append(_every(interval, "Monthly", "month"))
        if recurrence.monthly_day > 0:
            parts.append(f"on day {recurrence.monthly_day}")
        elif recurrence.monthly_week > 0 and recurrence.monthly_week_day > 0:
            parts.append(
                f"on the {ordinal_word(recurrence.monthly_week)} "
                f"{weekday_full_name(recurrence.monthly_week_day)}".rstrip()
            )
    else:
        return "Custom recurrence"

    try:
        tz = pytz.timezone(timezone)
    except pytz.exceptions.UnknownTimeZoneError:
        return " ".join(parts)
    parts.append(f"at {t.astimezone(tz).strftime('%H:%M')} {tz.zone}")

    if recurrence.end_times > 0:
        parts.append(f"({recurrence.end_times} occurrences)")
    elif recurrence.end_date_time is not None:
        end = recurrence.end_date_time.astimezone(tz)
        parts.append(f"(until {end.strftime('%B')} {end.day}, {end.year})")

    return " ".join(parts)
