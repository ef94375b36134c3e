"""
RFC5545 RRULE generation from a meeting recurrence.
"""

from datetime import timezone
from typing import List, Optional

from services.common.logging_config import get_logger
from services.meetings.models.recurrence import Recurrence, RecurrenceType
from services.meetings.services.weekdays import weekday_code

logger = get_logger(__name__)

UTC_TIMESTAMP_FORMAT = "%Y%m%dT%H%M%SZ"


def _by_weekly_days(recurrence: Recurrence) -> Optional[str]:
    codes = [code for code in map(weekday_code, recurrence.weekly_days) if code]
    if len(codes) != len(recurrence.weekly_days):
        logger.warning(
            "Dropping unmappable weekday codes from RRULE",
            weekly_days=recurrence.weekly_days_text,
        )
    if not codes:
        return None
    return "BYDAY=" + ",".join(codes)


def _by_monthly_pattern(recurrence: Recurrence) -> Optional[str]:
    if recurrence.monthly_day > 0:
        return f"BYMONTHDAY={recurrence.monthly_day}"
    if recurrence.monthly_week > 0 and recurrence.monthly_week_day > 0:
        code = weekday_code(recurrence.monthly_week_day)
        if not code:
            logger.warning(
                "Dropping unmappable monthly weekday from RRULE",
                monthly_week_day=recurrence.monthly_week_day,
            )
            return None
        return f"BYDAY={recurrence.monthly_week}{code}"
    return None


def generate_rrule(recurrence: Optional[Recurrence]) -> str:
    """
    Translate a recurrence into an RRULE value (without the "RRULE:" prefix).

    Parts are emitted in a fixed order - FREQ, INTERVAL, BYDAY/BYMONTHDAY,
    COUNT/UNTIL - so equal recurrences always produce identical strings.

    Returns:
        The rule, or "" when there is no recurrence or its type is unknown.
    """
    if recurrence is None:
        return ""

    parts: List[str] = []
    qualifier: Optional[str] = None

    if recurrence.type == RecurrenceType.daily:
        parts.append("FREQ=DAILY")
    elif recurrence.type == RecurrenceType.weekly:
        parts.append("FREQ=WEEKLY")
        if recurrence.weekly_days:
            qualifier = _by_weekly_days(recurrence)
    elif recurrence.type == RecurrenceType.monthly:
        parts.append("FREQ=MONTHLY")
        qualifier = _by_monthly_pattern(recurrence)
    else:
        logger.warning("Unknown recurrence type, omitting RRULE", type=recurrence.type)
        return ""

    if recurrence.repeat_interval > 1:
        parts.append(f"INTERVAL={recurrence.repeat_interval}")
    if qualifier:
        parts.append(qualifier)

    if recurrence.end_times > 0:
        parts.append(f"COUNT={recurrence.end_times}")
    elif recurrence.end_date_time is not None:
        until = recurrence.end_date_time.astimezone(timezone.utc)
        parts.append(f"UNTIL={until.strftime(UTC_TIMESTAMP_FORMAT)}")

    return ";".join(parts)
