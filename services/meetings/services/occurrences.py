"""
Expansion of a meeting's recurrence into concrete occurrences.

Occurrences are regenerated from the recurrence on every request; the only
per-instance state comes from the meeting's stored occurrences (overrides and
cancellation flags), matched by occurrence id.

Expansion runs the same RRULE that goes into the calendar documents through
dateutil, on the meeting's local wall-clock time, so a 10:00 meeting stays at
10:00 across daylight saving changes. The meeting start (the anchor) is
always the first occurrence and counts toward ``end_times``. Months that lack
the target day, and nth weekdays that do not exist in a month, are skipped.
"""

from collections import deque
from datetime import datetime, timedelta, tzinfo
from itertools import islice
from typing import Dict, Iterator, List, Optional

import pytz
from dateutil.relativedelta import relativedelta
from dateutil.rrule import rrulestr

from services.common.errors import ValidationError
from services.common.logging_config import get_logger
from services.meetings.models.meeting import Meeting, Occurrence
from services.meetings.models.recurrence import Recurrence, RecurrenceType, as_aware
from services.meetings.services.rrule import generate_rrule
from services.meetings.services.weekdays import weekday_code

logger = get_logger(__name__)

# Upper bounds on pattern periods scanned, so a pattern that never matches cannot spin
MAX_DAYS_COUNT = 10000
MAX_WEEKS_COUNT = 1000
MAX_MONTHS_COUNT = 500

# Weeks run Sunday..Saturday, matching the weekday codes
_WEEK_START = "SU"
_LOCAL_RULE_TIMESTAMP_FORMAT = "%Y%m%dT%H%M%S"


def _meeting_timezone(meeting: Meeting) -> tzinfo:
    try:
        return pytz.timezone(meeting.timezone)
    except pytz.exceptions.UnknownTimeZoneError:
        logger.warning(
            "Unknown meeting timezone, expanding occurrences in UTC",
            meeting_uid=meeting.uid,
            timezone=meeting.timezone,
        )
        return pytz.utc


def _localize(tz: tzinfo, wall_clock: datetime) -> datetime:
    if hasattr(tz, "localize"):
        # normalize shifts wall-clock times skipped by a DST jump
        return tz.normalize(tz.localize(wall_clock))  # type: ignore[attr-defined]
    return wall_clock.replace(tzinfo=tz)


def _has_unmappable_pattern(recurrence: Recurrence) -> bool:
    """Weekly days that translate to no weekday at all mean no further repeats."""
    return (
        recurrence.type == RecurrenceType.weekly
        and bool(recurrence.weekly_days)
        and not any(weekday_code(day) for day in recurrence.weekly_days)
    )


def _expansion_horizon(anchor: datetime, recurrence: Recurrence) -> datetime:
    interval = recurrence.repeat_interval
    if recurrence.type == RecurrenceType.daily:
        span = relativedelta(days=MAX_DAYS_COUNT * interval)
    elif recurrence.type == RecurrenceType.weekly:
        span = relativedelta(weeks=MAX_WEEKS_COUNT * interval)
    else:
        span = relativedelta(months=MAX_MONTHS_COUNT * interval)
    try:
        return anchor + span
    except (OverflowError, ValueError):
        return datetime.max


def _pattern_rule(recurrence: Recurrence) -> str:
    """
    The recurrence's RRULE without its end condition. ``end_times`` and
    ``end_date_time`` are applied by the caller so the anchor can count
    toward them even when it does not match the pattern.
    """
    if _has_unmappable_pattern(recurrence):
        logger.warning(
            "No mappable weekly days, no repeats",
            weekly_days=recurrence.weekly_days_text,
        )
        return ""
    return generate_rrule(
        recurrence.model_copy(update={"end_times": 0, "end_date_time": None})
    )


def _wall_clock_starts(anchor: datetime, recurrence: Recurrence) -> Iterator[datetime]:
    """Naive wall-clock starts matching the pattern, from the anchor on."""
    rule = _pattern_rule(recurrence)
    if not rule:
        return iter(())
    horizon = _expansion_horizon(anchor, recurrence)
    return iter(
        rrulestr(
            f"{rule};WKST={_WEEK_START};"
            f"UNTIL={horizon.strftime(_LOCAL_RULE_TIMESTAMP_FORMAT)}",
            dtstart=anchor,
        )
    )


class OccurrenceService:
    """Calculates meeting occurrences from recurrence patterns."""

    def iter_series_starts(self, meeting: Meeting) -> Iterator[datetime]:
        """
        Yield every start time of the series in order, localized to the
        meeting's time zone, honouring ``end_times`` and ``end_date_time``.
        """
        tz = _meeting_timezone(meeting)
        anchor = meeting.start_time.astimezone(tz)
        yield anchor

        recurrence = meeting.recurrence
        if recurrence is None:
            return

        emitted = 1
        wall_clock_anchor = anchor.replace(tzinfo=None)
        for wall_clock in _wall_clock_starts(wall_clock_anchor, recurrence):
            # Compared before localizing: on a fall-back day the anchor's slot
            # localizes to the later of the two equal wall-clock times
            if wall_clock <= wall_clock_anchor:
                continue
            if recurrence.end_times > 0 and emitted >= recurrence.end_times:
                return
            candidate = _localize(tz, wall_clock)
            if (
                recurrence.end_date_time is not None
                and candidate > recurrence.end_date_time
            ):
                return
            emitted += 1
            yield candidate

    def calculate_occurrences(self, meeting: Meeting, limit: int) -> List[Occurrence]:
        """Occurrences from the meeting's own start time, at most ``limit``."""
        return self.calculate_occurrences_from_date(meeting, meeting.start_time, limit)

    def calculate_occurrences_from_date(
        self, meeting: Meeting, from_date: datetime, limit: int
    ) -> List[Occurrence]:
        """
        Occurrences starting at or after ``from_date``, at most ``limit``.

        The pattern is still anchored at the meeting start; only the window
        of emitted occurrences moves.
        """
        if limit <= 0:
            return []

        from_date = as_aware(from_date)  # type: ignore[assignment]
        stored = {o.occurrence_id: o for o in meeting.occurrences}
        starts = (s for s in self.iter_series_starts(meeting) if s >= from_date)
        occurrences = [
            self._create_occurrence(meeting, start, stored)
            for start in islice(starts, limit)
        ]

        logger.debug(
            "Calculated occurrences",
            meeting_uid=meeting.uid,
            from_date=from_date.isoformat(),
            limit=limit,
            count=len(occurrences),
        )
        return occurrences

    def get_series_end_date(self, meeting: Meeting) -> Optional[datetime]:
        """
        End of the last occurrence (start + duration).

        Returns None for an unbounded recurring series.
        """
        if meeting.recurrence is not None and not meeting.recurrence.is_bounded:
            return None
        last = deque(self.iter_series_starts(meeting), maxlen=1)
        return last[0] + timedelta(minutes=meeting.duration)

    def cancelled_occurrence_times(self, meeting: Meeting) -> List[datetime]:
        """Start times of stored occurrences marked as cancelled, oldest first."""
        return sorted(o.start_time for o in meeting.occurrences if o.is_cancelled)

    def validate_future_occurrence_id(
        self,
        meeting: Meeting,
        occurrence_id: str,
        max_occurrences_to_check: int,
        now: Optional[datetime] = None,
    ) -> None:
        """
        Check that ``occurrence_id`` is one of the first occurrences of the
        meeting and has not started yet.

        Raises:
            ValidationError: if any of the checks fail
        """
        if not occurrence_id:
            raise ValidationError("occurrence ID is required", field="occurrence_id")
        if max_occurrences_to_check <= 0:
            raise ValidationError(
                "max_occurrences_to_check must be greater than 0",
                field="max_occurrences_to_check",
                value=max_occurrences_to_check,
            )

        occurrences = self.calculate_occurrences(meeting, max_occurrences_to_check)
        found = next(
            (o for o in occurrences if o.occurrence_id == occurrence_id), None
        )
        if found is None:
            raise ValidationError(
                "invalid occurrence ID: occurrence not found for this meeting",
                field="occurrence_id",
                value=occurrence_id,
            )

        current = as_aware(now) if now is not None else datetime.now(pytz.utc)
        if found.start_time < current:  # type: ignore[operator]
            raise ValidationError(
                "invalid occurrence ID: cannot register for past occurrences",
                field="occurrence_id",
                value=occurrence_id,
            )

    @staticmethod
    def _create_occurrence(
        meeting: Meeting, start: datetime, stored: Dict[str, Occurrence]
    ) -> Occurrence:
        occurrence_id = str(int(start.timestamp()))
        existing = stored.get(occurrence_id)
        if existing is None:
            return Occurrence(
                occurrence_id=occurrence_id,
                start_time=start,
                title=meeting.title,
                description=meeting.description,
                duration=meeting.duration,
                registrant_count=meeting.registrant_count,
            )
        return Occurrence(
            occurrence_id=occurrence_id,
            start_time=start,
            title=existing.title or meeting.title,
            description=existing.description or meeting.description,
            duration=existing.duration
            if existing.duration is not None
            else meeting.duration,
            registrant_count=existing.registrant_count or meeting.registrant_count,
            is_cancelled=existing.is_cancelled,
        )
