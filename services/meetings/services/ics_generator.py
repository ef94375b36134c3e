"""
iCalendar (RFC5545) documents for meeting emails.

Four documents share one assembly routine:

- invitation: METHOD:REQUEST with the full description, reminder and EXDATEs
- update: same as the invitation with a caller-supplied, higher SEQUENCE
- cancellation: METHOD:CANCEL for the whole series
- occurrence cancellation: METHOD:CANCEL for one instance, identified by
  RECURRENCE-ID

The UID is always the meeting UID so calendar clients correlate every
document for a meeting, and every local timestamp carries a TZID parameter.
"""

import enum
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Iterable, List, Optional

import pytz
from pydantic import BaseModel, Field, field_validator

from services.common.errors import InvalidTimezoneError
from services.common.logging_config import get_logger
from services.meetings.models.meeting import AttachmentType, MeetingAttachment
from services.meetings.models.recurrence import Recurrence, as_aware
from services.meetings.services.ics_text import ICS_LINE_BREAK, escape_text, fold_line
from services.meetings.services.rrule import UTC_TIMESTAMP_FORMAT, generate_rrule
from services.meetings.settings import Settings, get_settings

logger = get_logger(__name__)

ICAL_VERSION = "2.0"
ICAL_SCALE = "GREGORIAN"
LOCAL_TIMESTAMP_FORMAT = "%Y%m%dT%H%M%S"


class ICSMethod(str, enum.Enum):
    request = "REQUEST"
    cancel = "CANCEL"


@dataclass(frozen=True)
class DocumentIntent:
    method: ICSMethod
    single_occurrence: bool = False


INVITATION = DocumentIntent(ICSMethod.request)
SERIES_CANCELLATION = DocumentIntent(ICSMethod.cancel)
OCCURRENCE_CANCELLATION = DocumentIntent(ICSMethod.cancel, single_occurrence=True)


class ICSEventParams(BaseModel):
    """Fields shared by every calendar document."""

    meeting_uid: str = Field(..., min_length=1)
    meeting_title: str
    duration: int = Field(..., ge=0, description="Duration in minutes")
    timezone: str
    recipient_email: str = ""
    recipient_name: str = ""
    recurrence: Optional[Recurrence] = None
    sequence: int = Field(0, ge=0)


class ICSInvitationParams(ICSEventParams):
    start_time: datetime
    description: str = ""
    join_link: str = ""
    direct_join_link: str = ""
    meeting_id: str = ""
    passcode: str = ""
    project_name: str = ""
    attachments: List[MeetingAttachment] = Field(default_factory=list)
    cancelled_occurrence_times: List[datetime] = Field(default_factory=list)

    @field_validator("start_time")
    @classmethod
    def start_time_is_aware(cls, v: datetime) -> datetime:
        return as_aware(v)  # type: ignore[return-value]

    @field_validator("cancelled_occurrence_times")
    @classmethod
    def cancelled_times_are_aware(cls, v: List[datetime]) -> List[datetime]:
        return [as_aware(t) for t in v]  # type: ignore[misc]


class ICSUpdateParams(ICSInvitationParams):
    sequence: int = Field(..., ge=1, description="Must exceed the last sent value")


class ICSCancellationParams(ICSEventParams):
    start_time: datetime
    sequence: int = Field(..., ge=1, description="Must exceed the last sent value")

    @field_validator("start_time")
    @classmethod
    def start_time_is_aware(cls, v: datetime) -> datetime:
        return as_aware(v)  # type: ignore[return-value]


class ICSOccurrenceCancellationParams(ICSEventParams):
    occurrence_start_time: datetime
    sequence: int = Field(..., ge=1, description="Must exceed the last sent value")

    @field_validator("occurrence_start_time")
    @classmethod
    def occurrence_start_time_is_aware(cls, v: datetime) -> datetime:
        return as_aware(v)  # type: ignore[return-value]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def load_timezone(name: str) -> tzinfo:
    """
    Load an IANA time zone.

    Raises:
        InvalidTimezoneError: if the zone is unknown
    """
    if not name:
        raise InvalidTimezoneError(name)
    try:
        return pytz.timezone(name)
    except pytz.exceptions.UnknownTimeZoneError as e:
        raise InvalidTimezoneError(name) from e


def _local_timestamp(instant: datetime, tz: tzinfo) -> str:
    return instant.astimezone(tz).strftime(LOCAL_TIMESTAMP_FORMAT)


def _param_value(value: str) -> str:
    """Quote a property parameter value when it contains separators."""
    value = value.replace('"', "")
    if any(ch in value for ch in ":;,"):
        return f'"{value}"'
    return value


def _format_attachment(attachment: MeetingAttachment) -> Optional[str]:
    if attachment.type == AttachmentType.link:
        # URL first so mail clients make it clickable
        label = attachment.link
    else:
        label = attachment.name or attachment.file_name
    if not label:
        return None
    if attachment.description:
        return f"• {label} - {attachment.description}"
    return f"• {label}"


def build_description(
    description: str = "",
    meeting_id: str = "",
    passcode: str = "",
    join_link: str = "",
    direct_join_link: str = "",
    project_name: str = "",
    attachments: Iterable[MeetingAttachment] = (),
    dial_in_numbers_url: str = "https://zoom.us/zoomconference",
) -> str:
    """Compose the plain-text DESCRIPTION block of an invitation."""
    sections: List[str] = []

    if project_name:
        sections.append(f"{project_name} Meeting")

    attachments = list(attachments)
    attachment_lines = [
        line for line in map(_format_attachment, attachments) if line is not None
    ]
    if attachment_lines:
        block = "Attachments:\n" + "\n".join(attachment_lines)
        if any(a.type == AttachmentType.file for a in attachments):
            block += "\n\nTo download files, click on the 'Join meeting' link:"
            if join_link:
                block += f" {join_link}"
        sections.append(block)

    if description:
        sections.append(description)

    if join_link:
        sections.append(f"Join Meeting: {join_link}")

    credentials = []
    if meeting_id:
        credentials.append(f"Meeting ID: {meeting_id}")
    if passcode:
        credentials.append(f"Passcode: {passcode}")
    if credentials:
        sections.append("\n".join(credentials))

    if meeting_id:
        dial_in = [
            f"To dial in, find your local number: {dial_in_numbers_url}",
            f"After dialing, enter Meeting ID: {meeting_id}#",
        ]
        if passcode:
            dial_in.append(f"Then enter Passcode: {passcode}#")
        sections.append("\n".join(dial_in))

    if direct_join_link:
        sections.append(f"Having trouble joining? Join directly: {direct_join_link}")

    return "\n\n".join(sections)


def _timezone_component(tzid: str) -> List[str]:
    return [
        "BEGIN:VTIMEZONE",
        f"TZID:{tzid}",
        f"X-LIC-LOCATION:{tzid}",
        "END:VTIMEZONE",
    ]


def _attendee_line(params: ICSEventParams) -> str:
    cn = _param_value(params.recipient_name or params.recipient_email)
    return (
        "ATTENDEE;CUTYPE=INDIVIDUAL;ROLE=REQ-PARTICIPANT;PARTSTAT=NEEDS-ACTION;"
        f"RSVP=TRUE;CN={cn}:mailto:{params.recipient_email}"
    )


def _build_document(
    intent: DocumentIntent,
    params: ICSEventParams,
    start_time: datetime,
    settings: Settings,
    invitation: Optional[ICSInvitationParams] = None,
) -> str:
    tz = load_timezone(params.timezone)
    tzid = tz.zone  # type: ignore[attr-defined]
    end_time = start_time + timedelta(minutes=params.duration)
    is_request = intent.method == ICSMethod.request

    lines = [
        "BEGIN:VCALENDAR",
        f"VERSION:{ICAL_VERSION}",
        f"PRODID:{settings.ics_prod_id}",
        f"CALSCALE:{ICAL_SCALE}",
        f"METHOD:{intent.method.value}",
    ]
    lines += _timezone_component(tzid)
    lines += [
        "BEGIN:VEVENT",
        f"UID:{params.meeting_uid}",
        f"DTSTAMP:{_utcnow().strftime(UTC_TIMESTAMP_FORMAT)}",
        f"ORGANIZER;CN={_param_value(settings.ics_organizer_name)}"
        f":mailto:{settings.ics_organizer_email}",
        f"DTSTART;TZID={tzid}:{_local_timestamp(start_time, tz)}",
        f"DTEND;TZID={tzid}:{_local_timestamp(end_time, tz)}",
    ]

    if intent.single_occurrence:
        lines.append(f"RECURRENCE-ID;TZID={tzid}:{_local_timestamp(start_time, tz)}")
    else:
        rrule = generate_rrule(params.recurrence)
        if rrule:
            lines.append(f"RRULE:{rrule}")
            if invitation is not None and invitation.cancelled_occurrence_times:
                exdates = ",".join(
                    _local_timestamp(t, tz)
                    for t in sorted(set(invitation.cancelled_occurrence_times))
                )
                lines.append(f"EXDATE;TZID={tzid}:{exdates}")

    summary = escape_text(params.meeting_title)
    if not is_request:
        summary += " (CANCELLED)"
    lines.append(f"SUMMARY:{summary}")

    if invitation is not None:
        description = build_description(
            description=invitation.description,
            meeting_id=invitation.meeting_id,
            passcode=invitation.passcode,
            join_link=invitation.join_link,
            direct_join_link=invitation.direct_join_link,
            project_name=invitation.project_name,
            attachments=invitation.attachments,
            dial_in_numbers_url=settings.dial_in_numbers_url,
        )
        lines.append(f"DESCRIPTION:{escape_text(description)}")
        if invitation.join_link:
            lines.append(f"LOCATION:{escape_text(invitation.join_link)}")
            lines.append(f"URL:{invitation.join_link}")

    if params.recipient_email:
        lines.append(_attendee_line(params))

    if is_request:
        lines += [
            "STATUS:CONFIRMED",
            "TRANSP:OPAQUE",
            "CLASS:PUBLIC",
            "PRIORITY:5",
            f"SEQUENCE:{params.sequence}",
            "BEGIN:VALARM",
            f"TRIGGER:-PT{settings.ics_reminder_minutes}M",
            "ACTION:DISPLAY",
            f"DESCRIPTION:Reminder: {escape_text(params.meeting_title)}",
            "END:VALARM",
        ]
    else:
        lines += ["STATUS:CANCELLED", f"SEQUENCE:{params.sequence}"]

    lines += ["END:VEVENT", "END:VCALENDAR"]

    logger.debug(
        "Generated ICS document",
        meeting_uid=params.meeting_uid,
        method=intent.method.value,
        single_occurrence=intent.single_occurrence,
        sequence=params.sequence,
    )
    return "".join(
        fold_line(line, settings.ics_max_line_octets) + ICS_LINE_BREAK
        for line in lines
    )


def generate_invitation_ics(
    params: ICSInvitationParams, settings: Optional[Settings] = None
) -> str:
    """
    Generate the calendar document attached to a meeting invitation.

    Raises:
        InvalidTimezoneError: if ``params.timezone`` cannot be loaded
    """
    return _build_document(
        INVITATION,
        params,
        params.start_time,
        settings or get_settings(),
        invitation=params,
    )


def generate_update_ics(
    params: ICSUpdateParams, settings: Optional[Settings] = None
) -> str:
    """
    Generate the calendar document for an updated meeting.

    ``params.sequence`` must be higher than the last value sent for the
    meeting; the caller tracks it.
    """
    return _build_document(
        INVITATION,
        params,
        params.start_time,
        settings or get_settings(),
        invitation=params,
    )


def generate_cancellation_ics(
    params: ICSCancellationParams, settings: Optional[Settings] = None
) -> str:
    """Generate the calendar document cancelling the whole meeting series."""
    return _build_document(
        SERIES_CANCELLATION, params, params.start_time, settings or get_settings()
    )


def generate_occurrence_cancellation_ics(
    params: ICSOccurrenceCancellationParams, settings: Optional[Settings] = None
) -> str:
    """Generate the calendar document cancelling a single occurrence of a series."""
    return _build_document(
        OCCURRENCE_CANCELLATION,
        params,
        params.occurrence_start_time,
        settings or get_settings(),
    )
