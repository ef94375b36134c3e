import enum
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from services.meetings.models.recurrence import Recurrence, as_aware


class AttachmentType(str, enum.Enum):
    link = "link"
    file = "file"


class MeetingAttachment(BaseModel):
    type: AttachmentType
    link: Optional[str] = None  # link attachments only
    name: Optional[str] = None
    description: Optional[str] = None
    file_name: Optional[str] = None  # file attachments only


class Occurrence(BaseModel):
    """A single instance of a meeting series."""

    occurrence_id: str  # Unix seconds of start_time
    start_time: datetime
    title: Optional[str] = None
    description: Optional[str] = None
    duration: Optional[int] = Field(None, ge=0, description="Minutes")
    registrant_count: int = 0
    response_count_yes: int = 0
    response_count_no: int = 0
    response_count_maybe: int = 0
    is_cancelled: bool = False

    @field_validator("start_time")
    @classmethod
    def start_time_is_aware(cls, v: datetime) -> datetime:
        return as_aware(v)  # type: ignore[return-value]


class Meeting(BaseModel):
    """Scheduling fields of a meeting record, as supplied by the persistence layer."""

    uid: str = Field(..., min_length=1)
    title: str
    description: str = ""
    start_time: datetime
    duration: int = Field(..., ge=0, description="Duration in minutes")
    timezone: str = "UTC"
    recurrence: Optional[Recurrence] = None
    occurrences: List[Occurrence] = Field(
        default_factory=list,
        description="Stored per-instance overrides and cancellation flags",
    )
    registrant_count: int = 0

    @field_validator("start_time")
    @classmethod
    def start_time_is_aware(cls, v: datetime) -> datetime:
        return as_aware(v)  # type: ignore[return-value]
