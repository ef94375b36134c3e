from services.meetings.models.meeting import AttachmentType as AttachmentType
from services.meetings.models.meeting import Meeting as Meeting
from services.meetings.models.meeting import MeetingAttachment as MeetingAttachment
from services.meetings.models.meeting import Occurrence as Occurrence
from services.meetings.models.recurrence import Recurrence as Recurrence
from services.meetings.models.recurrence import RecurrenceType as RecurrenceType
