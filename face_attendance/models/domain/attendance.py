"""
Attendance domain models.
One record per identity per calendar day.
"""

from typing import Optional
import datetime as dt
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field


class AttendanceStatus(str, Enum):
    """Attendance status, editable by an administrator."""
    PRESENT = "present"
    LATE = "late"
    ABSENT = "absent"


class AttendanceRecord(BaseModel):
    """Presence record for one identity on one day."""

    model_config = ConfigDict(frozen=True)

    record_id: str = Field(..., description="Unique record ID")
    identity_id: str = Field(..., description="Identity this record belongs to")
    date: dt.date = Field(..., description="Calendar day of the record")
    time_in: dt.datetime = Field(..., description="First accepted recognition")
    status: AttendanceStatus = Field(AttendanceStatus.PRESENT)
    confidence_score: float = Field(..., ge=0, le=1, description="Match confidence at creation")


class AttendanceView(AttendanceRecord):
    """Attendance record joined with identity display info."""

    display_name: Optional[str] = None
    image_ref: Optional[str] = None


class MarkStatus(str, Enum):
    CREATED = "created"
    ALREADY_MARKED = "already_marked"


class MarkOutcome(BaseModel):
    """Result of marking an identity present."""

    model_config = ConfigDict(frozen=True)

    status: MarkStatus
    record: AttendanceRecord

    @property
    def created(self) -> bool:
        return self.status == MarkStatus.CREATED

    @classmethod
    def created_with(cls, record: AttendanceRecord) -> "MarkOutcome":
        return cls(status=MarkStatus.CREATED, record=record)

    @classmethod
    def already_marked(cls, record: AttendanceRecord) -> "MarkOutcome":
        return cls(status=MarkStatus.ALREADY_MARKED, record=record)
