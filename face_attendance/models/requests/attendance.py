"""
Attendance request models.
"""

from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, field_validator

from face_attendance.models.domain.attendance import AttendanceStatus


class AttendanceMark(BaseModel):
    model_config = ConfigDict(extra="forbid")

    identity_id: str = Field(..., max_length=128)
    confidence_score: float = Field(..., ge=0, le=1)

    @field_validator("identity_id")
    @classmethod
    def validate_identity_id(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("must not be empty")
        return v


class AttendanceUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    status: AttendanceStatus
    time_in: datetime
