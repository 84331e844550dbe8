"""
Attendance API.
- GET    /attendance?date=YYYY-MM-DD
- POST   /attendance
- PUT    /attendance/{record_id}
- DELETE /attendance/{record_id}
"""

import datetime as dt
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response

from face_attendance.core.exceptions import IdentityNotFoundError, ValidationError
from face_attendance.core.logging import get_logger
from face_attendance.core.responses import ApiResponse
from face_attendance.models.requests import AttendanceMark, AttendanceUpdate
from face_attendance.services.attendance_ledger import AttendanceLedger
from face_attendance.services.gallery import Gallery
from .dependencies import get_gallery, get_ledger

logger = get_logger(__name__)
router = APIRouter()


def parse_date(value: Optional[str], ledger: AttendanceLedger) -> dt.date:
    """Parse YYYY-MM-DD; today in the attendance timezone when missing."""
    if not value:
        return ledger.today()
    try:
        return dt.date.fromisoformat(value)
    except ValueError:
        raise ValidationError(f"Invalid date '{value}', expected YYYY-MM-DD", field="date")


@router.get("")
async def list_attendance(
    date: Optional[str] = Query(None, description="Calendar day, defaults to today"),
    ledger: AttendanceLedger = Depends(get_ledger),
):
    """Attendance of one day joined with identity info, latest time_in first."""
    day = parse_date(date, ledger)
    records = await ledger.list_for_date(day)
    return ApiResponse.ok(records, meta={"date": day.isoformat(), "count": len(records)})


@router.post("", status_code=201)
async def mark_attendance(
    data: AttendanceMark,
    response: Response,
    gallery: Gallery = Depends(get_gallery),
    ledger: AttendanceLedger = Depends(get_ledger),
):
    """
    Mark identity present for today.
    201 with the new record, or 200 with the record already on file.
    """
    if not await gallery.exists(data.identity_id):
        raise IdentityNotFoundError(data.identity_id)

    outcome = await ledger.mark_present(data.identity_id, data.confidence_score)
    if outcome.created:
        return ApiResponse.ok(outcome)

    response.status_code = 200
    return ApiResponse.ok(outcome, meta={"message": "Already marked present today"})


@router.put("/{record_id}")
async def update_attendance(
    record_id: str,
    data: AttendanceUpdate,
    ledger: AttendanceLedger = Depends(get_ledger),
):
    record = await ledger.update(record_id, data.status, data.time_in)
    return ApiResponse.ok(record)


@router.delete("/{record_id}")
async def delete_attendance(record_id: str, ledger: AttendanceLedger = Depends(get_ledger)):
    await ledger.delete(record_id)
    return ApiResponse.deleted("Attendance record", "record_id", record_id)
