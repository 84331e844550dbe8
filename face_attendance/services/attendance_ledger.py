"""
Attendance ledger.

mark_present is an idempotent insert keyed by (identity_id, calendar day):
the first accepted recognition of the day creates the record, every later
one returns that record untouched. The pre-insert lookup is only a fast
path; the store's unique constraint decides races, and a duplicate on
insert is reported as already_marked.
"""

import uuid
from datetime import date, datetime, timezone, tzinfo
from typing import List, Optional

from face_attendance.core.exceptions import (
    AttendanceRecordNotFoundError,
    DuplicateAttendanceError,
    StoreError,
    ValidationError,
)
from face_attendance.core.logging import get_logger
from face_attendance.models.domain.attendance import (
    AttendanceRecord,
    AttendanceStatus,
    AttendanceView,
    MarkOutcome,
)
from face_attendance.models.domain.identity import GalleryEntry

logger = get_logger(__name__)


def ensure_aware(moment: datetime) -> datetime:
    """Naive datetimes are taken as UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


class AttendanceLedger:
    """Once-per-day presence records."""

    def __init__(self, attendance_repo, tz: tzinfo = timezone.utc):
        """
        Args:
            attendance_repo: AttendanceRepository or InMemoryAttendanceRepository
            tz: Timezone defining the calendar day
        """
        self.repo = attendance_repo
        self.tz = tz

    def calendar_date(self, moment: datetime) -> date:
        return ensure_aware(moment).astimezone(self.tz).date()

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def today(self) -> date:
        return self.calendar_date(self.now())

    # ==================== Marking ====================

    async def mark_present(
        self,
        identity_id: str,
        confidence_score: float,
        at_time: Optional[datetime] = None,
    ) -> MarkOutcome:
        """
        Mark identity present for the day of at_time.

        Returns:
            MarkOutcome created, or already_marked with the existing record
        """
        if not identity_id:
            raise ValidationError("identity_id is required", field="identity_id")
        if not 0.0 <= confidence_score <= 1.0:
            raise ValidationError("confidence_score must be within [0, 1]", field="confidence_score")

        at_time = ensure_aware(at_time or self.now())
        day = self.calendar_date(at_time)

        existing = await self.repo.get_for_day(identity_id, day)
        if existing is not None:
            logger.debug(f"{identity_id} already marked on {day}")
            return MarkOutcome.already_marked(existing)

        record = AttendanceRecord(
            record_id=str(uuid.uuid4()),
            identity_id=identity_id,
            date=day,
            time_in=at_time,
            status=AttendanceStatus.PRESENT,
            confidence_score=float(confidence_score),
        )
        try:
            created = await self.repo.create(record)
        except DuplicateAttendanceError:
            # A concurrent caller inserted first
            winner = await self.repo.get_for_day(identity_id, day)
            if winner is None:
                logger.error(f"Duplicate reported for {identity_id} on {day} but no record found")
                raise StoreError(operation="attendance.mark_present")
            logger.info(f"{identity_id} marked concurrently on {day}, returning existing record")
            return MarkOutcome.already_marked(winner)

        logger.info(f"Marked {identity_id} present on {day} (confidence={confidence_score:.3f})")
        return MarkOutcome.created_with(created)

    # ==================== Administration ====================

    async def get(self, record_id: str) -> AttendanceRecord:
        record = await self.repo.get(record_id)
        if record is None:
            raise AttendanceRecordNotFoundError(record_id)
        return record

    async def list_for_date(self, day: date) -> List[AttendanceView]:
        return await self.repo.list_for_date(day)

    async def update(
        self,
        record_id: str,
        status: AttendanceStatus,
        time_in: datetime,
    ) -> AttendanceRecord:
        """
        Overwrite status and time_in. The record's date is left as is.
        """
        updated = await self.repo.update(record_id, {
            "status": AttendanceStatus(status),
            "time_in": ensure_aware(time_in),
        })
        if updated is None:
            raise AttendanceRecordNotFoundError(record_id)
        logger.info(f"Updated attendance {record_id}: status={updated.status.value}")
        return updated

    async def delete(self, record_id: str):
        if not await self.repo.delete(record_id):
            raise AttendanceRecordNotFoundError(record_id)
        logger.info(f"Deleted attendance {record_id}")

    async def cascade_delete_for_identity(self, identity_id: str) -> int:
        """Delete every record of an identity. Returns the number deleted."""
        count = await self.repo.delete_for_identity(identity_id)
        logger.info(f"Cascade deleted {count} attendance records of {identity_id}")
        return count

    async def on_identity_removed(self, entry: GalleryEntry):
        """Gallery removal listener."""
        await self.cascade_delete_for_identity(entry.identity_id)
