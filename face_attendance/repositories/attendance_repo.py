"""
Attendance repository - handles attendance table operations.
The (identity_id, date) unique constraint lives in the table itself.
"""

from datetime import date
from typing import Optional, List, Dict, Any

from face_attendance.repositories.base import BaseRepository
from face_attendance.models.domain.attendance import AttendanceRecord, AttendanceView
from face_attendance.core.exceptions import DuplicateAttendanceError
from face_attendance.core.logging import get_logger

logger = get_logger(__name__)


class AttendanceRepository(BaseRepository[AttendanceRecord]):
    """
    Repository for attendance table.
    Primary key: record_id.
    """

    table_name = "attendance"
    key_column = "record_id"
    identities_table = "identities"

    # ============================================================
    # Query Methods
    # ============================================================

    async def get(self, record_id: str) -> Optional[AttendanceRecord]:
        return await self.get_by_key(record_id)

    async def get_for_day(self, identity_id: str, day: date) -> Optional[AttendanceRecord]:
        try:
            response = (
                self.table
                .select("*")
                .eq("identity_id", identity_id)
                .eq("date", day.isoformat())
                .limit(1)
                .execute()
            )
        except Exception as e:
            self._handle_error("get_for_day", e)

        if not response.data:
            return None
        return self._to_model(response.data[0])

    async def list_for_date(self, day: date) -> List[AttendanceView]:
        """
        Records of one day joined with identity display info.
        Ordered by time_in, newest first.
        """
        records = await self.select_where("date", day.isoformat(), order_by="time_in", order_desc=True)
        if not records:
            return []

        identity_ids = sorted({r.identity_id for r in records})
        try:
            response = (
                self.client.table(self.identities_table)
                .select("identity_id, display_name, image_ref")
                .in_("identity_id", identity_ids)
                .execute()
            )
        except Exception as e:
            self._handle_error("list_for_date", e)

        identities = {row["identity_id"]: row for row in response.data or []}
        return [
            AttendanceView(
                **record.model_dump(),
                display_name=identities.get(record.identity_id, {}).get("display_name"),
                image_ref=identities.get(record.identity_id, {}).get("image_ref"),
            )
            for record in records
        ]

    # ============================================================
    # Mutations
    # ============================================================

    async def create(self, record: AttendanceRecord) -> AttendanceRecord:
        return await self.insert(record.model_dump())

    async def update(self, record_id: str, data: Dict[str, Any]) -> Optional[AttendanceRecord]:
        return await self.update_by_key(record_id, data)

    async def delete(self, record_id: str) -> bool:
        return await self.delete_where(self.key_column, record_id) > 0

    async def delete_for_identity(self, identity_id: str) -> int:
        return await self.delete_where("identity_id", identity_id)

    # ============================================================
    # Model Conversion
    # ============================================================

    def _to_model(self, data: Dict) -> AttendanceRecord:
        return AttendanceRecord(
            record_id=data["record_id"],
            identity_id=data["identity_id"],
            date=data["date"],
            time_in=data["time_in"],
            status=data.get("status", "present"),
            confidence_score=data["confidence_score"],
        )

    def _duplicate_error(self, data: Dict) -> DuplicateAttendanceError:
        return DuplicateAttendanceError(data["identity_id"], str(data["date"]))
