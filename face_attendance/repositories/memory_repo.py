"""
In-memory repositories.
Same interface as the Supabase repositories, backed by InMemoryDatabase.
"""

from datetime import date, datetime, timezone
from typing import Optional, List, Dict, Any

from face_attendance.core.exceptions import DuplicateIdentityError, DuplicateAttendanceError
from face_attendance.core.logging import get_logger
from face_attendance.infrastructure.memory import InMemoryDatabase
from face_attendance.models.domain.identity import GalleryEntry
from face_attendance.models.domain.attendance import AttendanceRecord, AttendanceView

logger = get_logger(__name__)


class InMemoryIdentitiesRepository:
    """Identities table in process memory."""

    def __init__(self, db: InMemoryDatabase):
        self.db = db

    async def get(self, identity_id: str) -> Optional[GalleryEntry]:
        return self.db.identities.get(identity_id)

    async def exists(self, identity_id: str) -> bool:
        return identity_id in self.db.identities

    async def list_all(self, newest_first: bool = True) -> List[GalleryEntry]:
        with self.db.lock:
            entries = list(self.db.identities.values())
        # Ties ordered by identity_id, matching the Supabase query
        entries = sorted(entries, key=lambda e: e.identity_id)
        return sorted(entries, key=lambda e: e.created_at, reverse=newest_first)

    async def create(self, entry: GalleryEntry) -> GalleryEntry:
        with self.db.lock:
            if entry.identity_id in self.db.identities:
                raise DuplicateIdentityError(entry.identity_id)
            stored = entry.model_copy(update={"created_at": datetime.now(timezone.utc)})
            self.db.identities[entry.identity_id] = stored
        logger.debug(f"Inserted identity {entry.identity_id}")
        return stored

    async def delete(self, identity_id: str) -> bool:
        with self.db.lock:
            return self.db.identities.pop(identity_id, None) is not None


class InMemoryAttendanceRepository:
    """Attendance table in process memory with unique (identity_id, date)."""

    def __init__(self, db: InMemoryDatabase):
        self.db = db

    async def get(self, record_id: str) -> Optional[AttendanceRecord]:
        return self.db.attendance.get(record_id)

    async def get_for_day(self, identity_id: str, day: date) -> Optional[AttendanceRecord]:
        with self.db.lock:
            record_id = self.db.attendance_by_day.get((identity_id, day))
            return self.db.attendance.get(record_id) if record_id else None

    async def list_for_date(self, day: date) -> List[AttendanceView]:
        with self.db.lock:
            records = [r for r in self.db.attendance.values() if r.date == day]
            identities = dict(self.db.identities)
        records.sort(key=lambda r: r.time_in, reverse=True)

        views = []
        for record in records:
            entry = identities.get(record.identity_id)
            views.append(AttendanceView(
                **record.model_dump(),
                display_name=entry.display_name if entry else None,
                image_ref=entry.image_ref if entry else None,
            ))
        return views

    async def create(self, record: AttendanceRecord) -> AttendanceRecord:
        key = (record.identity_id, record.date)
        with self.db.lock:
            if key in self.db.attendance_by_day:
                raise DuplicateAttendanceError(record.identity_id, record.date.isoformat())
            self.db.attendance[record.record_id] = record
            self.db.attendance_by_day[key] = record.record_id
        return record

    async def update(self, record_id: str, data: Dict[str, Any]) -> Optional[AttendanceRecord]:
        with self.db.lock:
            record = self.db.attendance.get(record_id)
            if record is None:
                return None
            updated = AttendanceRecord(**{**record.model_dump(), **data})
            self.db.attendance[record_id] = updated
        return updated

    async def delete(self, record_id: str) -> bool:
        with self.db.lock:
            record = self.db.attendance.pop(record_id, None)
            if record is None:
                return False
            self.db.attendance_by_day.pop((record.identity_id, record.date), None)
        return True

    async def delete_for_identity(self, identity_id: str) -> int:
        with self.db.lock:
            doomed = [r for r in self.db.attendance.values() if r.identity_id == identity_id]
            for record in doomed:
                del self.db.attendance[record.record_id]
                self.db.attendance_by_day.pop((record.identity_id, record.date), None)
        return len(doomed)
