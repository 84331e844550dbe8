"""
Repositories package - data access layer.

Repositories handle all database operations.
No business logic - only queries, constraint mapping and data transformation.

Usage:
    from face_attendance.repositories import AttendanceRepository

    repo = AttendanceRepository(supabase_client)
    record = await repo.get_for_day(identity_id, day)
"""

from face_attendance.repositories.base import BaseRepository
from face_attendance.repositories.identities_repo import IdentitiesRepository
from face_attendance.repositories.attendance_repo import AttendanceRepository
from face_attendance.repositories.memory_repo import (
    InMemoryIdentitiesRepository,
    InMemoryAttendanceRepository,
)

__all__ = [
    'BaseRepository',
    'IdentitiesRepository',
    'AttendanceRepository',
    'InMemoryIdentitiesRepository',
    'InMemoryAttendanceRepository',
]
