"""
Domain models - core business entities.
"""

from face_attendance.models.domain.identity import GalleryEntry, GallerySnapshot, IdentitySummary
from face_attendance.models.domain.attendance import (
    AttendanceRecord,
    AttendanceStatus,
    AttendanceView,
    MarkOutcome,
    MarkStatus,
)
from face_attendance.models.domain.recognition import BoundingBox, Detection, MatchResult

__all__ = [
    # Gallery
    'GalleryEntry',
    'GallerySnapshot',
    'IdentitySummary',
    # Attendance
    'AttendanceRecord',
    'AttendanceStatus',
    'AttendanceView',
    'MarkOutcome',
    'MarkStatus',
    # Recognition
    'BoundingBox',
    'Detection',
    'MatchResult',
]
