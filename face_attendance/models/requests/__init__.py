"""
Request DTOs - API input validated at the boundary.
Unknown fields are rejected.
"""

from face_attendance.models.requests.identities import IdentityCreate
from face_attendance.models.requests.attendance import AttendanceMark, AttendanceUpdate
from face_attendance.models.requests.recognition import RecognitionRequest

__all__ = [
    'IdentityCreate',
    'AttendanceMark',
    'AttendanceUpdate',
    'RecognitionRequest',
]
