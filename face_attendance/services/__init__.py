"""
Services package - gallery, matching, attendance and enrollment.
"""

from face_attendance.services.gallery import Gallery
from face_attendance.services.matcher import Matcher
from face_attendance.services.attendance_ledger import AttendanceLedger
from face_attendance.services.face_embedder import EmbedderState, FaceEmbedder, create_embedder
from face_attendance.services.enrollment import EnrollmentService
from face_attendance.services.recognition import RecognitionService

__all__ = [
    'Gallery',
    'Matcher',
    'AttendanceLedger',
    'EmbedderState',
    'FaceEmbedder',
    'create_embedder',
    'EnrollmentService',
    'RecognitionService',
]
