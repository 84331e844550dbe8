"""
Dependency injection for API routers.
Service instances are set by main.create_app() on startup.
"""

from face_attendance.services.attendance_ledger import AttendanceLedger
from face_attendance.services.enrollment import EnrollmentService
from face_attendance.services.gallery import Gallery
from face_attendance.services.recognition import RecognitionService

# Global instances (set by create_app)
gallery_instance: Gallery = None
ledger_instance: AttendanceLedger = None
enrollment_instance: EnrollmentService = None
recognition_instance: RecognitionService = None


def set_services(
    gallery: Gallery,
    ledger: AttendanceLedger,
    enrollment: EnrollmentService,
    recognition: RecognitionService,
):
    """
    Set the service instances. Called from create_app during startup.
    """
    global gallery_instance, ledger_instance, enrollment_instance, recognition_instance
    gallery_instance = gallery
    ledger_instance = ledger
    enrollment_instance = enrollment
    recognition_instance = recognition


def get_gallery() -> Gallery:
    """Dependency for FastAPI endpoints"""
    if gallery_instance is None:
        raise RuntimeError("Gallery not initialized. Check server startup logs.")
    return gallery_instance


def get_ledger() -> AttendanceLedger:
    """Dependency for FastAPI endpoints"""
    if ledger_instance is None:
        raise RuntimeError("AttendanceLedger not initialized. Check server startup logs.")
    return ledger_instance


def get_enrollment() -> EnrollmentService:
    """Dependency for FastAPI endpoints"""
    if enrollment_instance is None:
        raise RuntimeError("EnrollmentService not initialized. Check server startup logs.")
    return enrollment_instance


def get_recognition() -> RecognitionService:
    """Dependency for FastAPI endpoints"""
    if recognition_instance is None:
        raise RuntimeError("RecognitionService not initialized. Check server startup logs.")
    return recognition_instance
