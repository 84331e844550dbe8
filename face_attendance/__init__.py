"""
Face Attendance - face recognition gallery with once-per-day attendance.
"""

from face_attendance.core.config import VERSION

__version__ = VERSION
