"""
Process-local database.

Holds the same two tables as the Supabase schema and enforces the same
unique constraints. Every mutation runs under one lock so that a
check-and-insert inside the store is atomic, like a unique index.
Used by tests and by STORE_BACKEND=memory for local runs.
"""

import threading
from datetime import date
from typing import Dict, Tuple

from face_attendance.models.domain.identity import GalleryEntry
from face_attendance.models.domain.attendance import AttendanceRecord


class InMemoryDatabase:
    """Tables keyed by primary key; insertion order is preserved."""

    def __init__(self):
        self.lock = threading.RLock()
        self.identities: Dict[str, GalleryEntry] = {}
        self.attendance: Dict[str, AttendanceRecord] = {}
        # unique (identity_id, date) -> record_id
        self.attendance_by_day: Dict[Tuple[str, date], str] = {}
