"""
Store wiring.
Bundles the identities table, the attendance table and image storage
for one backend, selected by STORE_BACKEND.
"""

from dataclasses import dataclass
from typing import Any, Optional

from face_attendance.core.config import Settings
from face_attendance.core.logging import get_logger
from face_attendance.infrastructure.memory import InMemoryDatabase
from face_attendance.infrastructure.storage import InMemoryImageStorage, SupabaseImageStorage
from face_attendance.infrastructure.supabase import SupabaseClient

logger = get_logger(__name__)


@dataclass
class Store:
    backend: str
    identities: Any
    attendance: Any
    images: Any


def create_memory_store(db: Optional[InMemoryDatabase] = None) -> Store:
    from face_attendance.repositories.memory_repo import (
        InMemoryIdentitiesRepository,
        InMemoryAttendanceRepository,
    )

    db = db or InMemoryDatabase()
    return Store(
        backend="memory",
        identities=InMemoryIdentitiesRepository(db),
        attendance=InMemoryAttendanceRepository(db),
        images=InMemoryImageStorage(),
    )


def create_supabase_store(settings: Settings) -> Store:
    from face_attendance.repositories.identities_repo import IdentitiesRepository
    from face_attendance.repositories.attendance_repo import AttendanceRepository

    client = SupabaseClient(settings)
    return Store(
        backend="supabase",
        identities=IdentitiesRepository(client),
        attendance=AttendanceRepository(client),
        images=SupabaseImageStorage(client, settings.image_bucket),
    )


def create_store(settings: Settings) -> Store:
    """Create the store for the configured backend."""
    if settings.store_backend == "memory":
        logger.warning("Using in-memory store; data is lost on restart")
        return create_memory_store()
    return create_supabase_store(settings)
