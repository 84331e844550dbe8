"""
Unified Supabase client.
Owns the connection; repositories and image storage go through it.
"""

from datetime import date, datetime
from enum import Enum
from typing import Dict, Optional, Any
import numpy as np
from supabase import create_client, Client

from face_attendance.core.config import Settings
from face_attendance.core.exceptions import StoreError
from face_attendance.core.logging import get_logger

logger = get_logger(__name__)

# PostgreSQL SQLSTATE for unique_violation
UNIQUE_VIOLATION = "23505"


class SupabaseClient:
    """
    Unified Supabase client for all database operations.

    Provides:
    - Connection management
    - Constraint error classification
    - Type conversion utilities
    """

    def __init__(self, settings: Settings):
        """Initialize Supabase client."""
        self.settings = settings
        self._client: Optional[Client] = None
        self._connect()

    def _connect(self):
        """Establish connection to Supabase."""
        if not self.settings.supabase_url or not self.settings.supabase_service_role_key:
            logger.error("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY are required for the supabase store")
            raise StoreError(operation="connect")
        try:
            self._client = create_client(
                self.settings.supabase_url,
                self.settings.supabase_service_role_key
            )
            logger.info("Supabase client initialized")
        except Exception as e:
            logger.error(f"Failed to connect to Supabase: {e}")
            raise StoreError(operation="connect") from e

    @property
    def client(self) -> Client:
        """Get raw Supabase client for direct queries."""
        if not self._client:
            self._connect()
        return self._client

    def table(self, name: str):
        """Get table reference for chaining."""
        return self.client.table(name)

    def bucket(self, name: str):
        """Get storage bucket reference."""
        return self.client.storage.from_(name)

    # ============================================================
    # Error Classification
    # ============================================================

    @staticmethod
    def is_unique_violation(error: Exception) -> bool:
        """True when PostgREST reports a unique constraint violation."""
        code = getattr(error, "code", None)
        if code == UNIQUE_VIOLATION:
            return True
        # Some client versions only carry the SQLSTATE in the message payload
        return UNIQUE_VIOLATION in str(error) and "duplicate key" in str(error)

    # ============================================================
    # Type Conversion Utilities
    # ============================================================

    @staticmethod
    def clean_for_json(data: Dict[str, Any]) -> Dict[str, Any]:
        """Clean dict values for JSON serialization."""
        result = {}
        for key, value in data.items():
            if isinstance(value, (np.integer, np.floating)):
                result[key] = float(value)
            elif isinstance(value, np.ndarray):
                result[key] = value.tolist()
            elif isinstance(value, (datetime, date)):
                result[key] = value.isoformat()
            elif isinstance(value, Enum):
                result[key] = value.value
            elif isinstance(value, tuple):
                result[key] = list(value)
            else:
                result[key] = value
        return result
