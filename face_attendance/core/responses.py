"""
Unified API response format.
All endpoints should return ApiResponse for consistency.
"""

from typing import TypeVar, Generic, Optional, Any, Dict, TYPE_CHECKING
from pydantic import BaseModel

if TYPE_CHECKING:
    from face_attendance.core.exceptions import AppException

T = TypeVar('T')


class ApiResponse(BaseModel, Generic[T]):
    """
    Unified API response wrapper.

    All API endpoints should return this format:
    {
        "success": true/false,
        "data": <payload or null>,
        "error": <error message or null>,
        "code": <error code for errors, null for success>,
        "meta": <optional metadata>
    }
    """

    success: bool
    data: Optional[T] = None
    error: Optional[str] = None
    code: Optional[str] = None
    meta: Optional[Dict[str, Any]] = None

    @classmethod
    def ok(cls, data: T = None, meta: Dict[str, Any] = None) -> "ApiResponse[T]":
        """Create successful response."""
        return cls(success=True, data=data, meta=meta)

    @classmethod
    def fail(
        cls,
        message: str,
        code: str = "ERROR",
        meta: Dict[str, Any] = None,
    ) -> "ApiResponse":
        """Create error response."""
        return cls(success=False, error=message, code=code, meta=meta)

    @classmethod
    def from_exception(cls, exc: "AppException") -> "ApiResponse":
        """Create error response from AppException."""
        meta = exc.details if exc.details and exc.status_code < 500 else None
        return cls(success=False, error=exc.message, code=exc.code, meta=meta)

    @classmethod
    def deleted(cls, entity: str, key: str, identifier: str) -> "ApiResponse":
        """Confirmation for a successful delete: {message, <key>: identifier}."""
        return cls.ok({"message": f"{entity} '{identifier}' deleted", key: identifier})
