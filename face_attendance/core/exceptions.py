"""
Custom exception hierarchy for the application.
All exceptions inherit from AppException for unified handling.
"""

from typing import Optional, Dict, Any


class AppException(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message: Human-readable error message
        code: Machine-readable error code
        status_code: HTTP status code for API responses
        details: Additional error details
    """

    def __init__(
        self,
        message: str,
        code: str = "ERROR",
        status_code: int = 400,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API response."""
        result = {
            "code": self.code,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result


# === Not Found Errors ===

class NotFoundError(AppException):
    """Resource not found."""

    def __init__(self, entity: str, identifier: str = None):
        message = f"{entity} not found"
        if identifier:
            message = f"{entity} '{identifier}' not found"
        super().__init__(
            message=message,
            code="NOT_FOUND",
            status_code=404
        )


class IdentityNotFoundError(NotFoundError):
    def __init__(self, identity_id: str):
        super().__init__("Identity", identity_id)


class AttendanceRecordNotFoundError(NotFoundError):
    def __init__(self, record_id: str):
        super().__init__("Attendance record", record_id)


# === Validation Errors ===

class ValidationError(AppException):
    """Input validation failed."""

    def __init__(self, message: str, field: str = None, code: str = "VALIDATION_ERROR"):
        details = {"field": field} if field else {}
        super().__init__(
            message=message,
            code=code,
            status_code=400,
            details=details
        )


class InvalidEmbeddingError(ValidationError):
    def __init__(self, reason: str):
        super().__init__(
            message=f"Invalid embedding: {reason}",
            field="embedding",
            code="INVALID_EMBEDDING"
        )


class InvalidQueryError(ValidationError):
    def __init__(self, reason: str):
        super().__init__(
            message=f"Invalid query embedding: {reason}",
            field="embeddings",
            code="INVALID_QUERY"
        )


# === Conflict Errors ===

class ConflictError(AppException):
    """Unique constraint violated."""

    def __init__(self, message: str, code: str = "CONFLICT", details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            code=code,
            status_code=409,
            details=details
        )


class DuplicateIdentityError(ConflictError):
    def __init__(self, identity_id: str):
        super().__init__(
            message=f"Identity '{identity_id}' already exists",
            code="DUPLICATE_IDENTITY",
            details={"identity_id": identity_id}
        )


class DuplicateAttendanceError(ConflictError):
    def __init__(self, identity_id: str, day: str):
        super().__init__(
            message=f"Attendance for '{identity_id}' on {day} already marked",
            code="DUPLICATE_ATTENDANCE",
            details={"identity_id": identity_id, "date": day}
        )


# === Store Errors ===

class StoreError(AppException):
    """
    Persistence operation failed.

    The message is deliberately opaque; the underlying error is logged
    by the repository that raised it.
    """

    def __init__(self, operation: str = None):
        details = {"operation": operation} if operation else {}
        super().__init__(
            message="Storage operation failed",
            code="STORE_ERROR",
            status_code=500,
            details=details
        )


# === Recognition Errors ===

class RecognitionError(AppException):
    """Face embedding operation failed."""

    def __init__(self, message: str, code: str = "RECOGNITION_ERROR", status_code: int = 500, phase: str = None):
        details = {"phase": phase} if phase else {}
        super().__init__(
            message=message,
            code=code,
            status_code=status_code,
            details=details
        )


class ModelsUnavailableError(RecognitionError):
    def __init__(self, state: str = None):
        message = "Face recognition models are not available"
        if state:
            message = f"{message} (state: {state})"
        super().__init__(
            message=message,
            code="MODELS_UNAVAILABLE",
            status_code=503,
            phase="initialization"
        )


class NoFaceDetectedError(RecognitionError):
    def __init__(self):
        super().__init__(
            message="No face detected in image",
            code="NO_FACE_DETECTED",
            status_code=422,
            phase="detection"
        )
