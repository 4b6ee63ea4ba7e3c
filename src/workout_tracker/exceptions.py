"""
Custom exceptions for the Workout Tracker.

This module defines a hierarchy of exceptions that provide clear error
handling throughout the application. Each exception includes:
- A descriptive message
- An error code for API responses
- HTTP status code mapping
- Optional details for debugging
"""

from typing import Any, Dict, List, Optional
from enum import Enum


class ErrorCode(str, Enum):
    """Error codes for consistent API error responses."""

    # General errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"

    # Template errors
    TEMPLATE_NOT_FOUND = "TEMPLATE_NOT_FOUND"
    TEMPLATE_VALIDATION_ERROR = "TEMPLATE_VALIDATION_ERROR"

    # Session errors
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    PERFORMANCE_VALIDATION_ERROR = "PERFORMANCE_VALIDATION_ERROR"
    ACTIVE_SESSION_NOT_FOUND = "ACTIVE_SESSION_NOT_FOUND"
    ACTIVE_SESSION_EXISTS = "ACTIVE_SESSION_EXISTS"
    SESSION_VERSION_CONFLICT = "SESSION_VERSION_CONFLICT"
    SESSION_RECOVERY_CONFLICT = "SESSION_RECOVERY_CONFLICT"

    # Enrichment errors
    PR_PROCESSING_FAILED = "PR_PROCESSING_FAILED"
    ACHIEVEMENT_PROCESSING_FAILED = "ACHIEVEMENT_PROCESSING_FAILED"

    # Data/Database errors
    DATABASE_ERROR = "DATABASE_ERROR"


class WorkoutTrackerError(Exception):
    """
    Base exception for all Workout Tracker errors.

    Attributes:
        message: Human-readable error message
        code: Error code from ErrorCode enum
        status_code: HTTP status code for API responses
        details: Optional dictionary with additional error details
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API response."""
        result: Dict[str, Any] = {
            "error": {
                "code": self.code.value,
                "message": self.message,
            }
        }
        if self.details:
            result["error"]["details"] = self.details
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code.value}, message={self.message!r})"


# ============================================================================
# Validation Errors (400)
# ============================================================================

class ValidationError(WorkoutTrackerError):
    """Raised when input validation fails."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        error_details = details or {}
        if field:
            error_details["field"] = field
        super().__init__(
            message=message,
            code=ErrorCode.VALIDATION_ERROR,
            status_code=400,
            details=error_details,
        )


class TemplateValidationError(ValidationError):
    """Raised when a workout template is malformed or incomplete."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message=message, field=field, details=details)
        self.code = ErrorCode.TEMPLATE_VALIDATION_ERROR


class PerformanceValidationError(ValidationError):
    """Raised when session performance data is malformed."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message=message, field=field, details=details)
        self.code = ErrorCode.PERFORMANCE_VALIDATION_ERROR


# ============================================================================
# Not Found Errors (404)
# ============================================================================

class NotFoundError(WorkoutTrackerError):
    """Raised when a requested resource is not found."""

    def __init__(
        self,
        resource_type: str,
        resource_id: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        message = f"{resource_type} with ID '{resource_id}' not found"
        error_details = details or {}
        error_details["resource_type"] = resource_type
        error_details["resource_id"] = resource_id
        super().__init__(
            message=message,
            code=ErrorCode.NOT_FOUND,
            status_code=404,
            details=error_details,
        )


class TemplateNotFoundError(NotFoundError):
    """Raised when a template is absent or not owned by the caller."""

    def __init__(self, template_id: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(
            resource_type="Workout Template",
            resource_id=template_id,
            details=details,
        )
        self.code = ErrorCode.TEMPLATE_NOT_FOUND


class SessionNotFoundError(NotFoundError):
    """Raised when a workout session is absent or not owned by the caller."""

    def __init__(self, session_id: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(
            resource_type="Workout Session",
            resource_id=session_id,
            details=details,
        )
        self.code = ErrorCode.SESSION_NOT_FOUND


class ActiveSessionNotFoundError(NotFoundError):
    """Raised when the user has no active workout session."""

    def __init__(self, user_id: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(
            resource_type="Active Session for user",
            resource_id=user_id,
            details=details,
        )
        self.message = "No active workout session found"
        self.code = ErrorCode.ACTIVE_SESSION_NOT_FOUND


# ============================================================================
# Conflict Errors (409)
# ============================================================================

class ConflictError(WorkoutTrackerError):
    """Raised when there's a resource conflict."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCode.CONFLICT,
            status_code=409,
            details=details,
        )


class ActiveSessionExistsError(ConflictError):
    """Raised when starting a session while another one is active."""

    def __init__(
        self,
        active_template_id: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        error_details = details or {}
        error_details["active_template_id"] = active_template_id
        super().__init__(
            message="User already has an active workout session",
            details=error_details,
        )
        self.code = ErrorCode.ACTIVE_SESSION_EXISTS


class SessionVersionConflictError(ConflictError):
    """Raised when an update carries a stale active-session version."""

    def __init__(
        self,
        expected_version: Optional[int],
        current_version: int,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        error_details = details or {}
        error_details["expected_version"] = expected_version
        error_details["current_version"] = current_version
        super().__init__(
            message="Session data has been modified by another client",
            details=error_details,
        )
        self.code = ErrorCode.SESSION_VERSION_CONFLICT


class SessionRecoveryConflictError(ConflictError):
    """Raised when an active session cannot be resumed as-is."""

    def __init__(
        self,
        issues: List[str],
        can_recover: bool,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        error_details = details or {}
        error_details["issues"] = issues
        error_details["can_recover"] = can_recover
        error_details["suggestion"] = "Use force=true to discard the session and start over, or end it"
        super().__init__(
            message="Session data integrity issues found",
            details=error_details,
        )
        self.code = ErrorCode.SESSION_RECOVERY_CONFLICT


# ============================================================================
# Enrichment Errors
# ============================================================================

class EnrichmentError(WorkoutTrackerError):
    """Raised when a best-effort step after completion fails.

    Callers of the completion pipeline never see this error; it is caught
    and logged where the enrichment step runs.
    """

    def __init__(
        self,
        message: str,
        step: str,
        code: ErrorCode = ErrorCode.PR_PROCESSING_FAILED,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        error_details = details or {}
        error_details["step"] = step
        super().__init__(
            message=message,
            code=code,
            status_code=500,
            details=error_details,
        )


# ============================================================================
# Database Errors
# ============================================================================

class DatabaseError(WorkoutTrackerError):
    """Raised when a database operation fails."""

    def __init__(
        self,
        message: str = "Database operation failed",
        operation: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        error_details = details or {}
        if operation:
            error_details["operation"] = operation
        super().__init__(
            message=message,
            code=ErrorCode.DATABASE_ERROR,
            status_code=500,
            details=error_details,
        )
