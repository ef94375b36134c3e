"""
Shared error classes for the meetings calendar services.

Provides:
- Base exception class for service errors
- Common subclasses (Validation, Configuration, InvalidTimezone)
- Shared error response model
- Utility to convert exceptions to error responses

Common Usage Patterns:
=====================

>>> from services.common.errors import InvalidTimezoneError
>>>
>>> # Unknown IANA zone while rendering a calendar document
>>> error = InvalidTimezoneError("Mars/Olympus_Mons")
>>> error.error_code
<ErrorCode.INVALID_TIMEZONE: 'INVALID_TIMEZONE'>

Error Response Conversion:
>>> from services.common.errors import exception_to_response
>>>
>>> try:
...     render_invitation()
... except Exception as e:
...     error_response = exception_to_response(e)

Error Code Taxonomy:
===================
- VALIDATION_* : Caller supplied invalid input
- CONFIGURATION_* / INVALID_TIMEZONE : Input that makes output impossible to trust
- INTERNAL_ERROR : Anything else
"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel

from services.common.logging_config import request_id_var


class ErrorCode(str, Enum):
    """
    Standardized error codes for the meetings calendar services.

    Categories:
        - General: Common errors that apply across all services
        - Configuration: Inputs that cannot be resolved (time zones, settings)
    """

    # ==========================================
    # GENERAL ERRORS
    # ==========================================
    VALIDATION_FAILED = "VALIDATION_FAILED"  # Input validation failed
    INTERNAL_ERROR = "INTERNAL_ERROR"  # Generic internal error

    # ==========================================
    # CONFIGURATION ERRORS
    # ==========================================
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"  # Generic configuration problem
    INVALID_TIMEZONE = "INVALID_TIMEZONE"  # IANA zone could not be loaded


class ErrorResponse(BaseModel):
    """
    Standardized error response model.

    Attributes:
        type: Error type categorization (e.g., "validation_error")
        message: Human-readable error message
        details: Optional dictionary containing additional error context
        timestamp: ISO 8601 timestamp of when the error occurred
        request_id: Identifier for tracing and debugging purposes
    """

    type: str
    message: str
    details: Optional[Dict[str, Any]] = None
    timestamp: str
    request_id: str


def _current_request_id() -> str:
    request_id = request_id_var.get()
    if request_id and request_id != "uninitialized":
        return request_id
    return str(uuid.uuid4())


class MeetingsServiceException(Exception):
    """
    Base exception class for all meetings calendar errors.

    Attributes:
        message: Human-readable error message
        details: Dictionary containing additional error context
        error_type: Categorization of the error (validation_error, etc.)
        error_code: Specific error code from the ErrorCode enum
        timestamp: ISO 8601 timestamp when error occurred
        request_id: Identifier for request tracing, taken from the logging
            context when one is set
    """

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        error_type: str = "internal_error",
        error_code: Optional[ErrorCode] = None,
        request_id: Optional[str] = None,
    ):
        self.message = message
        self.details = details or {}
        self.error_type = error_type
        self.error_code = error_code
        self.timestamp = datetime.now(timezone.utc).isoformat()
        self.request_id = request_id or _current_request_id()
        super().__init__(self.message)

    def to_error_response(self) -> ErrorResponse:
        """Convert exception to an ErrorResponse model, adding the code to details."""
        details = {
            **self.details,
            **({"code": self.error_code.value} if self.error_code else {}),
        }
        return ErrorResponse(
            type=self.error_type,
            message=self.message,
            details=details if details else None,
            timestamp=self.timestamp,
            request_id=self.request_id,
        )


class ValidationError(MeetingsServiceException):
    """
    Exception for input validation errors.

    Args:
        message: Human-readable description of the validation failure
        field: Optional field name that failed validation
        value: Optional invalid value that was provided
        details: Optional additional validation context
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Any = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        merged = dict(details or {})
        if field is not None:
            merged["field"] = field
        if value is not None:
            merged["value"] = str(value)
        super().__init__(
            message,
            details=merged,
            error_type="validation_error",
            error_code=ErrorCode.VALIDATION_FAILED,
        )
        self.field = field
        self.value = value


class ConfigurationError(MeetingsServiceException):
    """Input that cannot be resolved into trustworthy output. Not retryable."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        error_code: ErrorCode = ErrorCode.CONFIGURATION_ERROR,
    ):
        super().__init__(
            message,
            details=details,
            error_type="configuration_error",
            error_code=error_code,
        )


class InvalidTimezoneError(ConfigurationError):
    """Raised when an IANA time zone identifier cannot be loaded."""

    def __init__(self, timezone_name: str):
        super().__init__(
            f"invalid timezone {timezone_name!r}",
            details={"timezone": timezone_name},
            error_code=ErrorCode.INVALID_TIMEZONE,
        )
        self.timezone_name = timezone_name


def exception_to_response(exc: Exception) -> ErrorResponse:
    """Convert any exception into an ErrorResponse."""
    if isinstance(exc, MeetingsServiceException):
        return exc.to_error_response()
    return ErrorResponse(
        type="internal_error",
        message=str(exc) or exc.__class__.__name__,
        details={"code": ErrorCode.INTERNAL_ERROR.value},
        timestamp=datetime.now(timezone.utc).isoformat(),
        request_id=_current_request_id(),
    )
