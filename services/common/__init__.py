"""
Common utilities and configurations for the meetings calendar services.
"""

from services.common.errors import (
    ConfigurationError,
    ErrorCode,
    ErrorResponse,
    InvalidTimezoneError,
    MeetingsServiceException,
    ValidationError,
    exception_to_response,
)
from services.common.logging_config import get_logger, setup_service_logging

__all__ = [
    "ErrorCode",
    "ErrorResponse",
    "MeetingsServiceException",
    "ValidationError",
    "ConfigurationError",
    "InvalidTimezoneError",
    "exception_to_response",
    "get_logger",
    "setup_service_logging",
]
