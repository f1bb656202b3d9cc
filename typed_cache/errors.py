"""
Typed Cache - Core Error Types

Defines the exception hierarchy for the typed cache layer and its backends.
All exceptions inherit from TypedCacheError for consistent error handling.

Cancellation is deliberately not part of this hierarchy: it surfaces as
asyncio.CancelledError so callers can tell it apart from real failures.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """
    Standard error codes for structured error reporting.

    Used by callers that need to map cache failures to responses.
    """

    # Input validation errors
    INVALID_ARGUMENT = "INVALID_ARGUMENT"

    # Serialization errors
    SERIALIZATION_FAILURE = "SERIALIZATION_FAILURE"

    # Store errors
    CACHE_FAILURE = "CACHE_FAILURE"
    CACHE_UNAVAILABLE = "CACHE_UNAVAILABLE"

    # Configuration errors
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"

    # Internal errors
    INTERNAL_ERROR = "INTERNAL_ERROR"


class TypedCacheError(Exception):
    """Base exception for all typed cache errors."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for structured logging or API responses."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(TypedCacheError):
    """Raised when configuration is invalid or missing."""


class InvalidArgumentError(TypedCacheError, ValueError):
    """Raised when a required argument is missing or of the wrong type."""

    def __init__(self, parameter: str, reason: str | None = None):
        message = f"Invalid argument '{parameter}'"
        if reason:
            message += f": {reason}"
        super().__init__(message, {"parameter": parameter, "error_code": ErrorCode.INVALID_ARGUMENT})
        self.parameter = parameter


class SerializationError(TypedCacheError):
    """Raised when a value cannot be converted to or from its JSON form."""

    def __init__(
        self,
        operation: str,
        type_name: str,
        details: dict[str, Any] | None = None,
    ):
        message = f"Failed to {operation} value of type {type_name}"
        error_details = details or {}
        error_details.update({"operation": operation, "type": type_name})
        super().__init__(message, error_details)
        self.operation = operation
        self.type_name = type_name


class CacheError(TypedCacheError):
    """Base exception for cache store errors."""


class CacheConnectionError(CacheError):
    """Raised when the cache backend cannot be reached."""

    def __init__(self, backend: str, details: dict[str, Any] | None = None):
        message = f"Failed to connect to cache backend: {backend}"
        super().__init__(message, details)


class CacheOperationError(CacheError):
    """Raised when a cache backend operation fails."""

    pass


def extract_error_code(error: BaseException) -> ErrorCode:
    """
    Extract appropriate ErrorCode from an exception.

    Args:
        error: Exception to categorize

    Returns:
        Appropriate ErrorCode for the exception
    """
    if isinstance(error, InvalidArgumentError):
        return ErrorCode.INVALID_ARGUMENT

    if isinstance(error, SerializationError):
        return ErrorCode.SERIALIZATION_FAILURE

    if isinstance(error, CacheConnectionError):
        return ErrorCode.CACHE_UNAVAILABLE

    if isinstance(error, CacheError):
        return ErrorCode.CACHE_FAILURE

    if isinstance(error, ConfigurationError):
        return ErrorCode.CONFIGURATION_ERROR

    return ErrorCode.INTERNAL_ERROR
