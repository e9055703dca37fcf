"""
Custom exceptions for maestro_dms library.

This module defines all custom exceptions used throughout the library
for better error handling and debugging.
"""

from typing import Optional, Dict, Any, List


class DMSError(Exception):
    """Base exception for all maestro_dms related errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} (Details: {details_str})"
        return self.message


class ConfigurationError(DMSError):
    """Raised when there are configuration-related errors."""

    def __init__(self, message: str, config_key: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.config_key = config_key
        details = details or {}
        if config_key:
            details["config_key"] = config_key
        super().__init__(message, details)


class ValidationError(DMSError):
    """Raised when a payload is missing a required field."""

    def __init__(self, message: str, field: Optional[str] = None, value: Optional[Any] = None,
                 details: Optional[Dict[str, Any]] = None):
        self.field = field
        self.value = value
        details = details or {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = value
        super().__init__(message, details)


class RequestError(DMSError):
    """
    Normalized failure of an outbound call.

    Carries the original cause (``error``), the HTTP status (500 when the
    transport did not provide one) and the elapsed time in milliseconds.
    """

    def __init__(self, message: str, status: int = 500, duration_ms: float = 0.0,
                 error: Optional[BaseException] = None, details: Optional[Dict[str, Any]] = None):
        self.status = status
        self.duration_ms = duration_ms
        self.error = error
        details = details or {}
        details["status"] = status
        details["duration_ms"] = round(duration_ms, 3)
        super().__init__(message, details)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.error,
            "status": self.status,
            "message": self.message,
            "duration_ms": self.duration_ms,
        }


class StorageUploadError(RequestError):
    """Raised when the signed POST to object storage fails."""
    pass


class LocalFileNotFoundError(DMSError):
    """Raised when a file queued for upload does not exist locally."""

    def __init__(self, message: str, path: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.path = path
        details = details or {}
        if path:
            details["path"] = path
        super().__init__(message, details)


class BulkUploadError(DMSError):
    """Raised when at least one file of a bulk upload fails."""

    def __init__(self, message: str, failures: Optional[Dict[str, BaseException]] = None,
                 details: Optional[Dict[str, Any]] = None):
        self.failures = failures or {}
        details = details or {}
        if self.failures:
            details["failed_files"] = ", ".join(sorted(self.failures))
        super().__init__(message, details)

    @property
    def failed_files(self) -> List[str]:
        return sorted(self.failures)
