"""
Shared error handling for Identidock services.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Standard error response format."""

    request_id: Optional[str] = None
    code: str
    message: str
    details: Dict[str, Any] = Field(default_factory=dict)


class IdentidockException(Exception):
    """Base exception for Identidock services."""

    status_code = 400

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self, request_id: Optional[str] = None) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            request_id=request_id,
            code=self.code,
            message=self.message,
            details=self.details
        )


class ValidationError(IdentidockException):
    """Validation-related errors."""

    def __init__(self, message: str = "Validation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("VALIDATION_ERROR", message, details)


class CacheError(IdentidockException):
    """Image cache errors. Recovered inside the resolver, never sent to clients."""

    status_code = 503

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(code, message, details)


class CacheReadError(CacheError):
    """Cache unreachable or malformed response on lookup."""

    def __init__(self, message: str = "Cache read failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("CACHE_READ_ERROR", message, details)


class CacheWriteError(CacheError):
    """Cache unreachable or rejected write on populate."""

    def __init__(self, message: str = "Cache write failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("CACHE_WRITE_ERROR", message, details)


class ExternalServiceError(IdentidockException):
    """External service errors."""

    status_code = 502

    def __init__(self, service: str, message: str = "External service error", details: Optional[Dict[str, Any]] = None):
        super().__init__("EXTERNAL_SERVICE_ERROR", f"{service}: {message}", details)


class UpstreamError(ExternalServiceError):
    """Image generation backend unreachable, failing, or returning an unreadable body."""

    def __init__(self, message: str = "Image generation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("generator", message, details)
        self.code = "UPSTREAM_ERROR"
