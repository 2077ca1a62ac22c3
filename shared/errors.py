"""
Shared error handling for the media catalog gateway.

Every error that reaches a caller is rendered as a small JSON body with a
``message`` field. Internal details stay in the logs.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel


GENERIC_FAILURE_MESSAGE = "Something went wrong. Please try again later."
DETAIL_FAILURE_MESSAGE = (
    "Something went wrong. Please try again later. or contact the developers."
)


class ErrorResponse(BaseModel):
    """Standard error response format."""

    message: str
    error: Optional[str] = None


class CatalogException(Exception):
    """Base exception for catalog gateway services."""

    status_code: int = 500

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        *,
        status_code: Optional[int] = None,
    ):
        self.code = code
        self.message = message
        self.details = details or {}
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(message=self.message)


class ValidationError(CatalogException):
    """Missing or malformed request parameters."""

    status_code = 400

    def __init__(self, message: str = "Validation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("VALIDATION_ERROR", message, details)


class AuthenticationError(CatalogException):
    """Authentication-related errors."""

    status_code = 401

    def __init__(self, message: str = "Authentication failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("AUTHENTICATION_ERROR", message, details)


class NotFoundError(CatalogException):
    """Unknown route."""

    status_code = 404

    def __init__(self, message: str = "", details: Optional[Dict[str, Any]] = None):
        super().__init__("NOT_FOUND", message, details)

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(message=self.message, error="page not found")


class ServiceError(CatalogException):
    """Request failed somewhere behind the handler; the message is fixed."""

    status_code = 500

    def __init__(self, message: str = GENERIC_FAILURE_MESSAGE, details: Optional[Dict[str, Any]] = None):
        super().__init__("SERVICE_ERROR", message, details)


class ExternalServiceError(CatalogException):
    """Upstream provider failure.

    The provider gives no structured error codes, so "not found" and
    "outage" both arrive here.
    """

    status_code = 502

    def __init__(self, service: str, message: str = "External service error", details: Optional[Dict[str, Any]] = None):
        super().__init__("EXTERNAL_SERVICE_ERROR", f"{service}: {message}", details)
