"""
Shared error handling for the City Data Gateway.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response format."""

    code: str
    message: str
    details: Dict[str, Any] = {}


class GatewayException(Exception):
    """Base exception for gateway services."""

    status_code = 400

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            code=self.code,
            message=self.message,
            details=self.details
        )


class ValidationError(GatewayException):
    """Validation-related errors."""

    def __init__(self, message: str = "Validation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("VALIDATION_ERROR", message, details)


class ExternalServiceError(GatewayException):
    """External service errors."""

    status_code = 500

    def __init__(self, service: str, message: str = "External service error",
                 details: Optional[Dict[str, Any]] = None, code: str = "EXTERNAL_SERVICE_ERROR"):
        self.service = service
        super().__init__(code, f"{service}: {message}", details)


class UpstreamUnavailableError(ExternalServiceError):
    """Upstream could not be reached or did not answer in time."""

    def __init__(self, service: str, message: str = "Upstream unavailable", details: Optional[Dict[str, Any]] = None):
        super().__init__(service, message, details, code="UPSTREAM_UNAVAILABLE")


class UpstreamStatusError(ExternalServiceError):
    """Upstream answered with a non-success status."""

    def __init__(self, service: str, status_code: int, details: Optional[Dict[str, Any]] = None):
        self.upstream_status = status_code
        super().__init__(
            service,
            f"Unexpected status {status_code}",
            {"status_code": status_code, **(details or {})},
            code="UPSTREAM_STATUS_ERROR"
        )


class UpstreamPayloadError(ExternalServiceError):
    """Upstream body was not JSON or did not have the expected shape."""

    def __init__(self, service: str, message: str = "Malformed upstream payload", details: Optional[Dict[str, Any]] = None):
        super().__init__(service, message, details, code="UPSTREAM_PAYLOAD_ERROR")
