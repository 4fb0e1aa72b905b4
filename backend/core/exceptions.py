"""Custom exceptions for the backend API

Each exception carries the message the frontend reads from the `error`
field, plus a machine-readable code and optional details.
"""
from typing import Optional, Dict, Any

from services.errors import ProviderError


class APIException(Exception):
    """Base exception for all API-related errors"""

    def __init__(
        self,
        message: str,
        error_code: str = "API_ERROR",
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}


class ServiceException(APIException):
    """Exception raised when an external provider call fails

    `message` is the user-facing text for the route; the provider's own
    payload goes into details for diagnostics.
    """

    def __init__(
        self,
        message: str,
        service_name: str,
        error_code: str = "SERVICE_ERROR",
        original_error: Optional[Exception] = None
    ):
        details: Dict[str, Any] = {"service": service_name}
        if isinstance(original_error, ProviderError):
            details["reason"] = original_error.message
            details["provider_status"] = original_error.status_code
            details["provider_response"] = original_error.provider_response
        elif original_error is not None:
            details["reason"] = str(original_error)

        super().__init__(
            message=message,
            error_code=error_code,
            status_code=500,
            details=details
        )
        self.service_name = service_name
        self.original_error = original_error


class ValidationException(APIException):
    """Exception raised for validation errors"""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(
            message=message,
            error_code="VALIDATION_ERROR",
            status_code=400,
            details={"field": field} if field else {}
        )
        self.field = field


class PayloadTooLargeException(APIException):
    """Exception raised when a request body exceeds the configured limit"""

    def __init__(self, limit: int):
        super().__init__(
            message=f"Request body exceeds {limit} bytes",
            error_code="PAYLOAD_TOO_LARGE",
            status_code=413,
            details={"limit": limit}
        )
        self.limit = limit
