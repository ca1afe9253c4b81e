"""Exception types shared by the support backend.

Every error that should reach an HTTP caller derives from ``AppError`` and
knows its own status code; the FastAPI handlers in ``main`` turn it into the
``{"success": false, "error": {...}}`` body.
"""

from typing import Any, Dict, Optional


class AppError(Exception):
    """Base class for all application errors."""

    status_code = 500
    default_message = "Internal Server Error"

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)

    def to_payload(self) -> Dict[str, Any]:
        return {
            "success": False,
            "error": {"status": self.status_code, "message": self.message},
        }


class ValidationError(AppError):
    """Invalid request data."""

    status_code = 400
    default_message = "Invalid request data"


class NotFoundError(AppError):
    """Resource not found."""

    status_code = 404
    default_message = "Resource not found"


class ServiceUnavailableError(AppError):
    """An upstream dependency could not serve the request."""

    status_code = 503
    default_message = "Service unavailable"


class ConfigurationError(AppError):
    """Missing credential or unknown provider. Fatal at startup."""

    default_message = "Invalid configuration"


class ProviderError(AppError):
    """Non-success response or network failure from a completion provider."""

    status_code = 503
    default_message = "Completion provider error"

    def __init__(self, message: Optional[str] = None, upstream_status: Optional[int] = None):
        super().__init__(message)
        self.upstream_status = upstream_status


class ProviderTimeoutError(ProviderError):
    """The provider did not answer within the configured timeout."""

    default_message = "Completion provider timed out"
