"""
Application errors.

Services raise these; the handlers in `socialnet.main` turn each one into a
`{"message": ...}` response with the class's status code. Anything that is
not an AppException is reported as a generic 500.
"""

from typing import Any, Dict, Optional


class AppException(Exception):
    """Base class: an error the caller is allowed to see."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)

    def to_response(self) -> Dict[str, Any]:
        return {"message": self.message}


class BadRequestError(AppException):
    """Well-formed request the business rules reject (self-follow, wrong password)."""

    status_code = 400
    default_message = "Bad request"


class ValidationError(AppException):
    """Payload passed schema validation but not the service's checks."""

    status_code = 422
    default_message = "Validation failed"


class AuthenticationError(AppException):
    status_code = 401
    default_message = "Invalid or expired token"


class AuthorizationError(AppException):
    status_code = 403
    default_message = "You don't have permission to perform this action"


class NotFoundError(AppException):
    status_code = 404
    default_message = "Resource not found"


class ConflictError(AppException):
    """Username or email already taken."""

    status_code = 409
    default_message = "Resource already exists"


class ServiceError(AppException):
    """Unexpected failure, reported without internals."""


class ExternalServiceError(AppException):
    """The image store or the email queue failed."""

    status_code = 502

    def __init__(self, service: str, message: str = "External service error"):
        self.service = service
        super().__init__(f"{service}: {message}")
