"""Custom exception classes for the training management platform."""

from typing import Any, Optional

from fastapi import status


class TMSError(Exception):
    """Base exception for the platform.

    Every subclass maps to one HTTP status; the global handler renders it as
    ``{statusCode, error, message, errorCode?, errors?}``.
    """

    status_code: int = status.HTTP_400_BAD_REQUEST
    error: str = "Bad Request"
    default_message: str = "An error occurred"

    def __init__(
        self,
        message: Optional[str] = None,
        error_code: Optional[str] = None,
        errors: Optional[list[dict[str, Any]]] = None,
    ):
        self.message = message or self.default_message
        self.error_code = error_code
        self.errors = errors
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {
            "statusCode": self.status_code,
            "error": self.error,
            "message": self.message,
        }
        if self.error_code:
            body["errorCode"] = self.error_code
        if self.errors:
            body["errors"] = self.errors
        return body


class UnauthenticatedError(TMSError):
    """Raised when the bearer token is missing, invalid or expired."""
    status_code = status.HTTP_401_UNAUTHORIZED
    error = "Unauthorized"
    default_message = "Unauthorized access"


class ForbiddenError(TMSError):
    """Raised when the caller's role may not perform the action."""
    status_code = status.HTTP_403_FORBIDDEN
    error = "Forbidden"
    default_message = "Forbidden"


class NotFoundError(TMSError):
    """Raised when a requested resource is not found."""
    status_code = status.HTTP_404_NOT_FOUND
    error = "Not Found"
    default_message = "Not Found"


class UnprocessableEntityError(TMSError):
    """Raised for field-level validation failures."""
    status_code = 422
    error = "Unprocessable Entity"
    default_message = "Validation failed"


class ConflictError(UnprocessableEntityError):
    """Raised when a uniqueness constraint would be violated."""
    default_message = "Resource already exists"


class BadRequestError(TMSError):
    """Raised for invalid state transitions and malformed operations."""


class AlreadyDisabledError(BadRequestError):
    default_message = "Resource is already disabled"


class AlreadyActiveError(BadRequestError):
    default_message = "Resource is already active"


class UnsupportedRoleError(BadRequestError):
    """Raised when a role has no employee-id prefix."""
    default_message = "Role is not supported"


class SelfOperationError(BadRequestError):
    default_message = "Cannot operate on yourself"


class StorageError(TMSError):
    """Raised when an object storage operation fails."""
    status_code = status.HTTP_502_BAD_GATEWAY
    error = "Bad Gateway"
    default_message = "Storage operation failed"


class MailError(TMSError):
    """Raised when the outbound mail server rejects a message."""
    status_code = status.HTTP_502_BAD_GATEWAY
    error = "Bad Gateway"
    default_message = "Failed to send email"


def field_error(path: str, message: str) -> dict[str, str]:
    return {"path": path, "message": message}
