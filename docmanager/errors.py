"""
Error taxonomy.

Services raise these directly; FastAPI renders them like any other
``HTTPException``. ``detail`` is always ``{"error": <kind>, "message": <text>}``
so clients can switch on a stable kind instead of parsing messages.
"""

from typing import Any

from fastapi import HTTPException, status


class AppError(HTTPException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error = "internal_error"
    default_message = "Internal server error"

    def __init__(self, message: str | None = None, headers: dict[str, str] | None = None):
        self.message = message or self.default_message
        super().__init__(
            status_code=type(self).status_code,
            detail={"error": self.error, "message": self.message},
            headers=headers,
        )


class ValidationFailed(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    error = "validation_error"
    default_message = "Invalid request"


class _AuthError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str | None = None):
        super().__init__(message, headers={"WWW-Authenticate": "Bearer"})


class InvalidCredentials(_AuthError):
    error = "invalid_credentials"
    default_message = "Invalid username/email or password"


class Unauthenticated(_AuthError):
    error = "unauthenticated"
    default_message = "Authentication required"


class InvalidToken(_AuthError):
    error = "invalid_token"
    default_message = "Invalid or expired token"


class Forbidden(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    error = "forbidden"
    default_message = "Access denied"


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    error = "not_found"
    default_message = "Resource not found"

    @classmethod
    def for_resource(cls, resource: str, field: str, value: Any) -> "NotFound":
        return cls(f"{resource} not found with {field}: '{value}'")


class Conflict(AppError):
    status_code = status.HTTP_409_CONFLICT
    error = "conflict"
    default_message = "Resource already exists"


class PayloadTooLarge(AppError):
    status_code = status.HTTP_413_REQUEST_ENTITY_TOO_LARGE
    error = "payload_too_large"
    default_message = "Uploaded file is too large"


class StorageError(AppError):
    error = "storage_error"
    default_message = "Could not process the stored file. Please try again."
