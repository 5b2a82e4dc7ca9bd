"""
Error taxonomy for recurate.

Services raise these; the application registers one handler per class that
turns them into a page, a redirect or a status code. Nothing below the
service layer (SQLAlchemy, passlib, the filesystem) is allowed to leak its
own exception types to the routes.
"""

from typing import Any, Optional


class RecurateError(Exception):
    """Base exception for all recurate errors."""

    status_code = 500

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}


class ValidationError(RecurateError):
    """Malformed or missing input. The message is safe to show the user."""

    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(
            message,
            code="VALIDATION_ERROR",
            details={"field": field} if field else None,
        )


class ConflictError(RecurateError):
    """A uniqueness rule was violated (e.g. duplicate email)."""

    status_code = 409

    def __init__(self, message: str = "email already registered"):
        super().__init__(message, code="CONFLICT")


class InvalidCredentialsError(RecurateError):
    """Password did not match the stored hash."""

    status_code = 401

    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message, code="INVALID_CREDENTIALS")


class NotFoundError(RecurateError):
    """Resource not found."""

    status_code = 404

    def __init__(self, message: str = "Not found"):
        super().__init__(message, code="NOT_FOUND")


class UnauthenticatedError(RecurateError):
    """No valid session on a request that needs one."""

    status_code = 401

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message, code="UNAUTHENTICATED")


class ForbiddenError(RecurateError):
    """Caller is authenticated but may not touch the resource."""

    status_code = 403

    def __init__(self, message: str = "Access denied."):
        super().__init__(message, code="FORBIDDEN")


class StorageError(RecurateError):
    """Database or filesystem failure. Details are for the server log only."""

    status_code = 500

    def __init__(self, message: str = "Storage failure"):
        super().__init__(message, code="STORAGE_ERROR")


class HashingError(RecurateError):
    """Password hashing failed."""

    status_code = 500

    def __init__(self, message: str = "Password hashing failed"):
        super().__init__(message, code="HASHING_ERROR")
