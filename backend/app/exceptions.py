"""
Inkwell Backend: Custom Exception Hierarchy
===========================================

What:  Application-specific exceptions for each failure the API can report.
How:   Each exception carries a user-facing message and an optional context
       dict. Global exception handlers (registered in main.py) map them to
       structured JSON error responses with the right HTTP status code.
Who:   Raised by services and the Auth Gate; caught by global handlers.

Exception Hierarchy:
    InkwellError (base)
    ├── ValidationError              → 400 Bad Request
    ├── ConflictError                → 400 Bad Request (duplicate unique field)
    ├── InvalidCredentialsError      → 400 Bad Request
    ├── UnauthorizedError            → 401 Unauthorized
    │   └── InvalidTokenError        → 401 Unauthorized
    ├── ForbiddenError               → 403 Forbidden
    ├── NotFoundError                → 404 Not Found
    ├── RateLimitExceededError       → 429 Too Many Requests
    └── DatabaseError                → 500 Internal Server Error

The `context` dict is logged server-side and never returned for 5xx errors.
"""

from typing import Any, Dict, Optional


class InkwellError(Exception):
    """
    Base exception for all Inkwell application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(InkwellError):
    """
    Raised when client input fails a business-rule validation.

    Schema-level problems are reported by FastAPI's RequestValidationError,
    which main.py also maps to 400.
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class ConflictError(InkwellError):
    """Raised when a write would duplicate a unique field (e.g. user email)."""

    def __init__(
        self,
        message: str = "User already exists",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class InvalidCredentialsError(InkwellError):
    """
    Raised when login fails.

    Unknown email and wrong password both raise this with the same message,
    so callers cannot tell which one happened.
    """

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(message="Invalid Credentials", context=context)


class UnauthorizedError(InkwellError):
    """
    Raised by the Auth Gate when a protected route has no usable identity.

    HTTP: 401 Unauthorized, with `WWW-Authenticate: Bearer`.
    """

    def __init__(
        self,
        message: str = "No token provided",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class InvalidTokenError(UnauthorizedError):
    """
    Raised when a bearer token is malformed, badly signed, expired, or names
    a user that no longer exists.
    """

    def __init__(
        self,
        reason: str = "invalid",
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["reason"] = reason
        super().__init__(message="Invalid token", context=ctx)
        self.reason = reason


class ForbiddenError(InkwellError):
    """Raised when an authenticated caller does not own the target record."""

    def __init__(
        self,
        message: str = "Forbidden",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(InkwellError):
    """
    Raised when a requested resource does not exist.

    SQLAlchemy returns None for missing records; services convert that
    into this exception.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"{resource.capitalize()} not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = str(resource_id)
        super().__init__(message=message, context=ctx)
        self.resource = resource


class DatabaseError(InkwellError):
    """
    Raised when database operations fail unexpectedly.

    The message returned to the client is always generic; the original
    error type travels in `context` for the server log only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(InkwellError):
    """
    Raised when a client exceeds the per-IP request rate limit.

    Response includes a Retry-After header.
    """

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Too many requests. Please wait {retry_after} seconds before retrying."
        )
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after
