"""
ResilienceHub Backend — Custom Exception Hierarchy
==================================================

What:  Application-specific exceptions for the error taxonomy of the service.
How:   Each exception class carries a user-facing message and an optional
       context dict. Global exception handlers (registered in main.py) catch
       these and return `{"message": ...}` JSON with the matching status code.
Who:   Raised by the authenticator, role gates, access-scope resolver,
       services and routes; caught by global handlers.

Exception Hierarchy:
    ResilienceHubError (base)
    ├── AuthenticationError      → 401 Unauthorized   (no/invalid/expired session)
    ├── AuthorizationError       → 403 Forbidden      (role or relationship missing)
    ├── NotFoundError            → 404 Not Found
    ├── ValidationError          → 400 Bad Request
    ├── ConflictError            → 409 Conflict       (duplicate username/email)
    └── DatabaseError            → 500 Internal Server Error

Authentication and authorization failures are terminal for the request and
are never retried. A persistence failure while deciding access surfaces as
DatabaseError (500), never as a 403.
"""

from typing import Any, Dict, Optional


class ResilienceHubError(Exception):
    """
    Base exception for all ResilienceHub application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    status_code: int = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class AuthenticationError(ResilienceHubError):
    """
    Raised when a request carries no usable session.

    When:    Missing cookie, unknown token, expired session, or the session's
             user no longer exists.
    HTTP:    401 Unauthorized

    Attributes:
        clear_cookie: The client's session cookie must be cleared in the
                      response so a dead token is not re-sent.
    """

    status_code = 401

    def __init__(
        self,
        message: str = "Authentication required",
        clear_cookie: bool = False,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
        self.clear_cookie = clear_cookie


class AuthorizationError(ResilienceHubError):
    """
    Raised when an authenticated principal may not perform the operation.

    When:    A role gate rejects the principal, or the access-scope resolver
             denies access to the target user's data.
    HTTP:    403 Forbidden
    """

    status_code = 403

    def __init__(
        self,
        message: str = "Access denied.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(ResilienceHubError):
    """
    Raised when a requested record does not exist.

    HTTP:    404 Not Found

    Not raised by access-scope checks on a target user: there a missing user
    is folded into AuthorizationError so existence is not revealed.
    """

    status_code = 404

    def __init__(
        self,
        resource: str = "Resource",
        resource_id: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"{resource} not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = str(resource_id)
        super().__init__(message=message, context=ctx)


class ValidationError(ResilienceHubError):
    """
    Raised when client input fails a business rule.

    HTTP:    400 Bad Request
    Schema-level problems are caught earlier by FastAPI and mapped to the
    same status with the message "Invalid data".
    """

    status_code = 400

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


class ConflictError(ResilienceHubError):
    """Raised when a unique attribute (username, email) is already taken. HTTP 409."""

    status_code = 409

    def __init__(
        self,
        message: str = "Resource already exists",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(ResilienceHubError):
    """
    Raised when a persistence operation fails unexpectedly.

    HTTP:    500 Internal Server Error

    The message returned to the client is always "Internal server error";
    the original error is logged server-side only.
    """

    status_code = 500

    def __init__(
        self,
        message: str = "Internal server error",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
