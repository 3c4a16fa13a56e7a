"""
TravelStory Backend - Custom Exception Hierarchy
==================================================

What:  Defines application-specific exceptions for different error scenarios.
Why:   Custom exceptions enable targeted error handling with appropriate HTTP
       status codes and user-friendly messages.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with correct HTTP status codes.
Who:   Raised by services, stores and the access guard; caught by global handlers.

Exception Hierarchy:
    TravelStoryError (base)
    ├── ValidationError          → 400 Bad Request (client can fix)
    ├── ConflictError            → 400 Bad Request (email already registered)
    ├── InvalidCredentialsError  → 400 Bad Request (wrong password)
    ├── AuthenticationError      → 401 Unauthorized (missing/invalid/expired token)
    ├── NotFoundError            → 404 Not Found (absent OR owned by someone else)
    ├── StorageError             → 500 Internal Server Error (store failure)
    ├── FileStorageError         → 500 Internal Server Error (disk failure)
    └── RateLimitExceededError   → 429 Too Many Requests

Ownership note:
    There is deliberately no "forbidden" error. A story owned by another user
    is reported exactly like a missing one so that ids of other users' stories
    cannot be probed.
"""

from typing import Any, Dict, Optional


class TravelStoryError(Exception):
    """
    Base exception for all TravelStory application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, and returned as "details" only
                  where the handler chooses to)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(TravelStoryError):
    """
    Raised when client input fails validation.

    When:    Missing required fields, no uploaded file, missing query
             parameter, empty search query, unparsable epoch timestamp.
    HTTP:    400 Bad Request
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


class ConflictError(TravelStoryError):
    """Raised when registering an email that already has an account. HTTP 400."""

    def __init__(
        self,
        message: str = "User already exists",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class InvalidCredentialsError(TravelStoryError):
    """Raised when the password does not match the stored hash. HTTP 400."""

    def __init__(self, message: str = "Invalid Credentials"):
        super().__init__(message=message)


class AuthenticationError(TravelStoryError):
    """
    Raised by the access guard when a request cannot be attributed to a user.

    When:    No bearer token, malformed token, bad signature, expired token,
             or a valid token whose user no longer exists.
    HTTP:    401 Unauthorized (with WWW-Authenticate: Bearer)

    The message never says which of those cases applied.
    """

    def __init__(
        self,
        message: str = "Authentication required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(TravelStoryError):
    """
    Raised when a requested resource does not exist for the caller.

    When:    Story lookup by (id, owner) misses; login with an unknown email.
    HTTP:    404 Not Found
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class StorageError(TravelStoryError):
    """
    Raised when a store operation fails unexpectedly.

    When:    Connection lost mid-query, constraint violation, etc.
    HTTP:    500 Internal Server Error (underlying message is surfaced)
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class FileStorageError(TravelStoryError):
    """
    Raised when writing an uploaded image to disk fails.

    When:    Disk full, permission denied, directory not writable, I/O error.
    HTTP:    500 Internal Server Error

    Deleting images never raises this: removal is best-effort.
    """

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(TravelStoryError):
    """
    Raised when a client exceeds the per-IP request rate limit.

    HTTP:    429 Too Many Requests (with Retry-After)
    """

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Rate limit exceeded. Please wait {retry_after} seconds before making more requests."
        )
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after
