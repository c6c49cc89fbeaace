"""
QuickNotes Backend — Custom Exception Hierarchy
=================================================

What:  Application-specific exceptions for the note service and HTTP layer.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with correct HTTP status codes.
Who:   Raised by stores, the note service, and route handlers.

Exception Hierarchy:
    QuickNotesError (base)
    ├── ValidationError   → 400 Bad Request (client can fix)
    ├── NotFoundError     → 404 Not Found
    └── StorageFailure    → 500 Internal Server Error (generic message)

A missing note is NOT an exception inside the service: stores and the
service return None, and only the route layer turns that into NotFoundError.
"""

from typing import Any, Dict, Optional


class QuickNotesError(Exception):
    """
    Base exception for all QuickNotes application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(QuickNotesError):
    """
    Raised when client input violates a documented constraint.

    When:    Missing or blank title on create, blank title on update,
             request bodies that do not match the note schema.
    HTTP:    400 Bad Request

    Example response:
        {
            "error": "validation_error",
            "message": "Title is required",
            "details": {"field": "title"}
        }
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


class NotFoundError(QuickNotesError):
    """
    Raised by the HTTP layer when a requested note does not exist.

    HTTP:    404 Not Found
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"{resource.capitalize()} not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class StorageFailure(QuickNotesError):
    """
    Raised when the backing store is unreachable or fails unexpectedly.

    HTTP:    500 Internal Server Error

    The message returned to the client is always generic. The original
    exception type and operation name are kept in `context` and logged
    server-side only.
    """

    def __init__(
        self,
        message: str = "A storage error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
