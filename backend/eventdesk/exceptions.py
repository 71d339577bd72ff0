"""
EventDesk Backend — Custom Exception Hierarchy
================================================

What:  Defines application-specific exceptions for the failure modes of the
       Events API.
How:   Each exception class carries a client-safe message, an optional context
       dict and the HTTP status code it maps to. Service operations translate
       them into `Failure` results; global handlers (registered in main.py)
       render anything that escapes into the same JSON envelope.

Exception Hierarchy:
    EventDeskError (base)
    ├── ValidationError   → 400 Bad Request (client can fix)
    ├── NotFoundError     → 404 Not Found
    ├── StoreError        → 500 Internal Server Error
    └── StartupError      → fatal, raised during application startup
"""

from typing import Any, Dict, Optional


class EventDeskError(Exception):
    """
    Base exception for all EventDesk application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
        status_code: HTTP status the error maps to
    """

    status_code: int = 500

    def __init__(
        self,
        message: str = "Internal server error",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)

    @property
    def detail(self) -> Optional[str]:
        """Raw error detail, only ever shown to clients outside production."""
        return self.context.get("detail")


class ValidationError(EventDeskError):
    """
    Raised when client input fails validation.

    When:    Missing or malformed event ID, missing name, bad pagination
             parameters, empty update body, ill-typed payload fields.
    HTTP:    400 Bad Request

    Example response:
        {"success": false, "message": "Invalid Event ID format"}
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


class NotFoundError(EventDeskError):
    """
    Raised when a well-formed request references a document that does not exist.

    When:    GET/PUT/DELETE with a valid ObjectId that matches no event.
    HTTP:    404 Not Found
    """

    status_code = 404

    def __init__(
        self,
        resource: str = "Resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=f"{resource} not found", context=ctx)


class StoreError(EventDeskError):
    """
    Raised when a document store operation fails.

    What:    Wraps PyMongo failures (network errors, server errors, bad
             documents) and unexpected faults inside service operations.
    HTTP:    500 Internal Server Error

    Security Note:
        The message is always the generic "Internal server error". The raw
        driver message travels in `context["detail"]` and is attached to the
        response only when the app is not running in production.
    """

    status_code = 500

    def __init__(
        self,
        message: str = "Internal server error",
        detail: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if detail is not None:
            ctx["detail"] = detail
        super().__init__(message=message, context=ctx)


class StartupError(EventDeskError):
    """
    Raised when the store connection or its initial ping fails at startup.

    There is no retry or backoff: the lifespan re-raises it and the server
    process stops.
    """

    def __init__(
        self,
        message: str = "Failed to connect to the document store",
        detail: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if detail is not None:
            ctx["detail"] = detail
        super().__init__(message=message, context=ctx)
