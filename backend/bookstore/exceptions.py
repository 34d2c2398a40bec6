"""
Bookstore Backend — Custom Exception Hierarchy
================================================

What:  Defines application-specific exceptions for the resource store and services.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with correct HTTP status codes.
Who:   Raised by the resource store and services; caught by global handlers.

Exception Hierarchy:
    BookstoreError (base)
    ├── ValidationError   → 400 Bad Request (client can fix)
    ├── NotFoundError     → 404 Not Found
    └── ConflictError     → 409 Conflict (stale sync token)

The store itself never imports anything HTTP-related; the status codes above
are assigned only by the handlers in main.py.
"""

from typing import Any, Dict, Iterable, List, Optional


def describe_errors(errors: Iterable[Dict[str, Any]]) -> List[Dict[str, str]]:
    """
    Flatten pydantic error dicts to {field, message} pairs safe to return in JSON.

    Location parts are dotted together, e.g. ("body", "title") → "body.title".
    """
    return [
        {"field": ".".join(str(part) for part in err["loc"]), "message": err["msg"]}
        for err in errors
    ]


class BookstoreError(Exception):
    """
    Base exception for all Bookstore application errors.

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


class ValidationError(BookstoreError):
    """
    Raised when caller input is malformed.

    When:    Missing payload, a patch that blanks a required field, a page token
             that is not a non-negative integer, a page size below 1, or a
             patch function that tries to change a record's id.
    HTTP:    400 Bad Request

    Example response:
        {
            "error": "validation_error",
            "message": "Invalid page token 'abc'",
            "details": {"field": "page_token"}
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


class NotFoundError(BookstoreError):
    """
    Raised when a requested record does not exist.

    When:    get/update/delete on an id that was never created or was deleted.
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
        self.resource = resource
        self.resource_id = resource_id


class ConflictError(BookstoreError):
    """
    Raised when an update was based on a version that is no longer current.

    What:    The caller sent the sync token it read, but another update
             committed in between.
    HTTP:    409 Conflict

    Recovery:
        The client re-reads the record, reapplies its change and retries with
        the fresh sync token.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        expected_version: Optional[int] = None,
        actual_version: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"{resource} with ID '{resource_id}' was modified concurrently: "
            f"expected version {expected_version}, found {actual_version}"
        )
        ctx = context or {}
        ctx.update(
            {
                "resource": resource,
                "resource_id": resource_id,
                "expected_version": expected_version,
                "actual_version": actual_version,
            }
        )
        super().__init__(message=message, context=ctx)
        self.expected_version = expected_version
        self.actual_version = actual_version
