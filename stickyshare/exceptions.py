"""
StickyShare Backend — Custom Exception Hierarchy
=================================================

What:  Defines application-specific exceptions for different error scenarios.
How:   Each exception class carries a message and optional context dict.
       Views catch these at the originating call and turn them into toasts;
       global exception handlers (registered in main.py) turn them into
       structured JSON error responses for the API.
Who:   Raised by services and views; caught by views and global handlers.

Exception Hierarchy:
    StickyShareError (base)
    ├── ValidationError      → 400 Bad Request (caught before any network call)
    ├── NotFoundError        → 404 Not Found (gateway confirms absence)
    ├── RepositoryError      → 502 Bad Gateway (record store failure)
    ├── UploadError          → 502 Bad Gateway (blob store failure)
    └── ComposerStateError   → 409 Conflict (transition not allowed in current state)
"""

from typing import Any, Dict, Optional


class StickyShareError(Exception):
    """
    Base exception for all StickyShare application errors.

    Attributes:
        message:  User-facing error description (safe to show in a toast or response)
        context:  Additional debug info (logged but NOT returned to the user)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(StickyShareError):
    """
    Raised when user input fails validation.

    When:    Oversized or non-image file, empty note, color outside the palette.
    HTTP:    400 Bad Request
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        title: str = "Invalid input",
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field
        # Short heading used when the error is shown as a toast
        self.title = title


class NotFoundError(StickyShareError):
    """
    Raised when the gateway confirms a requested record does not exist.

    When:    get_note() for an id with no matching row.
    HTTP:    404 Not Found

    Kept distinct from RepositoryError: "no such note" and "service
    unreachable" are different outcomes for the caller.
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


class RepositoryError(StickyShareError):
    """
    Raised when talking to the record store fails.

    When:    Connection refused, gateway returned a non-2xx status, or the
             response body could not be understood.
    HTTP:    502 Bad Gateway

    The message returned to the client is always generic; status codes and
    gateway bodies stay in `context` for the logs.
    """

    def __init__(
        self,
        message: str = "Could not reach the note store. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class UploadError(StickyShareError):
    """
    Raised when transmitting an image to the blob store fails.

    When:    Upload request failed or was rejected by the gateway.
    HTTP:    502 Bad Gateway

    The enclosing commit aborts without creating a note.
    """

    def __init__(
        self,
        message: str = "Failed to upload the image. Please try again.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ComposerStateError(StickyShareError):
    """
    Raised when a composer transition is attempted from the wrong state.

    When:    commit() while a commit is already in flight, edits while idle.
    HTTP:    409 Conflict
    """

    def __init__(
        self,
        action: str,
        state: str,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx.update({"action": action, "state": state})
        super().__init__(
            message=f"Cannot {action} while the composer is {state}",
            context=ctx,
        )
        self.action = action
        self.state = state
