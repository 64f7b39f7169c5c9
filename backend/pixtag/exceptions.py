"""
PixTag Backend — Custom Exception Hierarchy
============================================

What:  Defines application-specific exceptions for different error scenarios.
Why:   Custom exceptions enable targeted error handling with appropriate HTTP
       status codes and user-friendly messages.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with correct HTTP status codes.
Who:   Raised by services and the file service; caught by global handlers.

Exception Hierarchy:
    PixTagError (base)
    ├── ValidationError          → 400 Bad Request (client can fix)
    ├── NotFoundError            → 404 Not Found
    ├── StoreError               → 400 Bad Request (constraint violation / store I/O)
    ├── FileStorageError         → 500 Internal Server Error (upload write failed)
    └── FileSystemWarning        → never returned; logged by the deletion flow

Nothing in the application retries. Every error is surfaced synchronously to
the caller, except FileSystemWarning, which the image deletion flow logs and
suppresses so a filesystem hiccup cannot block cleanup of database state.
"""

from typing import Any, Dict, Optional


class PixTagError(Exception):
    """
    Base exception for all PixTag application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, returned only for validation errors)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(PixTagError):
    """
    Raised when client input fails validation.

    When:    Missing file, unsupported media type, oversized upload,
             malformed ids, empty or over-long label names.
    HTTP:    400 Bad Request

    Example response:
        {
            "error": "validation_error",
            "message": "Unsupported type 'image/gif'. Allowed types: image/jpeg, image/png",
            "details": {"field": "image", "content_type": "image/gif"}
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


class NotFoundError(PixTagError):
    """
    Raised when a requested resource does not exist.

    When:    DELETE /api/images/{id} for an id with no row, or a stored
             file that is missing on disk.
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


class StoreError(PixTagError):
    """
    Raised when the persistent store rejects or fails an operation.

    What:    Constraint violation (e.g. annotating an image that does not
             exist) or an I/O failure reported by the database driver.
    HTTP:    400 Bad Request, with a generic message

    Security Note:
        The driver's message (SQL text, constraint names) goes to the log
        through `context`, never into the response body.
    """

    def __init__(
        self,
        message: str = "The request could not be completed by the data store.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class FileStorageError(PixTagError):
    """
    Raised when an uploaded file cannot be written to the storage volume.

    When:    Disk full, permission denied, directory not writable.
    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class FileSystemWarning(PixTagError):
    """
    Raised by FileService.remove_file when a stored image cannot be removed.

    Deletion is best-effort with respect to the filesystem: the image
    deletion flow catches this, logs it, and carries on deleting rows.
    It is never translated into an HTTP response.
    """

    def __init__(
        self,
        message: str = "Stored file could not be removed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
