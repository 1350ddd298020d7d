"""
StudySpark Backend — Custom Exception Hierarchy
=================================================

What:  Application-specific exceptions for the error scenarios the API knows about.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with correct HTTP status codes.
Who:   Raised by services, storage backends and routes; caught by global handlers.

Exception Hierarchy:
    StudySparkError (base)
    ├── ValidationError          → 400 Bad Request (client can fix)
    ├── NotFoundError            → 404 Not Found
    ├── FileStorageError         → 500 Internal Server Error
    ├── LLMServiceError          → 500 Internal Server Error (AI provider failed)
    └── DatabaseError            → 500 Internal Server Error

    500-class errors never put `context` in the response body; it is logged only.
"""

from typing import Any, Dict, Optional


class StudySparkError(Exception):
    """
    Base exception for all StudySpark application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned on 5xx)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(StudySparkError):
    """
    Raised when client input fails a business rule that schema validation
    cannot express (e.g. an upload with neither a file nor text content).

    HTTP:    400 Bad Request

    Example response:
        {
            "error": "validation_error",
            "message": "File type '.exe' is not supported. Allowed types: .jpg, .pdf, ...",
            "details": {"field": "file"}
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


class NotFoundError(StudySparkError):
    """
    Raised when a requested resource does not exist.

    Storage backends return None for missing records; routes convert that
    None into this exception so the global handler can answer 404.
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


class FileStorageError(StudySparkError):
    """
    Raised when the upload scratch directory cannot be written or read.

    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class LLMServiceError(StudySparkError):
    """
    Raised when an AI Gateway operation fails as a whole.

    What:    The provider call raised, timed out, or returned text that is not JSON.
    When:    Never for individual missing fields; those get fallback values.
    HTTP:    500 Internal Server Error

    Attributes:
        operation:  What was being generated ("summary", "flashcards", ...)
        cause:      The underlying error message, tagged onto `message`
    """

    def __init__(
        self,
        operation: str = "AI response",
        cause: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"Failed to generate {operation}"
        if cause:
            message = f"{message}: {cause}"
        ctx = context or {}
        ctx["operation"] = operation
        super().__init__(message=message, context=ctx)
        self.operation = operation
        self.cause = cause

    @property
    def public_message(self) -> str:
        """Message safe to show the client (no provider details)."""
        return f"Failed to generate {self.operation}"


class DatabaseError(StudySparkError):
    """
    Raised when database operations fail unexpectedly.

    HTTP:    500 Internal Server Error

    Security Note:
        The message returned to the client is always generic.
        SQL text, constraint names etc. are logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
