"""
StudySpark Backend — Shared Schema Base
=========================================

What:  CamelModel, the base class for every API schema.
How:   alias_generator=to_camel makes camelCase the wire format; FastAPI
       serializes response_model by alias. populate_by_name lets Python code
       (and ORM rows via from_attributes) use the snake_case field names.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ErrorResponse(CamelModel):
    """
    What:  Standardized error response format for all API errors.

    Fields:
        error: Machine-readable error code (e.g., "validation_error", "not_found")
        message: Human-readable description for display to users
        details: Optional extra context (e.g., which field failed validation)
        request_id: Correlation ID for tracing this error in server logs

    Example:
        {
            "error": "not_found",
            "message": "Subject with ID '...' was not found",
            "request_id": "a1b2c3d4"
        }
    """
    error: str
    message: str
    details: dict | None = None
    request_id: str | None = None

    # Error bodies keep snake_case keys, set explicitly by the handlers
    model_config = ConfigDict(alias_generator=None)


class HealthResponse(CamelModel):
    """
    What:  Health check response showing service and dependency status.
    Who:   Returned by GET /health for monitoring and load balancer health checks.
    """
    status: str
    version: str
    storage: str
    storage_status: str
    llm: str
    uptime_seconds: float
