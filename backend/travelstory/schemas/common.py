"""
TravelStory Backend - Shared Schemas
======================================

What:  Base model with camelCase aliasing, plus error and health responses.
Why:   Every endpoint speaks the same JSON dialect and error format.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    Base for all API models.

    alias_generator:  snake_case attributes ↔ camelCase JSON keys
    populate_by_name: services and tests may construct with snake_case names
    from_attributes:  response models are built straight from ORM rows
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class MessageResponse(BaseModel):
    """Plain acknowledgement, e.g. {"message": "Travel story deleted successfully"}."""
    message: str


class ErrorResponse(BaseModel):
    """
    What:  Standardized error response format for all API errors.

    Fields:
        error: Machine-readable error code (e.g., "validation_error", "not_found")
        message: Human-readable description for display to users
        details: Optional extra context (e.g., which field failed validation)
        request_id: Correlation ID for tracing this error in server logs
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """
    What:  Health check response showing service and dependency status.
    Who:   Returned by GET /health for monitoring and load balancer probes.
    """
    status: str = Field(description="Overall service status: healthy, degraded, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    storage: str = Field(description="Uploads directory: writable, unavailable")
    uptime_seconds: float = Field(description="Seconds since service started")
