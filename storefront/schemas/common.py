"""
Storefront Backend — Shared Schema Building Blocks
====================================================

What:  The camelCase base model, the public user projection, and the
       response shapes shared by several routes (errors, acknowledgements,
       health).
"""

import uuid
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from storefront.models.user import UserRole


class CamelModel(BaseModel):
    """
    Base for every API schema.

    - alias_generator=to_camel: `category_id` travels as `categoryId`
    - populate_by_name: inputs may also use the snake_case name
    - from_attributes: responses are built straight from ORM rows
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class PublicUser(CamelModel):
    """
    The only user projection that leaves the service layer.

    Deliberately has no `password` field: building it from a User row
    drops the hash.
    """

    id: uuid.UUID
    email: str
    name: Optional[str] = None
    phone: Optional[str] = None
    role: UserRole


class SuccessResponse(BaseModel):
    success: bool = True


class ErrorResponse(BaseModel):
    """
    Standardized error response format for all API errors.

    Fields:
        error: Machine-readable error code (e.g., "validation_error", "unauthorized")
        message: Human-readable description for display to users
        details: Optional field-level context (validation errors only)
        request_id: Correlation ID for tracing this error in server logs
    """

    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[Any] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
