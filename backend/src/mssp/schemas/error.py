"""Structured error response schemas."""
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ErrorDetail(BaseModel):
    """Detailed error information."""

    code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    field: str | None = Field(default=None, description="Field that caused the error (for validation errors)")
    value: Any | None = Field(default=None, description="Invalid value (for validation errors)")


class ErrorResponse(BaseModel):
    """Standard error response structure shared by every exception handler."""

    error: str = Field(..., description="Error type (e.g., 'ValidationError', 'NotFound', 'DatabaseError')")
    message: str = Field(..., description="Primary error message")
    details: list[ErrorDetail] | None = Field(
        default=None, description="Detailed error information (for validation errors)"
    )
    remediation: str | None = Field(default=None, description="Suggestion for fixing the error")
    request_id: str | None = Field(default=None, description="Request ID for tracing")
    timestamp: datetime = Field(default_factory=datetime.utcnow, description="Error timestamp")
    documentation_url: str | None = Field(default=None, description="Link to relevant documentation")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "error": "ValidationError",
                "message": "Request validation failed",
                "details": [
                    {
                        "code": "value_too_large",
                        "message": "Input should be less than or equal to 500",
                        "field": "query.limit",
                        "value": "1000",
                    }
                ],
                "remediation": "Check the API documentation for correct request format at /docs",
                "request_id": "1b4e28ba-2fa1-11d2-883f-0016d3cca427",
                "timestamp": "2024-01-15T10:30:00Z",
            }
        }
    )


class ErrorCode:
    """Standard error codes used across the API."""

    # Validation errors (400, 422)
    VALIDATION_ERROR = "validation_error"
    INVALID_EMAIL = "invalid_email"
    INVALID_ENUM_VALUE = "invalid_enum_value"
    MISSING_REQUIRED_FIELD = "missing_required_field"
    VALUE_TOO_SMALL = "value_too_small"
    VALUE_TOO_LARGE = "value_too_large"
    UNKNOWN_ENTITY_TYPE = "unknown_entity_type"

    # Not found errors (404)
    ENTITY_NOT_FOUND = "entity_not_found"
    CLIENT_NOT_FOUND = "client_not_found"

    # Authentication errors (401)
    AUTHENTICATION_REQUIRED = "authentication_required"

    # External service errors (503)
    DATABASE_ERROR = "database_error"

    # Internal errors (500)
    INTERNAL_ERROR = "internal_error"


# Pydantic v2 error types mapped to our error codes
PYDANTIC_ERROR_CODES = {
    "missing": ErrorCode.MISSING_REQUIRED_FIELD,
    "enum": ErrorCode.INVALID_ENUM_VALUE,
    "value_error": ErrorCode.INVALID_EMAIL,
    "greater_than_equal": ErrorCode.VALUE_TOO_SMALL,
    "less_than_equal": ErrorCode.VALUE_TOO_LARGE,
}


REMEDIATION_HINTS = {
    ErrorCode.UNKNOWN_ENTITY_TYPE: "Use one of the entity types listed by GET /v1/entities/types",
    ErrorCode.ENTITY_NOT_FOUND: "Verify the entity type and ID are correct and the record exists",
    ErrorCode.CLIENT_NOT_FOUND: "Verify the client ID is correct and the client has not been archived",
    ErrorCode.AUTHENTICATION_REQUIRED: "Send a valid bearer token in the Authorization header",
    ErrorCode.DATABASE_ERROR: "Database temporarily unavailable. Please try again in a few moments.",
}
