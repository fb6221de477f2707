"""
Error schemas - Pydantic models for error responses

NOTE: Pydantic is a data validation library that converts raw JSON/dict data
into strongly-typed Python objects. It also auto-generates OpenAPI docs.
"""

from pydantic import BaseModel, Field
from typing import Optional, Dict, Any
from datetime import datetime, timezone


class ErrorDetail(BaseModel):
    """Detailed error information"""
    code: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error message")
    details: Optional[Dict[str, Any]] = Field(
        None,
        description="Additional context (field names, valid values, etc.)"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the error occurred"
    )


class ErrorResponse(BaseModel):
    """API error response - standardized format

    All API errors use this structure for consistency.
    """
    error: ErrorDetail = Field(description="Error information")
    request_id: Optional[str] = Field(None, description="Request ID for logging/debugging")

    class Config:
        json_schema_extra = {
            "example": {
                "error": {
                    "code": "PART_NOT_FOUND",
                    "message": "Part 'PAGE_9' not found",
                    "details": {
                        "part": "PAGE_9",
                        "valid_parts": ["LATCH", "FRONT_COVER", "PAGE_0", "PAGE_1", "PAGE_2"]
                    },
                    "timestamp": "2026-10-17T10:30:00Z"
                },
                "request_id": "req-12345"
            }
        }


class ValidationErrorResponse(BaseModel):
    """Validation error - when request body is invalid"""
    error: ErrorDetail = Field(description="Error information")
    validation_errors: list[Dict[str, Any]] = Field(
        description="Per-field validation errors"
    )
    request_id: Optional[str] = Field(None, description="Request ID for logging/debugging")

    class Config:
        json_schema_extra = {
            "example": {
                "error": {
                    "code": "VALIDATION_ERROR",
                    "message": "Request validation failed",
                    "details": None,
                    "timestamp": "2026-10-17T10:30:00Z"
                },
                "validation_errors": [
                    {
                        "field": "state",
                        "message": "Field required"
                    }
                ],
                "request_id": "req-12345"
            }
        }
