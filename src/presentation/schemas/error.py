"""Pydantic schema for API error responses."""

from pydantic import BaseModel, Field


class ErrorResponseSchema(BaseModel):
    """Standard error response format for all API errors."""
    error: str = Field(
        ...,
        description="Error code",
        examples=["SETTLEMENT_ENUMERATION_FAILED"],
    )
    message: str = Field(
        ...,
        description="Human-readable error message",
        examples=["Failed to list eligible loans: connection refused"],
    )
    request_id: str | None = Field(
        None,
        description="Request ID for tracing",
    )

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "error": "SETTLEMENT_ENUMERATION_FAILED",
                    "message": "Failed to list eligible loans: connection refused",
                    "request_id": "abc123",
                }
            ]
        }
    }
