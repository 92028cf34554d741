"""
Error response schemas for API documentation and consistent error formatting.
"""

from pydantic import BaseModel, Field
from typing import List, Optional, Any, Dict


class ErrorDetail(BaseModel):
    """Schema for individual error detail."""

    field: Optional[str] = Field(None, description="Field name that caused the error", examples=["email"])
    message: str = Field(..., description="Human-readable error message", examples=["Invalid email format"])
    type: Optional[str] = Field(None, description="Error type identifier", examples=["value_error"])
    input: Optional[Any] = Field(None, description="Input value that caused the error")


class ErrorResponse(BaseModel):
    """Schema for standardized error responses."""

    code: str = Field(..., description="Error code identifier", examples=["VALIDATION_ERROR"])
    message: str = Field(..., description="Human-readable error message", examples=["Request validation failed"])
    timestamp: str = Field(..., description="Error timestamp in ISO format", examples=["2024-01-01T00:00:00Z"])
    request_id: Optional[str] = Field(None, description="Unique request identifier for tracking", examples=["abc12345"])
    details: Optional[List[ErrorDetail]] = Field(None, description="Detailed error information for validation errors")


class APIErrorResponse(BaseModel):
    """Schema for API error response wrapper."""

    error: ErrorResponse = Field(..., description="Error information")


def _example(code: str, message: str) -> Dict[str, Any]:
    return {
        "error": {
            "code": code,
            "message": message,
            "timestamp": "2024-01-01T00:00:00Z",
            "request_id": "abc12345",
        }
    }


_ERROR_EXAMPLES = {
    400: ("Bad Request - Invalid request parameters", "BAD_REQUEST", "Cannot change property status from 'sold' to 'active'"),
    401: ("Unauthorized - Authentication required", "UNAUTHORIZED", "Authentication required"),
    402: ("Payment Required - Not enough credits", "INSUFFICIENT_CREDITS", "Insufficient featured credits. Available: 0, Required: 1"),
    403: ("Forbidden - Access denied", "FORBIDDEN", "You can only manage data for your assigned country"),
    404: ("Not Found - Resource not found", "NOT_FOUND", "Property not found with ID: 123e4567-e89b-12d3-a456-426614174000"),
    409: ("Conflict - Resource conflict", "CONFLICT", "User with identifier 'agent@example.com' already exists"),
    410: ("Gone - Resource expired", "GONE", "Draft has expired"),
    422: ("Unprocessable Entity - Validation error", "VALIDATION_ERROR", "Request validation failed"),
    500: ("Internal Server Error - Unexpected error", "INTERNAL_SERVER_ERROR", "An unexpected error occurred. Please try again later."),
    502: ("Bad Gateway - Upstream provider failed", "EXTERNAL_SERVICE_ERROR", "Payment gateway request failed"),
}

COMMON_ERROR_RESPONSES: Dict[int, Dict[str, Any]] = {
    status_code: {
        "description": description,
        "model": APIErrorResponse,
        "content": {"application/json": {"example": _example(code, message)}},
    }
    for status_code, (description, code, message) in _ERROR_EXAMPLES.items()
}


def get_error_responses(*status_codes: int) -> Dict[int, Dict[str, Any]]:
    """
    Get error response schemas for specific status codes.

    Args:
        status_codes: HTTP status codes to include

    Returns:
        Dictionary of error response schemas
    """
    return {
        code: COMMON_ERROR_RESPONSES[code]
        for code in status_codes
        if code in COMMON_ERROR_RESPONSES
    }


def get_common_error_responses() -> Dict[int, Dict[str, Any]]:
    """Get common error response schemas for most endpoints."""
    return get_error_responses(400, 401, 403, 404, 422, 500)


def get_crud_error_responses() -> Dict[int, Dict[str, Any]]:
    """Get error response schemas for CRUD operations."""
    return get_error_responses(400, 401, 403, 404, 409, 422, 500)
