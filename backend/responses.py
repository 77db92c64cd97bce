"""Standardized response infrastructure for API endpoints.

Provides consistent response format with structured codes and messages.
"""

from datetime import UTC, datetime
from enum import Enum
from typing import Any

from fastapi.responses import JSONResponse


class ResponseCode(str, Enum):
    """Response codes for API responses.

    Ranges: 0xxx=Success, 1xxx=Client Error, 2xxx=Server Error, 3xxx=External Service
    """

    # Success codes
    SUCCESS = "0000"
    CHAT_RENAMED = "0001"
    CHAT_DELETED = "0002"

    # Client errors
    VALIDATION_ERROR = "1000"
    INVALID_PAYLOAD = "1001"
    CHAT_NOT_FOUND = "1002"
    SEND_IN_PROGRESS = "1003"

    # Server errors
    INTERNAL_ERROR = "2000"
    STORE_ERROR = "2001"

    # External service errors
    MODEL_INVOCATION_FAILED = "3001"


# Response messages mapped to codes
RESPONSE_MESSAGES: dict[ResponseCode, str] = {
    ResponseCode.SUCCESS: "Operation completed successfully",
    ResponseCode.CHAT_RENAMED: "Chat renamed successfully",
    ResponseCode.CHAT_DELETED: "Chat deleted successfully",
    ResponseCode.VALIDATION_ERROR: "Request validation failed",
    ResponseCode.INVALID_PAYLOAD: "Invalid payload",
    ResponseCode.CHAT_NOT_FOUND: "Chat not found",
    ResponseCode.SEND_IN_PROGRESS: "A message is already being sent in this chat",
    ResponseCode.INTERNAL_ERROR: "An internal error occurred",
    ResponseCode.STORE_ERROR: "Chat store operation failed",
    ResponseCode.MODEL_INVOCATION_FAILED: "The model could not answer the question",
}

# HTTP status codes for each response code
HTTP_STATUS_MAP: dict[ResponseCode, int] = {
    ResponseCode.SUCCESS: 200,
    ResponseCode.CHAT_RENAMED: 200,
    ResponseCode.CHAT_DELETED: 200,
    ResponseCode.VALIDATION_ERROR: 422,
    ResponseCode.INVALID_PAYLOAD: 400,
    ResponseCode.CHAT_NOT_FOUND: 404,
    ResponseCode.SEND_IN_PROGRESS: 409,
    ResponseCode.INTERNAL_ERROR: 500,
    ResponseCode.STORE_ERROR: 500,
    ResponseCode.MODEL_INVOCATION_FAILED: 502,
}


def get_message(code: ResponseCode) -> str:
    """Get the message for a response code."""
    return RESPONSE_MESSAGES.get(code, "Unknown error")


def get_http_status(code: ResponseCode) -> int:
    """Get HTTP status code for a response code."""
    return HTTP_STATUS_MAP.get(code, 500)


def success_dict(
    code: ResponseCode,
    data: Any = None,
    custom_message: str | None = None,
    request_id: str | None = None,
) -> dict[str, Any]:
    """Build a standardized success response dictionary."""
    return {
        "code": code.value,
        "success": True,
        "message": custom_message or get_message(code),
        "timestamp": datetime.now(UTC).isoformat(),
        "request_id": request_id,
        "data": data,
    }


def error_dict(
    code: ResponseCode,
    custom_message: str | None = None,
    error_details: dict[str, Any] | None = None,
    request_id: str | None = None,
) -> dict[str, Any]:
    """Build a standardized error response dictionary."""
    return {
        "code": code.value,
        "success": False,
        "message": custom_message or get_message(code),
        "timestamp": datetime.now(UTC).isoformat(),
        "request_id": request_id,
        "error_details": error_details,
    }


# --- JSONResponse helpers ---


def success_response(
    code: ResponseCode,
    data: Any = None,
    request_id: str | None = None,
) -> JSONResponse:
    """Create a JSONResponse with success format."""
    return JSONResponse(
        content=success_dict(code, data, request_id=request_id),
        status_code=get_http_status(code),
    )


def error_response(
    code: ResponseCode,
    custom_message: str | None = None,
    request_id: str | None = None,
    error_details: dict[str, Any] | None = None,
) -> JSONResponse:
    """Create a JSONResponse with error format."""
    return JSONResponse(
        content=error_dict(code, custom_message, error_details, request_id=request_id),
        status_code=get_http_status(code),
    )
