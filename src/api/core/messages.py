"""Centralized message codes and default messages for API responses."""

from enum import Enum
from typing import Generic, TypeVar

from pydantic import BaseModel


class MessageCode(str, Enum):
    """Centralized message codes for API responses."""

    # Success codes
    SUCCESS = "SUCCESS"

    # Analysis
    ANALYSIS_COMPLETED = "ANALYSIS_COMPLETED"
    ANALYSIS_FROM_CACHE = "ANALYSIS_FROM_CACHE"
    TREE_NOT_DETECTED = "TREE_NOT_DETECTED"
    CACHE_PURGED = "CACHE_PURGED"

    # Carbon calculation
    CARBON_CALCULATED = "CARBON_CALCULATED"
    UPLOAD_PROCESSED = "UPLOAD_PROCESSED"
    UPLOAD_NOT_FOUND = "UPLOAD_NOT_FOUND"

    # Validation harness
    VALIDATION_PASSED = "VALIDATION_PASSED"
    VALIDATION_VARIANCE_EXCEEDED = "VALIDATION_VARIANCE_EXCEEDED"
    VALIDATION_DEGENERATE = "VALIDATION_DEGENERATE"

    # Vision model errors
    MODEL_RATE_LIMITED = "MODEL_RATE_LIMITED"
    MODEL_CREDITS_EXHAUSTED = "MODEL_CREDITS_EXHAUSTED"
    MODEL_INVALID_RESPONSE = "MODEL_INVALID_RESPONSE"
    EXTERNAL_SERVICE_ERROR = "EXTERNAL_SERVICE_ERROR"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_INPUT = "INVALID_INPUT"

    # Generic errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"
    BAD_REQUEST = "BAD_REQUEST"
    NOT_FOUND = "NOT_FOUND"


# Default messages for each message code
DEFAULT_MESSAGES = {
    # Success messages
    MessageCode.SUCCESS: "Operation completed successfully",
    # Analysis
    MessageCode.ANALYSIS_COMPLETED: "Image analysis completed",
    MessageCode.ANALYSIS_FROM_CACHE: "Image analysis returned from cache",
    MessageCode.TREE_NOT_DETECTED: "The uploaded image does not contain any trees. Please upload an image with visible trees for carbon credit verification.",
    MessageCode.CACHE_PURGED: "Expired cache entries removed",
    # Carbon calculation
    MessageCode.CARBON_CALCULATED: "Carbon offset calculated",
    MessageCode.UPLOAD_PROCESSED: "Tree upload analyzed and carbon offset recorded",
    MessageCode.UPLOAD_NOT_FOUND: "Tree upload not found",
    # Validation harness
    MessageCode.VALIDATION_PASSED: "Calculation variance is within the threshold",
    MessageCode.VALIDATION_VARIANCE_EXCEEDED: "Calculation variance exceeds the threshold",
    MessageCode.VALIDATION_DEGENERATE: "Every trial produced zero CO2; variance is undefined",
    # Vision model errors
    MessageCode.MODEL_RATE_LIMITED: "Rate limit exceeded. Please try again later.",
    MessageCode.MODEL_CREDITS_EXHAUSTED: "AI credits exhausted. Please add credits to continue.",
    MessageCode.MODEL_INVALID_RESPONSE: "The image analysis service returned an invalid response",
    MessageCode.EXTERNAL_SERVICE_ERROR: "Image analysis service temporarily unavailable",
    MessageCode.CONFIGURATION_ERROR: "Image analysis is not configured",
    # Validation errors
    MessageCode.VALIDATION_ERROR: "Validation failed",
    MessageCode.INVALID_INPUT: "Invalid input provided",
    # Generic errors
    MessageCode.INTERNAL_ERROR: "Internal server error",
    MessageCode.INTERNAL_SERVER_ERROR: "Internal server error",
    MessageCode.BAD_REQUEST: "Bad request",
    MessageCode.NOT_FOUND: "Resource not found",
}

T = TypeVar("T")


class APIResponse(BaseModel, Generic[T]):
    """Base API response model with consistent structure and proper typing."""

    message_code: MessageCode
    message: str
    data: T | None = None

    @classmethod
    def success(
        cls,
        message_code: MessageCode = MessageCode.SUCCESS,
        message: str | None = None,
        data: T | None = None,
    ) -> "APIResponse[T]":
        """Create a success response."""
        return cls(
            message_code=message_code,
            message=message or DEFAULT_MESSAGES.get(message_code, "Success"),
            data=data,
        )

    @classmethod
    def error(
        cls,
        message_code: MessageCode,
        message: str | None = None,
        data: T | None = None,
    ) -> "APIResponse[T]":
        """Create an error response."""
        return cls(
            message_code=message_code,
            message=message or DEFAULT_MESSAGES.get(message_code, "Error occurred"),
            data=data,
        )


def get_default_message(message_code: MessageCode) -> str:
    """Get default message for a message code."""
    return DEFAULT_MESSAGES.get(message_code, "Operation completed")
