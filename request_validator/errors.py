"""
Error types and error response utilities for request validation.

This module defines the three kinds of failure the validator can produce
and the standardized response payloads used to relay them to clients.
"""

import logging
from typing import Any, Dict, Optional, Tuple


# Configure logging for error tracking
logger = logging.getLogger(__name__)


class ErrorType:
    """Standard error type constants."""
    VALIDATION = "validation_error"
    CONTENT_TYPE = "content_type_error"
    PAYLOAD_TOO_LARGE = "payload_too_large"
    PARSE = "parse_error"
    UNEXPECTED = "unexpected_error"


class ConfigurationError(TypeError):
    """Raised for schema or constructor misuse. Never a client error."""


class BadRequestError(Exception):
    """
    Client-facing rejection.

    Carries a human readable message and the HTTP status code that should
    be returned to the caller (400 unless stated otherwise).
    """

    def __init__(
        self,
        message: str,
        status_code: int = 400,
        error_type: str = ErrorType.VALIDATION
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error_type = error_type

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, status_code={self.status_code})"


class PayloadTooLargeError(BadRequestError):
    """Raised when a request body exceeds the configured byte ceiling."""

    def __init__(self, max_body_size: int):
        super().__init__(
            f"POST content can't exceed {max_body_size} bytes",
            status_code=413,
            error_type=ErrorType.PAYLOAD_TOO_LARGE
        )
        self.max_body_size = max_body_size


class RequestParseError(Exception):
    """Raised when the body stream fails or the payload cannot be decoded."""

    error_type = ErrorType.PARSE


def create_error_response(
    error_message: str,
    error_type: str = ErrorType.UNEXPECTED,
    data: Optional[Dict[str, Any]] = None,
    success: bool = False
) -> Dict[str, Any]:
    """
    Create a standardized error response.

    Args:
        error_message: Human-readable error description
        error_type: Type of error (see ErrorType constants)
        data: Extra data to include in response
        success: Whether the operation was successful

    Returns:
        Standardized error response dictionary
    """
    response = {
        "success": success,
        "error": error_message,
        "error_type": error_type
    }

    if data:
        response.update(data)

    if not success:
        logger.debug(f"Error ({error_type}): {error_message}")

    return response


def create_success_response(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Create a standardized success response.

    Args:
        data: Data to include in response

    Returns:
        Standardized success response dictionary
    """
    response = {
        "success": True,
        "error": None,
        "error_type": None
    }
    response.update(data)
    return response


def error_response_for(exc: Exception) -> Tuple[Dict[str, Any], int]:
    """
    Map a validation failure to a response payload and HTTP status.

    Parse failures have no status of their own; they are reported as 400.
    Anything else is an unexpected error and maps to 500.
    """
    if isinstance(exc, BadRequestError):
        return create_error_response(exc.message, exc.error_type), exc.status_code
    if isinstance(exc, RequestParseError):
        return create_error_response(str(exc), ErrorType.PARSE), 400
    return create_error_response(f"Unexpected error: {exc}", ErrorType.UNEXPECTED), 500
