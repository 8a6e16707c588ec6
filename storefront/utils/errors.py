"""
Standardized error response utilities for the storefront API.

Provides consistent error response format across all endpoints:
{
    "error": {
        "message": "User-friendly error message",
        "code": "ERROR_CODE"
    }
}

Usage:
    from storefront.utils.errors import error_response, ErrorCode

    return error_response("Cart not found", ErrorCode.NOT_FOUND, 404)
"""
import logging
from enum import Enum
from flask import jsonify
from typing import Optional

from .exceptions import (
    StorefrontError,
    NotFoundError,
    ValidationError,
    AuthorizationError,
    CommerceBackendError,
    RedemptionRejectedError,
    RevertRejectedError,
    RedemptionInProgressError,
)

logger = logging.getLogger(__name__)


class ErrorCode(str, Enum):
    """Standardized error codes for API responses."""

    # Authentication (401)
    AUTH_REQUIRED = "AUTH_REQUIRED"

    # Validation Errors (400)
    INVALID_REQUEST = "INVALID_REQUEST"
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Not Found (404)
    NOT_FOUND = "NOT_FOUND"

    # Conflict (409)
    STATE_CONFLICT = "STATE_CONFLICT"
    REDEMPTION_IN_PROGRESS = "REDEMPTION_IN_PROGRESS"

    # Business Logic Errors (422)
    REDEMPTION_REJECTED = "REDEMPTION_REJECTED"
    REVERT_REJECTED = "REVERT_REJECTED"

    # External Service Errors (502)
    COMMERCE_BACKEND_ERROR = "COMMERCE_BACKEND_ERROR"

    # Server Errors (500)
    INTERNAL_ERROR = "INTERNAL_ERROR"


def error_response(
    message: str,
    code: ErrorCode = ErrorCode.INTERNAL_ERROR,
    status_code: int = 500,
    log_error: bool = True,
    details: Optional[dict] = None
) -> tuple:
    """
    Create a standardized error response.

    Args:
        message: User-friendly error message
        code: Error code from ErrorCode enum
        status_code: HTTP status code
        log_error: Whether to log the error (default True for 500s)
        details: Optional additional details (only logged, not returned to user)

    Returns:
        Tuple of (response, status_code) for Flask
    """
    if log_error and status_code >= 500:
        logger.error(f"API Error [{code}]: {message}", extra={"details": details})
    elif log_error and status_code >= 400:
        logger.warning(f"API Error [{code}]: {message}", extra={"details": details})

    response = {
        "error": {
            "message": message,
            "code": code.value if isinstance(code, ErrorCode) else code
        }
    }

    return jsonify(response), status_code


# Convenience functions for common error types
def bad_request(message: str, code: ErrorCode = ErrorCode.INVALID_REQUEST) -> tuple:
    """400 Bad Request error."""
    return error_response(message, code, 400, log_error=False)


def unauthorized(message: str = "Authentication required", code: ErrorCode = ErrorCode.AUTH_REQUIRED) -> tuple:
    """401 Unauthorized error."""
    return error_response(message, code, 401, log_error=False)


def not_found(message: str, code: ErrorCode = ErrorCode.NOT_FOUND) -> tuple:
    """404 Not Found error."""
    return error_response(message, code, 404, log_error=False)


def conflict(message: str, code: ErrorCode = ErrorCode.STATE_CONFLICT) -> tuple:
    """409 Conflict error."""
    return error_response(message, code, 409, log_error=False)


def internal_error(message: str = "An unexpected error occurred", details: Optional[dict] = None) -> tuple:
    """500 Internal Server Error."""
    return error_response(message, ErrorCode.INTERNAL_ERROR, 500, log_error=True, details=details)


def exception_response(error: StorefrontError) -> tuple:
    """Map a StorefrontError onto the standard error envelope."""
    if isinstance(error, AuthorizationError):
        return unauthorized(error.message)
    if isinstance(error, ValidationError):
        return bad_request(error.message, ErrorCode.VALIDATION_ERROR)
    if isinstance(error, NotFoundError):
        return not_found(error.message)
    if isinstance(error, RedemptionInProgressError):
        return conflict(error.message, ErrorCode.REDEMPTION_IN_PROGRESS)
    if isinstance(error, RedemptionRejectedError):
        return error_response(error.message, ErrorCode.REDEMPTION_REJECTED, 422)
    if isinstance(error, RevertRejectedError):
        return error_response(error.message, ErrorCode.REVERT_REJECTED, 422)
    if isinstance(error, CommerceBackendError):
        return error_response(
            error.message,
            ErrorCode.COMMERCE_BACKEND_ERROR,
            502,
            details={'status_code': error.status_code}
        )
    return internal_error(error.message)
