"""
Standardized error handling utilities for EcoTask API endpoints.
Provides consistent error formats, HTTP status codes, and error codes across all endpoints.
"""

import logging
from flask import jsonify
from typing import Dict, Any, Optional

from errors import EcoTaskError

# Standard error codes for consistent API responses
ERROR_CODES = {
    # Authentication errors
    "TOKEN_MISSING": "Authentication token is missing",
    "TOKEN_INVALID": "Authentication token is invalid or expired",
    "UNAUTHORIZED": "Invalid credentials or unauthorized access",
    "FORBIDDEN": "You do not have permission to perform this action",
    "USER_EXISTS": "User already exists with this email",

    # Validation errors
    "BAD_REQUEST": "Request body could not be validated",
    "INVALID_REQUEST": "Invalid request body or parameters",
    "VALIDATION_ERROR": "Request validation failed",
    "INVALID_STATUS": "Status must be 'approved' or 'rejected'",

    # Resource errors
    "NOT_FOUND": "Resource not found",
    "TASK_NOT_FOUND": "Task not found",
    "CONFLICT": "The resource was modified concurrently",

    # System errors
    "SERVER_ERROR": "Internal server error",
    "STORAGE_ERROR": "Error accessing storage service",
    "INTERNAL_SERVER_ERROR": "An unexpected error occurred on the server",
}

def create_error_response(
    error_code: str,
    message: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
    status_code: int = 500
) -> tuple:
    """
    Create a standardized error response with consistent format.

    Args:
        error_code: One of the standard ERROR_CODES keys
        message: Optional custom message (defaults to standard message)
        details: Optional additional error details
        status_code: HTTP status code

    Returns:
        Tuple of (JSON response, HTTP status code)
    """
    if error_code not in ERROR_CODES:
        logging.warning(f"Unknown error code used: {error_code}")
        error_code = "SERVER_ERROR"

    error_message = message or ERROR_CODES[error_code]

    response_data = {
        "error_code": error_code,
        "message": error_message
    }

    if details:
        response_data["details"] = details

    if status_code >= 500:
        logging.error(f"API Error [{error_code}]: {error_message} - Status: {status_code}")
    else:
        logging.info(f"API Error [{error_code}]: {error_message} - Status: {status_code}")

    return jsonify(response_data), status_code

def domain_error_response(e: EcoTaskError) -> tuple:
    """Render an error raised by the core with its own code and status."""
    return create_error_response(e.error_code, e.message, e.details, status_code=e.status_code)

# Common error response shortcuts
def unauthorized_error(message: Optional[str] = None, error_code: str = "UNAUTHORIZED") -> tuple:
    return create_error_response(error_code, message, status_code=401)

def forbidden_error(message: Optional[str] = None) -> tuple:
    return create_error_response("FORBIDDEN", message, status_code=403)

def not_found_error(message: Optional[str] = None) -> tuple:
    return create_error_response("NOT_FOUND", message, status_code=404)

def bad_request_error(message: Optional[str] = None, details: Optional[Any] = None) -> tuple:
    return create_error_response("BAD_REQUEST", message, details, status_code=400)
