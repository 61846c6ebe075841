"""
Error taxonomy for the EcoTask core.
Every fallible operation raises one of these; the Flask layer turns them into
standardized JSON error responses (see api/error_utils.py).
"""

from typing import Any, Dict, Optional


class EcoTaskError(Exception):
    """Base class for all errors surfaced by the core."""

    error_code = "SERVER_ERROR"
    status_code = 500
    default_message = "An unexpected error occurred"

    def __init__(self, message: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class NotFoundError(EcoTaskError):
    error_code = "NOT_FOUND"
    status_code = 404
    default_message = "Resource not found"


class TaskNotFoundError(NotFoundError):
    error_code = "TASK_NOT_FOUND"
    default_message = "Task not found"


class ConflictError(EcoTaskError):
    error_code = "CONFLICT"
    status_code = 409
    default_message = "The resource was modified concurrently"


class DuplicateEmailError(ConflictError):
    error_code = "USER_EXISTS"
    default_message = "User already exists with this email"


class UnauthorizedError(EcoTaskError):
    error_code = "UNAUTHORIZED"
    status_code = 401
    default_message = "Invalid credentials or unauthorized access"


class ForbiddenError(EcoTaskError):
    error_code = "FORBIDDEN"
    status_code = 403
    default_message = "You do not have permission to perform this action"


class InvalidInputError(EcoTaskError):
    error_code = "VALIDATION_ERROR"
    status_code = 400
    default_message = "Request validation failed"


class InvalidStatusError(InvalidInputError):
    error_code = "INVALID_STATUS"
    default_message = "Status must be 'approved' or 'rejected'"


class StorageError(EcoTaskError):
    error_code = "STORAGE_ERROR"
    status_code = 500
    default_message = "Error accessing storage service"
