"""
Error taxonomy for the REST API.

Handlers raise these; the exception handlers registered in main.py turn
them into the error envelope.
"""
from typing import Any, Dict, Optional


class ApiError(Exception):
    status_code = 400
    error_code = "GENERAL_ERROR"
    message = "Request could not be processed"

    def __init__(
        self,
        message: Optional[str] = None,
        error_code: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message or self.message
        self.error_code = error_code or self.error_code
        self.status_code = status_code or self.status_code
        self.details = details or {}
        super().__init__(self.message)


class RequestValidationFailed(ApiError):
    status_code = 400
    error_code = "VALIDATION_ERROR"
    message = "Invalid request data"


class AuthenticationError(ApiError):
    status_code = 401
    error_code = "UNAUTHORIZED"
    message = "Admin authentication required"


class StoreError(Exception):
    """A datastore query failed or the datastore is unavailable.

    The message is for the server log only; clients receive a generic
    ``DATABASE_ERROR`` envelope.
    """

    def __init__(self, operation: str, cause: Optional[BaseException] = None):
        self.operation = operation
        self.cause = cause
        detail = f"{operation} failed"
        if cause is not None:
            detail = f"{detail}: {cause}"
        super().__init__(detail)
