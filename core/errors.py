"""
core/errors.py -- Error taxonomy shared by the auth layer and the API layer.

Hierarchy:
    ApiError (base: status_code, message, cause)
    ├── ValidationError    400  missing or invalid input fields
    ├── ConflictError      400  duplicate username / email
    ├── UnauthorizedError  401  missing or invalid token, bad password
    ├── NotFoundError      404  user or session subject does not exist
    └── InternalError      500  database connectivity or unexpected failures

Services raise these; api/main.py maps every ApiError to the response
envelope in one exception handler. `cause` is kept for logging only and is
never serialised into a response.
"""

from __future__ import annotations


class ApiError(Exception):
    """Base class for every error that maps onto an HTTP response."""

    status_code: int = 500

    def __init__(self, message: str, cause: BaseException | None = None, status_code: int | None = None) -> None:
        if status_code is not None:
            self.status_code = status_code
        self.message = message
        self.cause = cause
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(status_code={self.status_code}, message={self.message!r})"


class ValidationError(ApiError):
    status_code = 400


class ConflictError(ApiError):
    # The service reports duplicates as a plain 400, not 409.
    status_code = 400


class UnauthorizedError(ApiError):
    status_code = 401


class NotFoundError(ApiError):
    status_code = 404


class InternalError(ApiError):
    status_code = 500
