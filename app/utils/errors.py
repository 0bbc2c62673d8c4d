# app/utils/errors.py
"""
Error taxonomy shared by routers and services.

Every error is an HTTPException so FastAPI renders it without extra wiring;
main.py installs a handler that reshapes the body into ``{"message": ...}``.
"""

from typing import Optional
from fastapi import HTTPException, status


class AppError(HTTPException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None, headers: Optional[dict] = None):
        super().__init__(
            status_code=self.status_code,
            detail=message or self.default_message,
            headers=headers,
        )

    @property
    def message(self) -> str:
        return self.detail


class Unauthorized(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message, headers={"WWW-Authenticate": "Bearer"})


class Forbidden(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Forbidden"


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class InvalidInput(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid input"


class InvalidFilter(InvalidInput):
    default_message = "Invalid filter"


class Conflict(AppError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Conflict"


class Internal(AppError):
    """Unexpected storage or collaborator failure; ``cause`` is surfaced for operators."""

    def __init__(self, message: Optional[str] = None, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause
