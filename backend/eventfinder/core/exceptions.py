"""
Domain error hierarchy.

Services raise these instead of HTTPException so the same rules can be
exercised without an HTTP request. The API layer maps each class to the
response envelope via its status code.
"""

from typing import Optional


class AppError(Exception):
    status_code: int = 500

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)


class ValidationError(AppError):
    status_code = 400


class UnauthenticatedError(AppError):
    status_code = 401


class ForbiddenError(AppError):
    status_code = 403


class NotFoundError(AppError):
    status_code = 404


class ConflictError(AppError):
    status_code = 409


class InternalError(AppError):
    status_code = 500
