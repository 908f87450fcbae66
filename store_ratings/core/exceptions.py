"""
Error taxonomy shared by the service layer.

Each error kind is an ``HTTPException`` subclass, so a service can raise it
directly and FastAPI renders it as ``{"detail": ...}`` with the matching
status code.
"""
from typing import Optional

from fastapi import HTTPException, status


class AppError(HTTPException):
    """Base class for every domain error raised by the services."""

    kind = "error"
    status_code_default = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, detail: str, headers: Optional[dict] = None) -> None:
        super().__init__(
            status_code=self.status_code_default,
            detail=detail,
            headers=headers,
        )


class NotFoundError(AppError):
    """A referenced entity does not exist."""

    kind = "not_found"
    status_code_default = status.HTTP_404_NOT_FOUND


class ConflictError(AppError):
    """A uniqueness constraint or lifecycle invariant would be violated."""

    kind = "conflict"
    status_code_default = status.HTTP_409_CONFLICT


class ForbiddenError(AppError):
    """The actor is authenticated but not allowed to touch the resource."""

    kind = "forbidden"
    status_code_default = status.HTTP_403_FORBIDDEN


class UnauthenticatedError(AppError):
    kind = "unauthenticated"
    status_code_default = status.HTTP_401_UNAUTHORIZED

    def __init__(self, detail: str = "Could not validate credentials") -> None:
        super().__init__(detail, headers={"WWW-Authenticate": "Bearer"})


class ValidationFailedError(AppError):
    kind = "validation_failed"
    status_code_default = 422
