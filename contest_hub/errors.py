# errors.py
from http import HTTPStatus
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

# Opaque persistence failure; use cases let it through untouched.
StorageError = SQLAlchemyError


class ApiError(Exception):
    """
    Base class for failures a use case reports on purpose.

    Each subclass carries the transport status a controller should answer with,
    so callers can map any ``ApiError`` without knowing the concrete kind.
    """

    name: str = "ApiError"
    status: int = HTTPStatus.INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.name, "message": self.message}

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r})"


class BadRequestError(ApiError):
    name = "BadRequestError"
    status = HTTPStatus.BAD_REQUEST


class NotFoundError(ApiError):
    name = "NotFoundError"
    status = HTTPStatus.NOT_FOUND


class AlreadyExistsError(ApiError):
    name = "AlreadyExistsError"
    status = HTTPStatus.CONFLICT


__all__ = [
    "ApiError",
    "BadRequestError",
    "NotFoundError",
    "AlreadyExistsError",
    "StorageError",
]
