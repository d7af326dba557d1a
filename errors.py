"""Domain errors raised by services and rendered as JSON by the core blueprint."""
from __future__ import annotations
from typing import Any


class ServiceError(Exception):
    code = "error"
    status = 400

    def __init__(self, message: str, *, code: str | None = None, detail: Any = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        self.detail = detail

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"error": self.code, "message": self.message}
        if self.detail is not None:
            body["detail"] = self.detail
        return body


class NotFoundError(ServiceError):
    code = "not_found"
    status = 404


class InvalidInputError(ServiceError):
    code = "invalid_input"
    status = 400


class RequestValidationError(ServiceError):
    code = "validation_error"
    status = 422

    def __init__(self, errors: list[dict[str, Any]]):
        super().__init__("Request validation failed", detail=errors)
        self.errors = errors


class ConflictError(ServiceError):
    code = "unique_constraint"
    status = 409
