"""
Domain errors raised by the service layer.

Each error carries the HTTP status and error code it maps to; the handlers in
``matcount.core.observability`` turn them into the standard error envelope.
"""
from typing import Any


class DomainError(Exception):
    status_code = 400
    code = "bad_request"

    def __init__(
        self,
        message: str,
        *,
        errors: dict[str, list[str]] | None = None,
        details: Any = None,
    ):
        super().__init__(message)
        self.message = message
        self.errors = errors
        self.details = details


class ValidationError(DomainError):
    status_code = 422
    code = "validation_error"

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        return cls(message, errors={field: [message]})


class NotFound(DomainError):
    status_code = 404
    code = "not_found"


class InsufficientStock(DomainError):
    status_code = 409
    code = "insufficient_stock"

    def __init__(self, *, available: int, requested: int, material_id: str | None = None):
        super().__init__(
            f"Insufficient stock. Available: {available}, Requested: {requested}",
            details={"material_id": material_id, "available": available, "requested": requested},
        )
        self.available = available
        self.requested = requested


class OverReturn(DomainError):
    status_code = 409
    code = "over_return"

    def __init__(self, *, max_returnable: int, requested: int):
        super().__init__(
            f"Cannot return {requested}. Maximum returnable: {max_returnable}",
            errors={"quantity": [f"Must not exceed {max_returnable}."]},
            details={"max_returnable": max_returnable, "requested": requested},
        )
        self.max_returnable = max_returnable
        self.requested = requested


class DuplicateKey(DomainError):
    status_code = 409
    code = "duplicate_key"


class PersistenceError(DomainError):
    status_code = 500
    code = "persistence_error"
