from typing import Any

from pydantic import BaseModel, ConfigDict


class PaginationMeta(BaseModel):
    total: int
    limit: int
    offset: int
    count: int
    has_next: bool

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "total": 42,
                "limit": 10,
                "offset": 0,
                "count": 10,
                "has_next": True,
            }
        }
    )


class ActionOut(BaseModel):
    success: bool = True
    message: str


class ErrorDetailOut(BaseModel):
    code: str
    message: str
    request_id: str
    path: str
    details: Any = None


class ErrorOut(BaseModel):
    success: bool = False
    message: str
    errors: dict[str, list[str]] | None = None
    error: ErrorDetailOut

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "success": False,
                "message": "Invalid form data.",
                "errors": {"quantity": ["Input should be greater than or equal to 1"]},
                "error": {
                    "code": "validation_error",
                    "message": "Invalid form data.",
                    "request_id": "8d8f2b00-6c79-4a45-8ff4-b0a5f2bc4bc2",
                    "path": "/inventory/adjust",
                    "details": None,
                },
            }
        }
    )
