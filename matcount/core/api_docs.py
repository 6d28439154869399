from matcount.schemas.common import ErrorOut


_ERROR_EXAMPLES: dict[int, tuple[str, str]] = {
    400: ("bad_request", "Bad request"),
    404: ("not_found", "Resource not found"),
    409: ("conflict", "Conflict"),
    422: ("validation_error", "Invalid form data."),
    500: ("internal_error", "Internal server error"),
}

# Conflict codes raised by the stock and client services.
_CONFLICT_CODES = {
    "insufficient_stock": "Insufficient stock. Available: 30, Requested: 50",
    "over_return": "Cannot return 20. Maximum returnable: 15",
    "duplicate_key": "A client with this consumer number already exists.",
}


def error_responses(*status_codes: int, conflict: str | None = None) -> dict[int, dict]:
    responses: dict[int, dict] = {}
    for status_code in status_codes:
        code, message = _ERROR_EXAMPLES.get(status_code, ("http_error", "HTTP error"))
        if status_code == 409 and conflict in _CONFLICT_CODES:
            code, message = conflict, _CONFLICT_CODES[conflict]
        responses[status_code] = {
            "model": ErrorOut,
            "description": message,
            "content": {
                "application/json": {
                    "example": {
                        "success": False,
                        "message": message,
                        "errors": None,
                        "error": {
                            "code": code,
                            "message": message,
                            "request_id": "request-id",
                            "path": "/example",
                            "details": None,
                        },
                    }
                }
            },
        }
    return responses
