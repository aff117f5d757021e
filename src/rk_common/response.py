"""Rosetta error payload.

Successful calls return the Rosetta response object itself. Every error is
rendered in this format:
{
    "code": 12,                  // stable error code, see errors.py
    "message": "Invalid transaction",
    "retriable": false,
    "details": { ... }           // omitted when empty
}
"""

from typing import Any

from pydantic import BaseModel

from src.rk_common.errors import AppError


class ErrorPayload(BaseModel):
    code: int
    message: str
    retriable: bool = False
    details: dict[str, Any] | None = None

    @classmethod
    def from_error(cls, err: AppError) -> "ErrorPayload":
        return cls(
            code=err.code,
            message=err.message,
            retriable=err.retriable,
            details=err.details,
        )


def error_response(err: AppError) -> dict[str, Any]:
    return ErrorPayload.from_error(err).model_dump(exclude_none=True)
