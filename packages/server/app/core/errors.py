"""
Error taxonomy for access decisions and approval transitions.

The approval workflow and route guard return :class:`Failure` values instead
of raising; the HTTP layer converts them to :class:`AppError` and the
handler registered in ``app.main`` renders the JSON error envelope.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from fastapi import Request
from fastapi.responses import JSONResponse


class ErrorKind(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    VALIDATION_ERROR = "validation_error"
    CONFLICT_OR_PARTIAL_WRITE = "conflict_or_partial_write"
    STORE_UNAVAILABLE = "store_unavailable"


HTTP_STATUS: dict[ErrorKind, int] = {
    ErrorKind.UNAUTHENTICATED: 401,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.VALIDATION_ERROR: 422,
    ErrorKind.CONFLICT_OR_PARTIAL_WRITE: 409,
    ErrorKind.STORE_UNAVAILABLE: 503,
}


@dataclass(frozen=True)
class Failure:
    kind: ErrorKind
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def retryable(self) -> bool:
        """Whether the caller may simply retry ("approval failed, please retry")."""
        return self.kind == ErrorKind.STORE_UNAVAILABLE

    @property
    def manual_followup(self) -> bool:
        return self.kind == ErrorKind.CONFLICT_OR_PARTIAL_WRITE


class AppError(Exception):
    """Raised by the HTTP layer; rendered by :func:`app_error_handler`."""

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        *,
        redirect_to: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        self.kind = kind
        self.message = message
        self.redirect_to = redirect_to
        self.details = details or {}
        super().__init__(message)

    @property
    def status_code(self) -> int:
        return HTTP_STATUS[self.kind]

    @classmethod
    def from_failure(cls, failure: Failure) -> "AppError":
        return cls(failure.kind, failure.message, details=failure.details)


class AccessDenied(AppError):
    """Unauthenticated or forbidden; always carries a redirect target."""


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    body: dict[str, Any] = {
        "code": exc.kind.value.upper(),
        "message": exc.message,
        "status": exc.status_code,
    }
    if exc.redirect_to:
        body["redirect_to"] = exc.redirect_to
    if exc.kind == ErrorKind.CONFLICT_OR_PARTIAL_WRITE:
        body["manual_followup"] = True
    elif exc.kind == ErrorKind.STORE_UNAVAILABLE:
        body["retryable"] = True
    if exc.details:
        body["details"] = exc.details
    return JSONResponse(status_code=exc.status_code, content={"error": body})
