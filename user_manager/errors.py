"""Error taxonomy and its mapping onto HTTP responses."""
from __future__ import annotations

from enum import Enum
from typing import Dict, Tuple

from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException


class ErrorKind(str, Enum):
    AUTH_MISSING = "auth_missing"
    AUTH_INVALID = "auth_invalid"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    DATABASE = "database"
    SERVER = "server"


_ERROR_TABLE: Dict[ErrorKind, Tuple[int, str]] = {
    ErrorKind.AUTH_MISSING: (status.HTTP_401_UNAUTHORIZED, "Unauthorized"),
    ErrorKind.AUTH_INVALID: (status.HTTP_403_FORBIDDEN, "Forbidden"),
    ErrorKind.VALIDATION: (status.HTTP_400_BAD_REQUEST, "Bad request"),
    ErrorKind.NOT_FOUND: (status.HTTP_404_NOT_FOUND, "Not found"),
    ErrorKind.DATABASE: (status.HTTP_500_INTERNAL_SERVER_ERROR, "Database error"),
    ErrorKind.SERVER: (status.HTTP_500_INTERNAL_SERVER_ERROR, "Server error"),
}

# The auth gate answers before any handler runs and carries no ``success`` flag.
_BARE_KINDS = {ErrorKind.AUTH_MISSING, ErrorKind.AUTH_INVALID}


class ServiceError(Exception):
    """A failure that should be reported to the caller as structured JSON."""

    def __init__(self, kind: ErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message

    @property
    def status_code(self) -> int:
        return _ERROR_TABLE[self.kind][0]

    @property
    def label(self) -> str:
        return _ERROR_TABLE[self.kind][1]

    def to_content(self) -> Dict[str, object]:
        content: Dict[str, object] = {"error": self.label, "message": self.message}
        if self.kind not in _BARE_KINDS:
            content = {"success": False, **content}
        return content

    def to_response(self) -> JSONResponse:
        return JSONResponse(status_code=self.status_code, content=self.to_content())


def endpoint_not_found() -> JSONResponse:
    return ServiceError(ErrorKind.NOT_FOUND, "Endpoint not found").to_response()


async def service_error_handler(_request: Request, exc: ServiceError) -> JSONResponse:
    return exc.to_response()


async def http_exception_handler(
    _request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    # Unknown paths and known paths with an unsupported method look the same to callers.
    if exc.status_code in (status.HTTP_404_NOT_FOUND, status.HTTP_405_METHOD_NOT_ALLOWED):
        return endpoint_not_found()
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": "Request failed", "message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(_request: Request, exc: Exception) -> JSONResponse:
    return ServiceError(ErrorKind.SERVER, str(exc) or exc.__class__.__name__).to_response()


__all__ = [
    "ErrorKind",
    "ServiceError",
    "endpoint_not_found",
    "http_exception_handler",
    "service_error_handler",
    "unhandled_exception_handler",
]
