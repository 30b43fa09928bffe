"""
===============================================================================
MODULE: Problem Details (RFC 7807) for the edge
===============================================================================

Every error the gateway returns is an application/problem+json body with:
- code: status class (UNAUTHORIZED, FORBIDDEN, ...), stable per HTTP status
- kind: the fault label that produced it (ExpiredToken, AlreadyDecided, ...)
- errors: optional details, always ending with {"request_id": ...}

Collaborators:
  - rpc/faults.py (fault -> AppHTTPException)
  - gateway/exception_handlers.py (registers the handlers)
  - crosscutting/middleware.py (request.state.request_id)
===============================================================================
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from .middleware import REQUEST_ID_HEADER


class ErrorCode(str, Enum):
    # 4xx
    BAD_REQUEST = "BAD_REQUEST"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # 5xx
    INTERNAL_ERROR = "INTERNAL_ERROR"
    BAD_GATEWAY = "BAD_GATEWAY"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"


_CODE_BY_STATUS: dict[int, ErrorCode] = {
    400: ErrorCode.BAD_REQUEST,
    401: ErrorCode.UNAUTHORIZED,
    403: ErrorCode.FORBIDDEN,
    404: ErrorCode.NOT_FOUND,
    409: ErrorCode.CONFLICT,
    422: ErrorCode.VALIDATION_ERROR,
    500: ErrorCode.INTERNAL_ERROR,
    502: ErrorCode.BAD_GATEWAY,
    503: ErrorCode.SERVICE_UNAVAILABLE,
}


def code_for_status(status_code: int) -> ErrorCode:
    """Stable status class for an HTTP error status."""
    code = _CODE_BY_STATUS.get(status_code)
    if code is not None:
        return code
    return ErrorCode.INTERNAL_ERROR if status_code >= 500 else ErrorCode.BAD_REQUEST


class ErrorDetail(BaseModel):
    """
    RFC 7807 model (Problem Details).

    Extra fields:
    - code: stable status class for clients
    - kind: fault label that produced the error (e.g. "ExpiredToken")
    - errors: optional detail list (e.g. [{"request_id": "..."}])
    """

    type: str = "about:blank"
    title: str
    status: int
    detail: str
    code: ErrorCode
    kind: str | None = None
    instance: str | None = None
    errors: list[dict[str, Any]] | None = None


PROBLEM_JSON_MEDIA_TYPE = "application/problem+json"

_OPENAPI_ERROR_CONTENT = {
    PROBLEM_JSON_MEDIA_TYPE: {"schema": {"$ref": "#/components/schemas/ErrorDetail"}}
}


def _openapi_entry(description: str) -> dict[str, Any]:
    return {
        "description": f"{description} (RFC7807)",
        "model": ErrorDetail,
        "content": _OPENAPI_ERROR_CONTENT,
    }


OPENAPI_ERROR_RESPONSES = {
    "401": _openapi_entry("Unauthorized"),
    "403": _openapi_entry("Forbidden"),
    "404": _openapi_entry("Not Found"),
    "409": _openapi_entry("Conflict"),
    "422": _openapi_entry("Validation Error"),
    "502": _openapi_entry("Bad Gateway"),
    "default": _openapi_entry("Error"),
}


class AppHTTPException(HTTPException):
    """HTTPException with a status class, the fault kind and optional details."""

    def __init__(
        self,
        status_code: int,
        code: ErrorCode,
        detail: str,
        kind: str | None = None,
        errors: list[dict[str, Any]] | None = None,
    ):
        super().__init__(status_code=status_code, detail=detail)
        self.code = code
        self.kind = kind
        self.errors = errors


def problem_response(request: Request, exc: AppHTTPException) -> JSONResponse:
    request_id = getattr(request.state, "request_id", None)
    errors = list(exc.errors or [])
    headers = dict(exc.headers or {})
    if request_id:
        errors.append({"request_id": request_id})
        # Unhandled errors are rendered outside the request middleware.
        headers[REQUEST_ID_HEADER] = request_id

    problem = ErrorDetail(
        type=f"about:blank/{exc.code.value.lower()}",
        title=exc.code.value.replace("_", " ").title(),
        status=exc.status_code,
        detail=str(exc.detail),
        code=exc.code,
        kind=exc.kind,
        instance=str(request.url),
        errors=errors or None,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=problem.model_dump(mode="json", exclude_none=True),
        headers=headers,
        media_type=PROBLEM_JSON_MEDIA_TYPE,
    )


async def app_exception_handler(
    request: Request, exc: AppHTTPException
) -> JSONResponse:
    return problem_response(request, exc)


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """500 problem body; the exception text never reaches the client."""
    internal = AppHTTPException(
        status_code=500,
        code=ErrorCode.INTERNAL_ERROR,
        detail="An unexpected error occurred",
        kind="InternalError",
    )
    return problem_response(request, internal)
