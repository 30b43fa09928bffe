"""
===============================================================================
TARJETA CRC — gateway/exception_handlers.py (Centralized exception handling)
===============================================================================

Responsibilities:
  - Render edge errors as RFC7807 responses.
  - Render request validation errors with kind ValidationFailed.
  - Render routing errors (unknown path, wrong method) as RFC7807 too.
  - Log unhandled exceptions with stack trace; never leak internals.

Collaborators:
  - crosscutting.error_responses: AppHTTPException, app_exception_handler
  - crosscutting.logger
===============================================================================
"""

from __future__ import annotations

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..crosscutting.error_responses import (
    AppHTTPException,
    ErrorCode,
    app_exception_handler,
    code_for_status,
    generic_exception_handler,
)
from ..crosscutting.logger import logger
from ..domain.faults import FaultKind


def _field_errors(exc: RequestValidationError) -> list[dict[str, str]]:
    errors = []
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")]
        errors.append({"field": ".".join(loc), "msg": str(err.get("msg", ""))})
    return errors


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    app_exc = AppHTTPException(
        status_code=422,
        code=ErrorCode.VALIDATION_ERROR,
        detail="Request validation failed",
        kind=FaultKind.VALIDATION_FAILED.value,
        errors=_field_errors(exc),
    )
    return await app_exception_handler(request, app_exc)


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    app_exc = AppHTTPException(
        status_code=exc.status_code,
        code=code_for_status(exc.status_code),
        detail=str(exc.detail),
    )
    app_exc.headers = exc.headers
    return await app_exception_handler(request, app_exc)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "unhandled exception",
        exc_info=exc,
        extra={
            "error": str(exc),
            "request_id": getattr(request.state, "request_id", None),
        },
    )
    return await generic_exception_handler(request, exc)


def register_exception_handlers(app) -> None:
    """Register RFC7807 handlers; Exception is the fallback."""
    app.add_exception_handler(AppHTTPException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)


__all__ = ["register_exception_handlers"]
