"""
===============================================================================
MODULE: HTTP middleware (request context)
===============================================================================

RequestContextMiddleware is mounted on all three processes. The gateway
mints the request id; the backends receive it in X-Request-Id from the RPC
client, so one id spans the whole call chain.

  - Accept a well-formed incoming X-Request-Id, otherwise mint a UUID
  - Bind request_id/method/path/service into contextvars for the logger
  - Echo the id on the response and log one completion line
  - clear_context() after every request

Collaborators:
  - eams/context.py
  - crosscutting/logger.py
  - rpc/client.py (forwards REQUEST_ID_HEADER downstream)
===============================================================================
"""

from __future__ import annotations

import re
import time
import uuid
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from ..context import clear_context, set_request_context
from .logger import logger

REQUEST_ID_HEADER = "X-Request-Id"

_REQUEST_ID_RE = re.compile(r"^[A-Za-z0-9._:\-]{1,128}$")
_UNLOGGED_PATHS = frozenset({"/healthz"})


def resolve_request_id(incoming: str | None) -> str:
    """Keep a caller-supplied id when it is safe to echo, else mint one."""
    candidate = (incoming or "").strip()
    if _REQUEST_ID_RE.match(candidate):
        return candidate
    return str(uuid.uuid4())


class RequestContextMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, service_name: str = "") -> None:
        super().__init__(app)
        self._service_name = service_name

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        set_request_context(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            service=self._service_name,
        )
        request.state.request_id = request_id

        started = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            if request.url.path not in _UNLOGGED_PATHS:
                logger.info(
                    "request completed",
                    extra={
                        "status_code": status_code,
                        "latency_ms": round((time.perf_counter() - started) * 1000, 2),
                    },
                )
            clear_context()
