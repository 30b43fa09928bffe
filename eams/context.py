"""
===============================================================================
TARJETA CRC — eams/context.py (Request-scoped logging context)
===============================================================================

Responsibilities:
  - Hold the correlation data of the request being served in one ContextVar.
  - Offer set_request_context() / clear_context() to the middleware,
    get_context_dict() to the logger and current_request_id() to the RPC
    client.

Constraints:
  - Correlation data only. The caller's Identity is never stored here; it
    travels as an explicit argument through the guard and the dispatcher.
===============================================================================
"""

from __future__ import annotations

from contextvars import ContextVar
from dataclasses import asdict, dataclass


@dataclass(frozen=True)
class RequestContext:
    request_id: str = ""
    method: str = ""
    path: str = ""
    service: str = ""


_EMPTY = RequestContext()
_current: ContextVar[RequestContext] = ContextVar("eams_request", default=_EMPTY)


def set_request_context(
    *, request_id: str = "", method: str = "", path: str = "", service: str = ""
) -> None:
    _current.set(
        RequestContext(
            request_id=request_id or "",
            method=method or "",
            path=path or "",
            service=service or "",
        )
    )


def current_request_id() -> str:
    """Request id being served, or "" outside a request."""
    return _current.get().request_id


def get_context_dict() -> dict[str, str]:
    """Non-empty context fields, ready to merge into a log line."""
    return {k: v for k, v in asdict(_current.get()).items() if v}


def clear_context() -> None:
    _current.set(_EMPTY)
