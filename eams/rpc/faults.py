"""
===============================================================================
TARJETA CRC — rpc/faults.py
===============================================================================

Module:
    Fault translator

Responsibilities:
    - Single table FaultKind -> HTTP status.
    - Backend direction: Fault -> transport error {statusCode, message, error,
      timestamp}.
    - Edge direction: transport error -> AppHTTPException, preserving status,
      message and kind.
    - Edge-local faults (guard chain, dispatch) -> AppHTTPException through the
      same table.

Collaborators:
    - domain/faults.py: FaultKind / Fault.
    - crosscutting/error_responses.py: AppHTTPException / ErrorCode.
    - rpc/server.py (backend direction), gateway/* and identity/guards.py
      (edge direction).

Notes:
    - Anything that does not look like an HTTP error status becomes 502.
===============================================================================
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Mapping

from ..crosscutting.error_responses import AppHTTPException, code_for_status
from ..domain.faults import Fault, FaultKind

DEFAULT_UPSTREAM_MESSAGE = "Upstream service error"
BAD_GATEWAY = 502

_STATUS_BY_KIND: dict[FaultKind, int] = {
    FaultKind.MISSING_CREDENTIAL: 401,
    FaultKind.MALFORMED_CREDENTIAL: 401,
    FaultKind.INVALID_CREDENTIAL: 401,
    FaultKind.INVALID_TOKEN: 401,
    FaultKind.EXPIRED_TOKEN: 401,
    FaultKind.DUPLICATE_IDENTITY: 401,
    FaultKind.UNKNOWN_IDENTITY: 401,
    FaultKind.ROLE_NOT_PERMITTED: 403,
    FaultKind.NOT_FOUND: 404,
    FaultKind.ALREADY_DECIDED: 409,
    FaultKind.VALIDATION_FAILED: 422,
    FaultKind.INTERNAL_ERROR: 500,
    FaultKind.UPSTREAM_UNAVAILABLE: BAD_GATEWAY,
    FaultKind.UNKNOWN_COMMAND: BAD_GATEWAY,
}


def status_for(kind: FaultKind) -> int:
    return _STATUS_BY_KIND[kind]


def to_rpc_error(fault: Fault, now: datetime | None = None) -> dict[str, Any]:
    """Transport form of a backend fault."""
    moment = now or datetime.now(timezone.utc)
    return {
        "statusCode": status_for(fault.kind),
        "message": fault.message,
        "error": fault.kind.value,
        "timestamp": moment.isoformat(),
    }


def _upstream_status(raw: Mapping[str, Any]) -> int:
    status = raw.get("statusCode")
    # bool is an int subclass; True is not a status.
    if isinstance(status, int) and not isinstance(status, bool) and 400 <= status <= 599:
        return status
    return BAD_GATEWAY


def from_rpc_error(raw: Any) -> AppHTTPException:
    """
    Edge form of a transport error.

    Status is kept when it is an HTTP error status, otherwise 502. Message is
    kept (default "Upstream service error"). Kind is kept when it is a known
    label.
    """
    if not isinstance(raw, Mapping):
        raw = {}

    status = _upstream_status(raw)

    message = raw.get("message")
    if not isinstance(message, str) or not message.strip():
        message = DEFAULT_UPSTREAM_MESSAGE

    kind = FaultKind.from_label(raw.get("error"))

    return AppHTTPException(
        status_code=status,
        code=code_for_status(status),
        detail=message,
        kind=kind.value if kind else None,
    )


def fault_to_http(fault: Fault) -> AppHTTPException:
    """Edge form of an edge-local fault."""
    status = status_for(fault.kind)
    return AppHTTPException(
        status_code=status,
        code=code_for_status(status),
        detail=fault.message,
        kind=fault.kind.value,
    )
