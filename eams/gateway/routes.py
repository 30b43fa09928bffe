"""
===============================================================================
TARJETA CRC — gateway/routes.py
===============================================================================

Module:
    Edge HTTP surface

Responsibilities:
    - Expose the auth and absence endpoints.
    - Run the guard chain (dependency) before any dispatch.
    - Dispatch one command per request and return the upstream value as-is.
    - Log every fault with operation, subject id and entity id, then raise
      the translated edge error.

Collaborators:
    - identity/guards.py: guard(operation) -> Identity | None.
    - rpc/dispatcher.py: CommandDispatcher.dispatch.
    - rpc/faults.py: from_rpc_error.
    - gateway/operations.py: operation catalog.
===============================================================================
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query

from ..container import get_command_dispatcher
from ..crosscutting.error_responses import OPENAPI_ERROR_RESPONSES
from ..crosscutting.logger import logger
from ..crosscutting.pagination import DEFAULT_LIMIT, DEFAULT_PAGE
from ..identity.guards import EdgeOperation, guard
from ..identity.users import Identity
from ..rpc.dispatcher import CommandDispatcher
from ..rpc.faults import from_rpc_error
from . import operations as ops
from .schemas import (
    AbsencePageResponse,
    AbsenceResponse,
    CreateAbsenceRequest,
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    UserResponse,
)

router = APIRouter(responses=OPENAPI_ERROR_RESPONSES)


def _forward(
    dispatcher: CommandDispatcher,
    operation: EdgeOperation,
    payload: dict[str, Any],
    identity: Identity | None,
    entity_id: str | None = None,
) -> Any:
    reply = dispatcher.dispatch(operation.command, payload, identity)
    if reply.error is None:
        return reply.value

    exc = from_rpc_error(reply.error)
    logger.warning(
        "operation failed",
        extra={
            "operation": operation.name,
            "subject_id": identity.subject_id if identity else None,
            "entity_id": entity_id,
            "status_code": exc.status_code,
            "kind": exc.kind,
            "detail": exc.detail,
        },
    )
    raise exc


# ---------------------------------------------------------------------------
# Auth (public)
# ---------------------------------------------------------------------------
@router.post(
    "/auth/register", tags=["auth"], status_code=201, response_model=UserResponse
)
def register(
    req: RegisterRequest,
    identity: Identity | None = Depends(guard(ops.REGISTER)),
    dispatcher: CommandDispatcher = Depends(get_command_dispatcher),
):
    return _forward(
        dispatcher, ops.REGISTER, req.model_dump(mode="json", by_alias=True), identity
    )


@router.post("/auth/login", tags=["auth"], response_model=LoginResponse)
def login(
    req: LoginRequest,
    identity: Identity | None = Depends(guard(ops.LOGIN)),
    dispatcher: CommandDispatcher = Depends(get_command_dispatcher),
):
    return _forward(
        dispatcher, ops.LOGIN, req.model_dump(mode="json", by_alias=True), identity
    )


# ---------------------------------------------------------------------------
# Absences (Bearer)
# ---------------------------------------------------------------------------
@router.get("/absences", tags=["absences"], response_model=AbsencePageResponse)
def list_absences(
    page: int = Query(DEFAULT_PAGE, ge=1),
    limit: int = Query(DEFAULT_LIMIT, ge=1),
    identity: Identity = Depends(guard(ops.LIST_ABSENCES)),
    dispatcher: CommandDispatcher = Depends(get_command_dispatcher),
):
    return _forward(
        dispatcher, ops.LIST_ABSENCES, {"page": page, "limit": limit}, identity
    )


@router.post(
    "/absences", tags=["absences"], status_code=201, response_model=AbsenceResponse
)
def create_absence(
    req: CreateAbsenceRequest,
    identity: Identity = Depends(guard(ops.CREATE_ABSENCE)),
    dispatcher: CommandDispatcher = Depends(get_command_dispatcher),
):
    return _forward(
        dispatcher,
        ops.CREATE_ABSENCE,
        {"dto": req.model_dump(mode="json", by_alias=True)},
        identity,
    )


@router.patch(
    "/absences/{absence_id}/approve",
    tags=["absences"],
    response_model=AbsenceResponse,
)
def approve_absence(
    absence_id: str,
    identity: Identity = Depends(guard(ops.APPROVE_ABSENCE)),
    dispatcher: CommandDispatcher = Depends(get_command_dispatcher),
):
    return _forward(
        dispatcher, ops.APPROVE_ABSENCE, {"id": absence_id}, identity, absence_id
    )


@router.patch(
    "/absences/{absence_id}/reject",
    tags=["absences"],
    response_model=AbsenceResponse,
)
def reject_absence(
    absence_id: str,
    identity: Identity = Depends(guard(ops.REJECT_ABSENCE)),
    dispatcher: CommandDispatcher = Depends(get_command_dispatcher),
):
    return _forward(
        dispatcher, ops.REJECT_ABSENCE, {"id": absence_id}, identity, absence_id
    )
