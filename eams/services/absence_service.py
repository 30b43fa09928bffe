"""
===============================================================================
TARJETA CRC — services/absence_service.py
===============================================================================

Module:
    Absence workflow service (backend process)

Responsibilities:
    - Register handlers for absence.list / create / approve / reject.
    - Thread the caller Identity from the payload into each use case.
    - Build the FastAPI app that serves them over POST /rpc.

Collaborators:
    - application/usecases/absence: Create / List / Decide use cases.
    - rpc/server.py: CommandRouter / build_rpc_router.
    - container.py: absence repository.
===============================================================================
"""

from __future__ import annotations

from fastapi import FastAPI

from ..application.usecases.absence import (
    AbsenceResult,
    CreateAbsenceUseCase,
    DecideAbsenceUseCase,
    ListAbsencesUseCase,
)
from ..crosscutting.middleware import RequestContextMiddleware
from ..crosscutting.pagination import Page
from ..domain.absences import AbsenceStatus
from ..domain.repositories import AbsenceRepository
from ..rpc.protocol import Command, Service
from ..rpc.server import CommandRouter, build_rpc_router
from .lifespan import database_lifespan
from .payloads import (
    AbsenceOut,
    CreateAbsencePayload,
    DecideAbsencePayload,
    ListAbsencesPayload,
    to_wire,
)

SERVICE_NAME = "absence"


def _absence_outcome(result: AbsenceResult):
    if result.error:
        return result.error
    return to_wire(AbsenceOut.from_absence(result.absence))


def build_absence_router(absences: AbsenceRepository) -> CommandRouter:
    router = CommandRouter(Service.ABSENCE)
    create = CreateAbsenceUseCase(absences)
    list_absences = ListAbsencesUseCase(absences)
    approve = DecideAbsenceUseCase(absences, AbsenceStatus.APPROVED)
    reject = DecideAbsenceUseCase(absences, AbsenceStatus.REJECTED)

    @router.command(Command.ABSENCE_LIST, ListAbsencesPayload)
    def handle_list(payload: ListAbsencesPayload):
        result = list_absences.execute(
            payload.identity.to_identity(), payload.page, payload.limit
        )
        page = Page[AbsenceOut](
            data=[AbsenceOut.from_absence(a) for a in result.items],
            total=result.total,
            page=result.page,
            limit=result.limit,
        )
        return to_wire(page)

    @router.command(Command.ABSENCE_CREATE, CreateAbsencePayload)
    def handle_create(payload: CreateAbsencePayload):
        dto = payload.dto
        return _absence_outcome(
            create.execute(
                dto.reason, dto.start_date, dto.end_date, payload.identity.to_identity()
            )
        )

    @router.command(Command.ABSENCE_APPROVE, DecideAbsencePayload)
    def handle_approve(payload: DecideAbsencePayload):
        return _absence_outcome(
            approve.execute(payload.id, payload.identity.to_identity())
        )

    @router.command(Command.ABSENCE_REJECT, DecideAbsencePayload)
    def handle_reject(payload: DecideAbsencePayload):
        return _absence_outcome(
            reject.execute(payload.id, payload.identity.to_identity())
        )

    return router


def create_absence_app(router: CommandRouter | None = None) -> FastAPI:
    """Absence service app. Without a router, wiring comes from the container."""
    if router is None:
        from ..container import get_absence_repository

        router = build_absence_router(get_absence_repository())

    app = FastAPI(
        title="EAMS Absence Service",
        docs_url=None,
        redoc_url=None,
        lifespan=database_lifespan,
    )
    app.include_router(build_rpc_router(router))
    app.add_middleware(RequestContextMiddleware, service_name=SERVICE_NAME)
    return app
