"""
===============================================================================
USE CASE: Create Absence Request
===============================================================================

Business Goal:
    Let an employee file an absence request that starts PENDING.

-------------------------------------------------------------------------------
CRC CARD
-------------------------------------------------------------------------------
Class:
    CreateAbsenceUseCase

Responsibilities:
    - Allow EMPLOYEE callers only.
    - Validate the request (non-blank reason, end_date >= start_date).
    - Persist a PENDING request owned by the caller.

Collaborators:
    - AbsenceRepository.add_absence
    - identity.users.Identity (explicit caller)

-------------------------------------------------------------------------------
BUSINESS RULES
-------------------------------------------------------------------------------
R1) Only EMPLOYEE may create. Anyone else -> RoleNotPermitted, nothing stored.
R2) reason must contain non-whitespace text -> else ValidationFailed.
R3) end_date >= start_date -> else ValidationFailed.
R4) status = PENDING, employee_id = caller subject id, created_at = now.
===============================================================================
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Callable
from uuid import uuid4

from ....domain.absences import AbsenceRequest, AbsenceStatus
from ....domain.faults import Fault, FaultKind
from ....domain.repositories import AbsenceRepository
from ....identity.users import Identity, UserRole
from .absence_results import AbsenceResult

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CreateAbsenceUseCase:
    def __init__(
        self,
        absence_repository: AbsenceRepository,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._absences = absence_repository
        self._clock = clock

    def execute(
        self,
        reason: str,
        start_date: date,
        end_date: date,
        identity: Identity,
    ) -> AbsenceResult:
        if identity.role != UserRole.EMPLOYEE:
            logger.warning(
                "absence creation denied",
                extra={"subject_id": identity.subject_id, "role": identity.role.value},
            )
            return AbsenceResult(
                error=Fault(
                    FaultKind.ROLE_NOT_PERMITTED, "Only employees can create absences"
                )
            )

        if not (reason or "").strip():
            return AbsenceResult(
                error=Fault(FaultKind.VALIDATION_FAILED, "reason must not be empty")
            )
        if end_date < start_date:
            return AbsenceResult(
                error=Fault(
                    FaultKind.VALIDATION_FAILED,
                    "endDate must not be before startDate",
                )
            )

        absence = AbsenceRequest(
            id=uuid4(),
            reason=reason,
            start_date=start_date,
            end_date=end_date,
            status=AbsenceStatus.PENDING,
            employee_id=identity.subject_id,
            created_at=self._clock(),
        )
        self._absences.add_absence(absence)

        logger.info(
            "absence created",
            extra={"absence_id": str(absence.id), "subject_id": identity.subject_id},
        )
        return AbsenceResult(absence=absence)
