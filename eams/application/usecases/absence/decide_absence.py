"""
===============================================================================
USE CASE: Decide Absence Request (approve / reject)
===============================================================================

Business Goal:
    Let an admin move a PENDING request to its final status exactly once.

-------------------------------------------------------------------------------
CRC CARD
-------------------------------------------------------------------------------
Class:
    DecideAbsenceUseCase

Responsibilities:
    - Allow ADMIN callers only.
    - Resolve the request by id (non-UUID ids do not exist).
    - Apply PENDING -> decision with a compare-and-set write.

Collaborators:
    - AbsenceRepository.get_absence / update_status
    - domain.absences.can_transition

-------------------------------------------------------------------------------
FLOW
-------------------------------------------------------------------------------
1) Role is not ADMIN -> RoleNotPermitted (before any lookup).
2) Id unknown or not a UUID -> NotFound.
3) Status already terminal -> AlreadyDecided.
4) update_status(expected=PENDING). None -> a concurrent decision won ->
   AlreadyDecided.
===============================================================================
"""

from __future__ import annotations

import logging
from uuid import UUID

from ....domain.absences import AbsenceStatus, TERMINAL_STATUSES, can_transition
from ....domain.faults import Fault, FaultKind
from ....domain.repositories import AbsenceRepository
from ....identity.users import Identity, UserRole
from .absence_results import AbsenceResult

logger = logging.getLogger(__name__)

_VERBS = {AbsenceStatus.APPROVED: "approve", AbsenceStatus.REJECTED: "reject"}


def _parse_id(raw: str) -> UUID | None:
    try:
        return UUID(str(raw))
    except ValueError:
        return None


class DecideAbsenceUseCase:
    def __init__(
        self, absence_repository: AbsenceRepository, decision: AbsenceStatus
    ) -> None:
        if decision not in TERMINAL_STATUSES:
            raise ValueError(f"decision must be terminal, got {decision.value}")
        self._absences = absence_repository
        self._decision = decision
        self._verb = _VERBS[decision]

    def execute(self, absence_id: str, identity: Identity) -> AbsenceResult:
        if identity.role != UserRole.ADMIN:
            logger.warning(
                "absence decision denied",
                extra={
                    "subject_id": identity.subject_id,
                    "role": identity.role.value,
                    "absence_id": absence_id,
                    "decision": self._decision.value,
                },
            )
            return AbsenceResult(
                error=Fault(
                    FaultKind.ROLE_NOT_PERMITTED, f"Only admins can {self._verb}"
                )
            )

        parsed = _parse_id(absence_id)
        current = self._absences.get_absence(parsed) if parsed else None
        if current is None:
            return AbsenceResult(
                error=Fault(FaultKind.NOT_FOUND, "Absence not found")
            )

        if not can_transition(current.status, self._decision):
            return self._already_decided(current.status)

        updated = self._absences.update_status(
            current.id, expected=AbsenceStatus.PENDING, new_status=self._decision
        )
        if updated is None:
            latest = self._absences.get_absence(current.id)
            if latest is None:
                return AbsenceResult(
                    error=Fault(FaultKind.NOT_FOUND, "Absence not found")
                )
            return self._already_decided(latest.status)

        logger.info(
            "absence decided",
            extra={
                "absence_id": str(updated.id),
                "decision": self._decision.value,
                "subject_id": identity.subject_id,
            },
        )
        return AbsenceResult(absence=updated)

    @staticmethod
    def _already_decided(status: AbsenceStatus) -> AbsenceResult:
        return AbsenceResult(
            error=Fault(
                FaultKind.ALREADY_DECIDED,
                f"Absence already decided ({status.value})",
            )
        )
