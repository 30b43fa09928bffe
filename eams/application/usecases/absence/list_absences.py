"""
===============================================================================
USE CASE: List Absence Requests
===============================================================================

Class:
    ListAbsencesUseCase

Responsibilities:
    - Scope visibility by role: EMPLOYEE sees own requests, ADMIN sees all.
    - Page the scoped set (created_at DESC) and count it.
    - Echo page and limit unmodified.

Collaborators:
    - AbsenceRepository.list_absences / count_absences
    - crosscutting.pagination.offset_for
===============================================================================
"""

from __future__ import annotations

import logging

from ....crosscutting.pagination import offset_for
from ....domain.repositories import AbsenceRepository
from ....identity.users import Identity, UserRole
from .absence_results import AbsenceListResult

logger = logging.getLogger(__name__)


class ListAbsencesUseCase:
    def __init__(self, absence_repository: AbsenceRepository) -> None:
        self._absences = absence_repository

    def execute(self, identity: Identity, page: int, limit: int) -> AbsenceListResult:
        owner = identity.subject_id if identity.role == UserRole.EMPLOYEE else None

        items = self._absences.list_absences(
            employee_id=owner,
            offset=offset_for(page, limit),
            limit=limit,
        )
        total = self._absences.count_absences(employee_id=owner)

        logger.info(
            "absences listed",
            extra={
                "subject_id": identity.subject_id,
                "count": len(items),
                "total": total,
            },
        )
        return AbsenceListResult(items=items, total=total, page=page, limit=limit)
