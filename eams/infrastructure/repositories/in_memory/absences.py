"""
============================================================
TARJETA CRC — infrastructure/repositories/in_memory/absences.py
============================================================
Class: InMemoryAbsenceRepository

Responsibilities:
  - Store absence requests in memory (tests / local dev).
  - Page and count with optional owner scoping.
  - Compare-and-set status updates.
  - Keep ordering aligned with Postgres:
      ORDER BY created_at DESC (insertion order breaks ties, newest first)

Collaborators:
  - domain.absences.AbsenceRequest, AbsenceStatus
  - domain.repositories.AbsenceRepository

Constraints:
  - Thread-safe: every access under a Lock, so two concurrent decisions on
    the same request cannot both succeed.
============================================================
"""

from __future__ import annotations

from dataclasses import replace
from itertools import count
from threading import Lock
from typing import Dict, List, Optional
from uuid import UUID

from ....domain.absences import AbsenceRequest, AbsenceStatus
from ....domain.repositories import AbsenceRepository


class InMemoryAbsenceRepository(AbsenceRepository):
    """
    Mental model:
    - _rows is the in-memory "table" (UUID -> AbsenceRequest).
    - _seq records insertion order for stable tie-breaking.
    """

    def __init__(self) -> None:
        self._lock = Lock()
        self._rows: Dict[UUID, AbsenceRequest] = {}
        self._seq: Dict[UUID, int] = {}
        self._counter = count()

    def _scoped(self, employee_id: Optional[str]) -> List[AbsenceRequest]:
        rows = self._rows.values()
        if employee_id is not None:
            rows = [r for r in rows if r.employee_id == employee_id]
        return sorted(
            rows,
            key=lambda r: (r.created_at, self._seq[r.id]),
            reverse=True,
        )

    def add_absence(self, absence: AbsenceRequest) -> None:
        with self._lock:
            self._rows[absence.id] = absence
            self._seq[absence.id] = next(self._counter)

    def get_absence(self, absence_id: UUID) -> Optional[AbsenceRequest]:
        with self._lock:
            return self._rows.get(absence_id)

    def list_absences(
        self,
        *,
        employee_id: Optional[str] = None,
        offset: int = 0,
        limit: int = 10,
    ) -> List[AbsenceRequest]:
        start = max(0, offset)
        with self._lock:
            return self._scoped(employee_id)[start : start + max(0, limit)]

    def count_absences(self, *, employee_id: Optional[str] = None) -> int:
        with self._lock:
            return len(self._scoped(employee_id))

    def update_status(
        self,
        absence_id: UUID,
        *,
        expected: AbsenceStatus,
        new_status: AbsenceStatus,
    ) -> Optional[AbsenceRequest]:
        with self._lock:
            current = self._rows.get(absence_id)
            if current is None or current.status != expected:
                return None
            updated = replace(current, status=new_status)
            self._rows[absence_id] = updated
            return updated
