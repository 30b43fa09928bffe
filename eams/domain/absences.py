"""
===============================================================================
TARJETA CRC — domain/absences.py
===============================================================================

Module:
    Absence request entity and status predicates

Responsibilities:
    - Define AbsenceRequest as a plain immutable value.
    - Define AbsenceStatus and the one-shot transition rule
      PENDING -> APPROVED | REJECTED.

Collaborators:
    - application/usecases/absence: applies transitions.
    - domain/repositories.py: AbsenceRepository persists these values.

Notes:
    - No behavior on the entity; predicates are free functions.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from uuid import UUID


class AbsenceStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


TERMINAL_STATUSES = frozenset({AbsenceStatus.APPROVED, AbsenceStatus.REJECTED})


def is_pending(status: AbsenceStatus) -> bool:
    return status == AbsenceStatus.PENDING


def can_transition(current: AbsenceStatus, target: AbsenceStatus) -> bool:
    """Only PENDING moves, and only to a terminal status."""
    return is_pending(current) and target in TERMINAL_STATUSES


@dataclass(frozen=True, slots=True)
class AbsenceRequest:
    id: UUID
    reason: str
    start_date: date
    end_date: date
    status: AbsenceStatus
    employee_id: str
    created_at: datetime
