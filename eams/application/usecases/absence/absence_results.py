"""
===============================================================================
ABSENCE USE CASE RESULTS
===============================================================================

Typed outcomes shared by the absence workflow use cases:
    - AbsenceResult: single request (create / approve / reject)
    - AbsenceListResult: one role-scoped page plus echoed paging inputs

AbsenceResult carries either a value or a Fault, never both. Listing cannot
fail once the caller is authenticated, so AbsenceListResult has no Fault.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from ....domain.absences import AbsenceRequest
from ....domain.faults import Fault


@dataclass(frozen=True)
class AbsenceResult:
    absence: AbsenceRequest | None = None
    error: Fault | None = None


@dataclass(frozen=True)
class AbsenceListResult:
    items: List[AbsenceRequest] = field(default_factory=list)
    total: int = 0
    page: int = 1
    limit: int = 10
