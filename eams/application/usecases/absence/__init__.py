"""Absence workflow use cases (create / list / approve / reject)."""

from .absence_results import AbsenceListResult, AbsenceResult
from .create_absence import CreateAbsenceUseCase
from .decide_absence import DecideAbsenceUseCase
from .list_absences import ListAbsencesUseCase

__all__ = [
    "AbsenceListResult",
    "AbsenceResult",
    "CreateAbsenceUseCase",
    "DecideAbsenceUseCase",
    "ListAbsencesUseCase",
]
