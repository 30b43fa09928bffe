"""
============================================================
TARJETA CRC
============================================================
Package: eams.infrastructure.repositories (exports)

Responsibilities:
- Expose concrete repositories (Postgres and InMemory) from one import point.

Collaborators:
- Postgres repositories (raw SQL)
- InMemory repositories (tests / local dev)
============================================================
"""

from .in_memory import InMemoryAbsenceRepository, InMemoryUserRepository
from .postgres import PostgresAbsenceRepository, PostgresUserRepository

__all__ = [
    "InMemoryAbsenceRepository",
    "InMemoryUserRepository",
    "PostgresAbsenceRepository",
    "PostgresUserRepository",
]
