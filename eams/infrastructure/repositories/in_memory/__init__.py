from .absences import InMemoryAbsenceRepository
from .users import InMemoryUserRepository

__all__ = ["InMemoryAbsenceRepository", "InMemoryUserRepository"]
