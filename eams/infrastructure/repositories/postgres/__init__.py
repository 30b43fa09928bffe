from .absences import PostgresAbsenceRepository
from .users import PostgresUserRepository

__all__ = ["PostgresAbsenceRepository", "PostgresUserRepository"]
