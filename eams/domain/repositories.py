"""
CRC — domain/repositories.py

Name
- Record store interfaces (Protocols)

Responsibilities
- Define persistence contracts for users and absence requests (ports).
- Keep use cases independent from infrastructure (PostgreSQL, in-memory).

Collaborators
- identity.users: User
- domain.absences: AbsenceRequest, AbsenceStatus
- infrastructure.repositories: postgres / in_memory implementations

Constraints
- Pure interfaces only: no side effects, no infrastructure imports, no SQL.
- Implementations MUST match method signatures exactly.

Notes
- Listing order is created_at DESC for every implementation.
- update_status is a compare-and-set: the write only happens when the stored
  status still equals ``expected``.
"""

from typing import List, Optional, Protocol
from uuid import UUID

from ..identity.users import User
from .absences import AbsenceRequest, AbsenceStatus


class UserRepository(Protocol):
    """R: Interface for registered users."""

    def add_user(self, user: User) -> bool:
        """R: Persist ``user``. Returns False if the email is already taken."""
        ...

    def get_user_by_email(self, email: str) -> Optional[User]:
        """R: Exact (case-sensitive) email lookup."""
        ...

    def count_users(self) -> int:
        ...


class AbsenceRepository(Protocol):
    """R: Interface for absence requests."""

    def add_absence(self, absence: AbsenceRequest) -> None:
        ...

    def get_absence(self, absence_id: UUID) -> Optional[AbsenceRequest]:
        ...

    def list_absences(
        self,
        *,
        employee_id: Optional[str] = None,
        offset: int = 0,
        limit: int = 10,
    ) -> List[AbsenceRequest]:
        """
        R: Page of requests ordered by created_at DESC.

        employee_id=None lists every owner.
        """
        ...

    def count_absences(self, *, employee_id: Optional[str] = None) -> int:
        ...

    def update_status(
        self,
        absence_id: UUID,
        *,
        expected: AbsenceStatus,
        new_status: AbsenceStatus,
    ) -> Optional[AbsenceRequest]:
        """
        R: Set status to ``new_status`` only if it currently is ``expected``.

        Returns the updated request, or None when the id is unknown or the
        stored status no longer matches.
        """
        ...
