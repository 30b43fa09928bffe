"""
===============================================================================
USE CASE: Register User
===============================================================================

Business Goal:
    Create a user identified by email alone (no password, insecure by design).

-------------------------------------------------------------------------------
CRC CARD
-------------------------------------------------------------------------------
Class:
    RegisterUserUseCase

Responsibilities:
    - Reject an email that already exists (exact, case-sensitive match).
    - Persist a new User with a generated id.

Collaborators:
    - UserRepository: get_user_by_email / add_user
    - auth_results.RegisterUserResult

-------------------------------------------------------------------------------
BUSINESS RULES
-------------------------------------------------------------------------------
R1) Email is unique. A duplicate yields DuplicateIdentity and writes nothing.
R2) Email is stored exactly as given.
R3) add_user is the atomic check: two concurrent registrations of the same
    email produce one user and one DuplicateIdentity.
===============================================================================
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable
from uuid import uuid4

from ....domain.faults import Fault, FaultKind
from ....domain.repositories import UserRepository
from ....identity.users import User, UserRole
from .auth_results import RegisterUserResult

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class RegisterUserUseCase:
    def __init__(
        self,
        user_repository: UserRepository,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._users = user_repository
        self._clock = clock

    def execute(self, name: str, email: str, role: UserRole) -> RegisterUserResult:
        if self._users.get_user_by_email(email) is not None:
            return self._duplicate()

        user = User(
            id=uuid4(),
            name=name,
            email=email,
            role=role,
            created_at=self._clock(),
        )
        if not self._users.add_user(user):
            return self._duplicate()

        logger.info(
            "user registered",
            extra={"user_id": str(user.id), "role": user.role.value},
        )
        return RegisterUserResult(user=user)

    @staticmethod
    def _duplicate() -> RegisterUserResult:
        logger.warning("registration rejected: email already exists")
        return RegisterUserResult(
            error=Fault(FaultKind.DUPLICATE_IDENTITY, "Email already exists")
        )
