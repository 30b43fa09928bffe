"""
===============================================================================
TARJETA CRC — identity/users.py
===============================================================================

Module:
    User, role and identity models

Responsibilities:
    - Define the closed role enum (EMPLOYEE / ADMIN).
    - Define User (persistent record created by registration).
    - Define Identity (ephemeral, rebuilt from a verified token per request).

Collaborators:
    - identity/tokens.py: issues/verifies tokens carrying these claims.
    - identity/guards.py: checks Identity.role against operation roles.
    - infrastructure/repositories/*: map rows -> User.

Notes:
    - No business logic here: only data shapes.
    - Identity is never persisted and never stored in ambient context.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID


class UserRole(str, Enum):
    """Roles understood by every service."""

    EMPLOYEE = "EMPLOYEE"
    ADMIN = "ADMIN"


@dataclass(frozen=True, slots=True)
class User:
    """Registered user. Identity is established by email alone."""

    id: UUID
    name: str
    email: str
    role: UserRole
    created_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class Identity:
    """Caller identity reconstructed from token claims."""

    subject_id: str
    email: str
    role: UserRole
    issued_at: datetime | None = None
    expires_at: datetime | None = None

    def to_claims(self) -> dict[str, Any]:
        """Wire form attached to command payloads."""
        return {"sub": self.subject_id, "email": self.email, "role": self.role.value}
