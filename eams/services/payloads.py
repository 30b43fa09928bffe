"""
===============================================================================
TARJETA CRC — services/payloads.py
===============================================================================

Module:
    Command payload models and wire serializers (backend side)

Responsibilities:
    - Validate command payloads (camelCase on the wire).
    - Rebuild the caller Identity from the payload's identity claims.
    - Serialize User / AbsenceRequest into their camelCase wire shapes.

Collaborators:
    - rpc/server.py: validates payloads with these models.
    - services/auth_service.py, services/absence_service.py: handlers.
===============================================================================
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from ..domain.absences import AbsenceRequest, AbsenceStatus
from ..identity.users import Identity, User, UserRole


class WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


# ---------------------------------------------------------------------------
# Inbound
# ---------------------------------------------------------------------------
class IdentityClaims(WireModel):
    sub: str = Field(..., min_length=1)
    email: str
    role: UserRole

    def to_identity(self) -> Identity:
        return Identity(subject_id=self.sub, email=self.email, role=self.role)


class RegisterPayload(WireModel):
    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3, max_length=320)
    role: UserRole

    @field_validator("email")
    @classmethod
    def email_has_domain(cls, v: str) -> str:
        local, _, domain = v.partition("@")
        if not local or not domain:
            raise ValueError("email must be a valid email address")
        return v


class LoginPayload(WireModel):
    email: str = Field(..., min_length=3, max_length=320)


class ListAbsencesPayload(WireModel):
    identity: IdentityClaims
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1)


class AbsenceDraft(WireModel):
    reason: str
    start_date: date
    end_date: date


class CreateAbsencePayload(WireModel):
    dto: AbsenceDraft
    identity: IdentityClaims


class DecideAbsencePayload(WireModel):
    id: str
    identity: IdentityClaims


# ---------------------------------------------------------------------------
# Outbound
# ---------------------------------------------------------------------------
class UserOut(WireModel):
    id: UUID
    name: str
    email: str
    role: UserRole
    created_at: datetime | None = None

    @classmethod
    def from_user(cls, user: User) -> "UserOut":
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            role=user.role,
            created_at=user.created_at,
        )


class AbsenceOut(WireModel):
    id: UUID
    reason: str
    start_date: date
    end_date: date
    status: AbsenceStatus
    employee_id: str
    created_at: datetime

    @classmethod
    def from_absence(cls, absence: AbsenceRequest) -> "AbsenceOut":
        return cls(
            id=absence.id,
            reason=absence.reason,
            start_date=absence.start_date,
            end_date=absence.end_date,
            status=absence.status,
            employee_id=absence.employee_id,
            created_at=absence.created_at,
        )


class TokenOut(WireModel):
    access_token: str
    expires_in: int


def to_wire(model: BaseModel) -> dict[str, Any]:
    """JSON-ready camelCase dict."""
    return model.model_dump(mode="json", by_alias=True)
