"""
===============================================================================
TARJETA CRC — gateway/schemas.py
===============================================================================

Edge request/response bodies (camelCase on the wire).

Responsibilities:
    - Validate client input before anything is dispatched.
    - Document response shapes in OpenAPI.

Collaborators:
    - gateway/routes.py
===============================================================================
"""

from __future__ import annotations

from datetime import date, datetime
from typing import List
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from ..domain.absences import AbsenceStatus
from ..identity.users import UserRole


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------
class RegisterRequest(CamelModel):
    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3, max_length=320)
    role: UserRole

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("name must not be empty")
        return v

    @field_validator("email")
    @classmethod
    def email_has_domain(cls, v: str) -> str:
        local, _, domain = v.partition("@")
        if not local or not domain:
            raise ValueError("email must be a valid email address")
        return v


class LoginRequest(CamelModel):
    email: str = Field(..., min_length=3, max_length=320)


class CreateAbsenceRequest(CamelModel):
    start_date: date
    end_date: date
    reason: str = Field(..., min_length=1)

    @field_validator("reason")
    @classmethod
    def reason_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("reason must not be empty")
        return v

    @model_validator(mode="after")
    def end_not_before_start(self):
        if self.end_date < self.start_date:
            raise ValueError("endDate must not be before startDate")
        return self


# ---------------------------------------------------------------------------
# Responses (OpenAPI documentation)
# ---------------------------------------------------------------------------
class UserResponse(CamelModel):
    id: UUID
    name: str
    email: str
    role: UserRole
    created_at: datetime | None = None


class LoginResponse(CamelModel):
    access_token: str
    expires_in: int


class AbsenceResponse(CamelModel):
    id: UUID
    reason: str
    start_date: date
    end_date: date
    status: AbsenceStatus
    employee_id: str
    created_at: datetime


class AbsencePageResponse(BaseModel):
    data: List[AbsenceResponse]
    total: int
    page: int
    limit: int
