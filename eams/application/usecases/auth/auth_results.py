"""
===============================================================================
AUTH USE CASE RESULTS
===============================================================================

Typed outcomes for the authentication use cases. Use cases return these
instead of raising, so the command handlers map them to replies without
try/except:
    - RegisterUserResult: user | error
    - LoginResult: access_token + expires_in | error
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass

from ....domain.faults import Fault
from ....identity.users import User


@dataclass(frozen=True)
class RegisterUserResult:
    user: User | None = None
    error: Fault | None = None


@dataclass(frozen=True)
class LoginResult:
    access_token: str | None = None
    expires_in: int | None = None
    error: Fault | None = None
