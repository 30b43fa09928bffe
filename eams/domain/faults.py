"""
===============================================================================
TARJETA CRC — domain/faults.py
===============================================================================

Module:
    Fault model (business failures as values)

Responsibilities:
    - Define the closed set of fault kinds shared by every service.
    - Define Fault (kind + human message), the value use cases and guards
      return instead of raising.

Collaborators:
    - rpc/faults.py: maps kinds to transport/edge status codes.
    - application/usecases/*: return Fault inside their result objects.
    - identity/guards.py: returns Fault for credential/role failures.

Notes:
    - Kind labels are the wire strings; they travel unchanged from backend to
      client, so renaming a member is a breaking change.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class FaultKind(str, Enum):
    # Credentials (edge guard)
    MISSING_CREDENTIAL = "MissingCredential"
    MALFORMED_CREDENTIAL = "MalformedCredential"
    INVALID_CREDENTIAL = "InvalidCredential"

    # Token codec
    INVALID_TOKEN = "InvalidToken"
    EXPIRED_TOKEN = "ExpiredToken"

    # Authorization
    ROLE_NOT_PERMITTED = "RoleNotPermitted"

    # Authentication service
    DUPLICATE_IDENTITY = "DuplicateIdentity"
    UNKNOWN_IDENTITY = "UnknownIdentity"

    # Absence workflow
    NOT_FOUND = "NotFound"
    ALREADY_DECIDED = "AlreadyDecided"

    # Generic
    VALIDATION_FAILED = "ValidationFailed"
    INTERNAL_ERROR = "InternalError"

    # Transport
    UPSTREAM_UNAVAILABLE = "UpstreamUnavailable"
    UNKNOWN_COMMAND = "UnknownCommand"

    @classmethod
    def from_label(cls, label: object) -> "FaultKind | None":
        """Known kind for a wire label, or None."""
        if not isinstance(label, str):
            return None
        try:
            return cls(label)
        except ValueError:
            return None


@dataclass(frozen=True, slots=True)
class Fault:
    """A business failure: what went wrong (kind) and a message for humans."""

    kind: FaultKind
    message: str
