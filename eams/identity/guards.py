"""
===============================================================================
TARJETA CRC — identity/guards.py
===============================================================================

Module:
    Authorization guard chain (edge)

Responsibilities:
    - Declare, per edge operation, the command it dispatches and the roles it
      accepts (EdgeOperation).
    - authenticate_request(): public-path bypass, Bearer extraction, token
      verification -> Identity or Fault.
    - check_role(): role gate -> Fault or None.
    - guard(): FastAPI dependency running both checks, raising the edge error
      on failure and returning the Identity on success.

Collaborators:
    - identity/tokens.py: TokenCodec.verify.
    - rpc/faults.py: fault_to_http.
    - container.py: get_token_codec (overridable in tests).
    - gateway/routes.py: every route depends on guard(operation).

Design decisions:
    - Both checks are pure functions; the dependency is a thin shell.
    - Any verify failure is reported as InvalidCredential; the message says
      whether the token expired or is invalid.
    - A failing guard never builds a Command.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

from fastapi import Depends, Header, Request

from ..container import get_token_codec
from ..crosscutting.logger import logger
from ..domain.faults import Fault, FaultKind
from ..rpc.faults import fault_to_http
from ..rpc.protocol import Command
from .tokens import TokenCodec, TokenError
from .users import Identity, UserRole

PUBLIC_PATHS: frozenset[str] = frozenset({"/auth/register", "/auth/login"})

BEARER_SCHEME = "bearer"


@dataclass(frozen=True, slots=True)
class EdgeOperation:
    """One edge endpoint: its name, the command it sends, accepted roles."""

    name: str
    command: Command
    roles: frozenset[UserRole] = field(default_factory=frozenset)


@dataclass(frozen=True, slots=True)
class AuthOutcome:
    identity: Identity | None = None
    fault: Fault | None = None


def _extract_bearer_token(authorization: str | None) -> tuple[str | None, Fault | None]:
    """Token from `Authorization: Bearer <token>`, or the credential fault."""
    if authorization is None or not authorization.strip():
        return None, Fault(
            FaultKind.MISSING_CREDENTIAL, "Missing Authorization header"
        )

    parts = authorization.strip().split(None, 1)
    if len(parts) != 2 or parts[0].lower() != BEARER_SCHEME:
        return None, Fault(
            FaultKind.MALFORMED_CREDENTIAL,
            "Authorization header must use the Bearer scheme",
        )

    token = parts[1].strip()
    if not token:
        return None, Fault(FaultKind.MALFORMED_CREDENTIAL, "Bearer token is empty")
    return token, None


def authenticate_request(
    path: str, authorization: str | None, codec: TokenCodec
) -> AuthOutcome:
    """Step 1 of the chain. Public paths pass with no identity."""
    if path in PUBLIC_PATHS:
        return AuthOutcome()

    token, fault = _extract_bearer_token(authorization)
    if fault is not None:
        return AuthOutcome(fault=fault)

    try:
        identity = codec.verify(token)
    except TokenError as exc:
        reason = "expired" if exc.kind == FaultKind.EXPIRED_TOKEN else "invalid"
        return AuthOutcome(
            fault=Fault(FaultKind.INVALID_CREDENTIAL, f"Token is {reason}")
        )
    return AuthOutcome(identity=identity)


def check_role(identity: Identity, roles: frozenset[UserRole]) -> Fault | None:
    """Step 2 of the chain. An empty role set accepts any authenticated caller."""
    if roles and identity.role not in roles:
        allowed = ", ".join(sorted(r.value for r in roles))
        return Fault(
            FaultKind.ROLE_NOT_PERMITTED, f"Requires one of roles: {allowed}"
        )
    return None


def guard(operation: EdgeOperation) -> Callable:
    """FastAPI dependency: run the chain for ``operation``."""

    async def dependency(
        request: Request,
        authorization: str | None = Header(None, alias="Authorization"),
        codec: TokenCodec = Depends(get_token_codec),
    ) -> Identity | None:
        outcome = authenticate_request(request.url.path, authorization, codec)
        fault = outcome.fault
        if fault is None and outcome.identity is not None:
            fault = check_role(outcome.identity, operation.roles)

        if fault is not None:
            logger.warning(
                "guard rejected request",
                extra={
                    "operation": operation.name,
                    "kind": fault.kind.value,
                    "subject_id": (
                        outcome.identity.subject_id if outcome.identity else None
                    ),
                },
            )
            raise fault_to_http(fault)

        return outcome.identity

    dependency._operation = operation  # type: ignore[attr-defined]
    return dependency
