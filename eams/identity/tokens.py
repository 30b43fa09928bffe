"""
===============================================================================
TARJETA CRC — identity/tokens.py
===============================================================================

Module:
    Identity token codec (JWT, HS256)

Responsibilities:
    - Issue signed access tokens carrying sub / email / role / iat / exp / typ.
    - Verify tokens (signature, claims, role, type, expiry) and rebuild an
      Identity from the claims alone.

Collaborators:
    - crosscutting.config.get_settings: secret and default TTL.
    - identity.users: Identity / UserRole.
    - application/usecases/auth.py: issues tokens on login.
    - identity/guards.py: verifies tokens on every guarded edge request.

Design decisions:
    - Crypto lives at the identity edge, never in the domain.
    - Expiry is checked against the codec clock (injectable), not PyJWT's
      wall clock, so tests can pin time.
    - The user store is never consulted on verify.
    - Tokens are never logged.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable

import jwt

from ..crosscutting.config import get_settings
from ..domain.faults import FaultKind
from .users import Identity, UserRole

JWT_ALGORITHM: str = "HS256"

CLAIM_SUB: str = "sub"
CLAIM_EMAIL: str = "email"
CLAIM_ROLE: str = "role"
CLAIM_IAT: str = "iat"
CLAIM_EXP: str = "exp"
CLAIM_TYP: str = "typ"

TOKEN_TYPE_ACCESS: str = "access"

_REQUIRED_CLAIMS = [CLAIM_SUB, CLAIM_EMAIL, CLAIM_ROLE, CLAIM_IAT, CLAIM_EXP]

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TokenError(Exception):
    """Verification failure. ``kind`` is InvalidToken or ExpiredToken."""

    def __init__(self, kind: FaultKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message


@dataclass(frozen=True, slots=True)
class IssuedToken:
    token: str
    expires_in: int


class TokenCodec:
    """
    ----------------------------------------------------------------------------
    CRC (Class Card)
    ----------------------------------------------------------------------------
    Class:
      TokenCodec

    Responsibilities:
      - issue(): sign claims for a subject
      - verify(): validate a token and return the Identity it carries

    Collaborators:
      - PyJWT
    ----------------------------------------------------------------------------
    """

    def __init__(
        self,
        secret: str,
        ttl: timedelta,
        clock: Clock = utc_now,
    ):
        if not secret:
            raise ValueError("token secret must not be empty")
        self._secret = secret
        self._ttl = ttl
        self._clock = clock

    @property
    def default_ttl(self) -> timedelta:
        return self._ttl

    def issue(
        self,
        subject_id: str,
        email: str,
        role: UserRole,
        ttl: timedelta | None = None,
    ) -> str:
        return self.issue_with_expiry(subject_id, email, role, ttl).token

    def issue_with_expiry(
        self,
        subject_id: str,
        email: str,
        role: UserRole,
        ttl: timedelta | None = None,
    ) -> IssuedToken:
        """Sign an access token; also report its lifetime in seconds."""
        lifetime = ttl if ttl is not None else self._ttl
        now = int(self._clock().timestamp())
        expires_in = int(lifetime.total_seconds())

        payload: dict[str, object] = {
            CLAIM_SUB: str(subject_id),
            CLAIM_EMAIL: email,
            CLAIM_ROLE: UserRole(role).value,
            CLAIM_IAT: now,
            CLAIM_EXP: now + expires_in,
            CLAIM_TYP: TOKEN_TYPE_ACCESS,
        }
        token = jwt.encode(payload, self._secret, algorithm=JWT_ALGORITHM)
        return IssuedToken(token=token, expires_in=expires_in)

    def verify(self, token: str | None) -> Identity:
        """
        Validate ``token`` and return its Identity.

        Raises:
            TokenError(InvalidToken): missing, malformed, bad signature,
                missing claims, unknown role or wrong type.
            TokenError(ExpiredToken): exp <= now.
        """
        if not token:
            raise TokenError(FaultKind.INVALID_TOKEN, "Token is missing")

        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[JWT_ALGORITHM],
                options={
                    "require": _REQUIRED_CLAIMS,
                    "verify_exp": False,
                    "verify_iat": False,
                },
            )
        except jwt.InvalidTokenError as exc:
            raise TokenError(FaultKind.INVALID_TOKEN, "Token is invalid") from exc

        subject_id = payload.get(CLAIM_SUB)
        email = payload.get(CLAIM_EMAIL)
        token_type = payload.get(CLAIM_TYP)

        if not subject_id or not email:
            raise TokenError(FaultKind.INVALID_TOKEN, "Token is invalid")

        if token_type is not None and token_type != TOKEN_TYPE_ACCESS:
            raise TokenError(FaultKind.INVALID_TOKEN, "Token type is invalid")

        try:
            role = UserRole(str(payload.get(CLAIM_ROLE)))
        except ValueError as exc:
            raise TokenError(FaultKind.INVALID_TOKEN, "Token role is invalid") from exc

        try:
            issued_at = int(payload[CLAIM_IAT])
            expires_at = int(payload[CLAIM_EXP])
        except (TypeError, ValueError) as exc:
            raise TokenError(FaultKind.INVALID_TOKEN, "Token is invalid") from exc

        if expires_at <= self._clock().timestamp():
            raise TokenError(FaultKind.EXPIRED_TOKEN, "Token has expired")

        return Identity(
            subject_id=str(subject_id),
            email=str(email),
            role=role,
            issued_at=datetime.fromtimestamp(issued_at, tz=timezone.utc),
            expires_at=datetime.fromtimestamp(expires_at, tz=timezone.utc),
        )


def build_token_codec(clock: Clock = utc_now) -> TokenCodec:
    """Codec configured from Settings (shared secret + default TTL)."""
    settings = get_settings()
    return TokenCodec(
        secret=settings.jwt_secret,
        ttl=timedelta(minutes=settings.jwt_access_ttl_minutes),
        clock=clock,
    )
