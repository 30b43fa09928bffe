"""
Unit tests for the JWT token codec.
"""

from datetime import timedelta
from uuid import uuid4

import jwt
import pytest

from eams.domain.faults import FaultKind
from eams.identity.tokens import (
    JWT_ALGORITHM,
    TokenCodec,
    TokenError,
    build_token_codec,
)
from eams.identity.users import UserRole

pytestmark = pytest.mark.unit

SECRET = "test-secret"


def _raw(payload: dict, secret: str = SECRET) -> str:
    return jwt.encode(payload, secret, algorithm=JWT_ALGORITHM)


class TestIssueAndVerify:
    def test_verify_returns_issued_identity(self, codec):
        subject = str(uuid4())
        token = codec.issue(subject, "ann@x.com", UserRole.EMPLOYEE)

        identity = codec.verify(token)

        assert identity.subject_id == subject
        assert identity.email == "ann@x.com"
        assert identity.role == UserRole.EMPLOYEE

    def test_claims_carry_type_and_lifetime(self, codec, clock):
        token = codec.issue("u-1", "boss@x.com", UserRole.ADMIN)
        claims = jwt.decode(
            token,
            SECRET,
            algorithms=[JWT_ALGORITHM],
            options={"verify_exp": False, "verify_iat": False},
        )

        now = int(clock().timestamp())
        assert claims["typ"] == "access"
        assert claims["role"] == "ADMIN"
        assert claims["iat"] == now
        assert claims["exp"] == now + int(timedelta(days=7).total_seconds())

    def test_issue_with_expiry_reports_seconds(self, codec):
        issued = codec.issue_with_expiry(
            "u-1", "a@x.com", UserRole.EMPLOYEE, ttl=timedelta(minutes=5)
        )

        assert issued.expires_in == 300
        assert codec.verify(issued.token).subject_id == "u-1"

    def test_identity_exposes_issue_and_expiry_times(self, codec, clock):
        token = codec.issue("u-1", "a@x.com", UserRole.EMPLOYEE)
        identity = codec.verify(token)

        assert identity.issued_at == clock().replace(microsecond=0)
        assert identity.expires_at - identity.issued_at == timedelta(days=7)

    def test_empty_secret_is_rejected(self):
        with pytest.raises(ValueError):
            TokenCodec(secret="", ttl=timedelta(minutes=1))


class TestExpiry:
    def test_valid_one_second_before_expiry(self, codec, clock):
        token = codec.issue(
            "u-1", "a@x.com", UserRole.EMPLOYEE, ttl=timedelta(seconds=60)
        )
        clock.advance(seconds=59)

        assert codec.verify(token).subject_id == "u-1"

    def test_expired_exactly_at_exp(self, codec, clock):
        token = codec.issue(
            "u-1", "a@x.com", UserRole.EMPLOYEE, ttl=timedelta(seconds=60)
        )
        clock.advance(seconds=60)

        with pytest.raises(TokenError) as exc:
            codec.verify(token)

        assert exc.value.kind == FaultKind.EXPIRED_TOKEN

    def test_expired_long_after_exp(self, codec, clock):
        token = codec.issue("u-1", "a@x.com", UserRole.EMPLOYEE)
        clock.advance(days=8)

        with pytest.raises(TokenError) as exc:
            codec.verify(token)

        assert exc.value.kind == FaultKind.EXPIRED_TOKEN


class TestInvalidTokens:
    @pytest.mark.parametrize("token", [None, "", "not-a-jwt", "a.b.c"])
    def test_missing_or_malformed(self, codec, token):
        with pytest.raises(TokenError) as exc:
            codec.verify(token)

        assert exc.value.kind == FaultKind.INVALID_TOKEN

    def test_signed_with_other_secret(self, codec, clock):
        other = TokenCodec(secret="other-secret", ttl=timedelta(days=1), clock=clock)
        token = other.issue("u-1", "a@x.com", UserRole.EMPLOYEE)

        with pytest.raises(TokenError) as exc:
            codec.verify(token)

        assert exc.value.kind == FaultKind.INVALID_TOKEN

    def test_tampered_payload(self, codec):
        token = codec.issue("u-1", "a@x.com", UserRole.EMPLOYEE)
        header, _, signature = token.split(".")
        forged = codec.issue("u-1", "a@x.com", UserRole.ADMIN).split(".")[1]

        with pytest.raises(TokenError) as exc:
            codec.verify(".".join([header, forged, signature]))

        assert exc.value.kind == FaultKind.INVALID_TOKEN

    def test_missing_required_claim(self, codec, clock):
        now = int(clock().timestamp())
        token = _raw({"sub": "u-1", "role": "EMPLOYEE", "iat": now, "exp": now + 60})

        with pytest.raises(TokenError) as exc:
            codec.verify(token)

        assert exc.value.kind == FaultKind.INVALID_TOKEN

    def test_unknown_role(self, codec, clock):
        now = int(clock().timestamp())
        token = _raw(
            {
                "sub": "u-1",
                "email": "a@x.com",
                "role": "SUPERUSER",
                "iat": now,
                "exp": now + 60,
            }
        )

        with pytest.raises(TokenError) as exc:
            codec.verify(token)

        assert exc.value.kind == FaultKind.INVALID_TOKEN
        assert exc.value.message == "Token role is invalid"

    def test_wrong_token_type(self, codec, clock):
        now = int(clock().timestamp())
        token = _raw(
            {
                "sub": "u-1",
                "email": "a@x.com",
                "role": "EMPLOYEE",
                "iat": now,
                "exp": now + 60,
                "typ": "refresh",
            }
        )

        with pytest.raises(TokenError) as exc:
            codec.verify(token)

        assert exc.value.message == "Token type is invalid"

    def test_other_algorithm_is_rejected(self, codec, clock):
        now = int(clock().timestamp())
        token = jwt.encode(
            {
                "sub": "u-1",
                "email": "a@x.com",
                "role": "EMPLOYEE",
                "iat": now,
                "exp": now + 60,
            },
            SECRET,
            algorithm="HS512",
        )

        with pytest.raises(TokenError):
            codec.verify(token)


def test_build_token_codec_uses_settings(monkeypatch):
    from eams.crosscutting.config import get_settings

    monkeypatch.setenv("JWT_SECRET", "configured-secret")
    monkeypatch.setenv("JWT_ACCESS_TTL_MINUTES", "15")
    get_settings.cache_clear()
    try:
        codec = build_token_codec()
        token = codec.issue("u-1", "a@x.com", UserRole.EMPLOYEE)

        claims = jwt.decode(token, "configured-secret", algorithms=[JWT_ALGORITHM])
        assert codec.default_ttl == timedelta(minutes=15)
        assert claims["exp"] - claims["iat"] == 15 * 60
    finally:
        get_settings.cache_clear()
