"""
Name: Pytest Configuration and Shared Fixtures

Responsibilities:
  - Configure a deterministic test environment (no .env, fixed secret)
  - Provide a pinned clock, token codec and caller identities
  - Wire the gateway and both backend services in-process
    (TestClient is an httpx.Client, so the dispatcher talks to the backend
    apps without sockets)

Notes:
  - Use @pytest.fixture(scope="function") for per-test isolation
"""

import os
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from types import SimpleNamespace
from uuid import uuid4

import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from eams.crosscutting import config as app_config  # noqa: E402

app_config.Settings.model_config["env_file"] = None

from fastapi.testclient import TestClient  # noqa: E402

from eams.container import get_command_dispatcher, get_token_codec  # noqa: E402
from eams.gateway.app import create_gateway_app  # noqa: E402
from eams.identity.tokens import TokenCodec  # noqa: E402
from eams.identity.users import Identity, UserRole  # noqa: E402
from eams.infrastructure.repositories import (  # noqa: E402
    InMemoryAbsenceRepository,
    InMemoryUserRepository,
)
from eams.rpc.client import ServiceClient  # noqa: E402
from eams.rpc.dispatcher import CommandDispatcher  # noqa: E402
from eams.rpc.protocol import Service  # noqa: E402
from eams.services.absence_service import (  # noqa: E402
    build_absence_router,
    create_absence_app,
)
from eams.services.auth_service import build_auth_router, create_auth_app  # noqa: E402

TEST_SECRET = "test-secret"
FIXED_NOW = datetime(2025, 9, 1, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """R: Mutable clock for expiry and ordering tests."""

    def __init__(self, now: datetime = FIXED_NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


# ============================================================================
# Identity fixtures
# ============================================================================


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def codec(clock: FakeClock) -> TokenCodec:
    return TokenCodec(secret=TEST_SECRET, ttl=timedelta(days=7), clock=clock)


@pytest.fixture
def employee() -> Identity:
    return Identity(
        subject_id=str(uuid4()), email="ann@x.com", role=UserRole.EMPLOYEE
    )


@pytest.fixture
def other_employee() -> Identity:
    return Identity(
        subject_id=str(uuid4()), email="bob@x.com", role=UserRole.EMPLOYEE
    )


@pytest.fixture
def admin() -> Identity:
    return Identity(subject_id=str(uuid4()), email="boss@x.com", role=UserRole.ADMIN)


# ============================================================================
# Store fixtures
# ============================================================================


@pytest.fixture
def user_repository() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture
def absence_repository() -> InMemoryAbsenceRepository:
    return InMemoryAbsenceRepository()


# ============================================================================
# Wired system (gateway -> dispatcher -> backend apps)
# ============================================================================


@pytest.fixture
def system(codec, user_repository, absence_repository):
    """
    R: Full edge-to-backend wiring, in-process.

    Exposes: client (gateway TestClient), codec, users, absences, dispatcher.
    """
    auth_app = create_auth_app(build_auth_router(user_repository, codec))
    absence_app = create_absence_app(build_absence_router(absence_repository))

    dispatcher = CommandDispatcher(
        {
            Service.AUTH: ServiceClient(
                "http://auth", client=TestClient(auth_app, base_url="http://auth")
            ),
            Service.ABSENCE: ServiceClient(
                "http://absence",
                client=TestClient(absence_app, base_url="http://absence"),
            ),
        }
    )

    gateway = create_gateway_app()
    gateway.dependency_overrides[get_token_codec] = lambda: codec
    gateway.dependency_overrides[get_command_dispatcher] = lambda: dispatcher

    yield SimpleNamespace(
        client=TestClient(gateway),
        codec=codec,
        users=user_repository,
        absences=absence_repository,
        dispatcher=dispatcher,
    )

    gateway.dependency_overrides.clear()
