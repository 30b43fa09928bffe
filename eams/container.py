"""
===============================================================================
TARJETA CRC — eams/container.py (Composition Root / manual DI)
===============================================================================

Responsibilities:
  - Compose repositories, the token codec and the command dispatcher.
  - Expose factories usable as FastAPI dependencies.
  - Keep singletons cached (lru_cache) per process.
  - Pick storage adapters from Settings (DATABASE_URL empty => in-memory).

Collaborators:
  - crosscutting.config.get_settings
  - domain.repositories (ports)
  - infrastructure.repositories (adapters)
  - identity.tokens, rpc.client, rpc.dispatcher

Notes:
  - No business logic here.
  - Postgres adapters resolve the pool lazily; the service lifespan opens it.
===============================================================================
"""

from __future__ import annotations

from functools import lru_cache

from .crosscutting.config import get_settings
from .domain.repositories import AbsenceRepository, UserRepository
from .identity.tokens import TokenCodec, build_token_codec
from .infrastructure.repositories import (
    InMemoryAbsenceRepository,
    InMemoryUserRepository,
    PostgresAbsenceRepository,
    PostgresUserRepository,
)
from .rpc.client import ServiceClient
from .rpc.dispatcher import CommandDispatcher
from .rpc.protocol import Service


@lru_cache
def get_token_codec() -> TokenCodec:
    return build_token_codec()


@lru_cache
def get_user_repository() -> UserRepository:
    if get_settings().uses_database():
        return PostgresUserRepository()
    return InMemoryUserRepository()


@lru_cache
def get_absence_repository() -> AbsenceRepository:
    if get_settings().uses_database():
        return PostgresAbsenceRepository()
    return InMemoryAbsenceRepository()


@lru_cache
def get_command_dispatcher() -> CommandDispatcher:
    settings = get_settings()
    timeout = settings.rpc_timeout_seconds
    return CommandDispatcher(
        {
            Service.AUTH: ServiceClient(settings.auth_base_url(), timeout=timeout),
            Service.ABSENCE: ServiceClient(
                settings.absence_base_url(), timeout=timeout
            ),
        }
    )


def close_command_dispatcher() -> None:
    """Close the shared dispatcher's HTTP clients, if it was ever built."""
    if get_command_dispatcher.cache_info().currsize:
        get_command_dispatcher().close()
    get_command_dispatcher.cache_clear()


def reset_container() -> None:
    """Drop cached singletons (tests)."""
    for factory in (
        get_token_codec,
        get_user_repository,
        get_absence_repository,
        get_command_dispatcher,
    ):
        factory.cache_clear()
