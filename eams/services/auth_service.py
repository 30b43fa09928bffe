"""
===============================================================================
TARJETA CRC — services/auth_service.py
===============================================================================

Module:
    Authentication service (backend process)

Responsibilities:
    - Register handlers for auth.register and auth.login.
    - Build the FastAPI app that serves them over POST /rpc.

Collaborators:
    - application/usecases/auth: RegisterUserUseCase / LoginUserUseCase.
    - rpc/server.py: CommandRouter / build_rpc_router.
    - container.py: repositories and token codec.
===============================================================================
"""

from __future__ import annotations

from fastapi import FastAPI

from ..application.usecases.auth import LoginUserUseCase, RegisterUserUseCase
from ..crosscutting.middleware import RequestContextMiddleware
from ..domain.repositories import UserRepository
from ..identity.tokens import TokenCodec
from ..rpc.protocol import Command, Service
from ..rpc.server import CommandRouter, build_rpc_router
from .lifespan import database_lifespan
from .payloads import LoginPayload, RegisterPayload, TokenOut, UserOut, to_wire

SERVICE_NAME = "auth"


def build_auth_router(users: UserRepository, codec: TokenCodec) -> CommandRouter:
    router = CommandRouter(Service.AUTH)
    register = RegisterUserUseCase(users)
    login = LoginUserUseCase(users, codec)

    @router.command(Command.AUTH_REGISTER, RegisterPayload)
    def handle_register(payload: RegisterPayload):
        result = register.execute(payload.name, payload.email, payload.role)
        if result.error:
            return result.error
        return to_wire(UserOut.from_user(result.user))

    @router.command(Command.AUTH_LOGIN, LoginPayload)
    def handle_login(payload: LoginPayload):
        result = login.execute(payload.email)
        if result.error:
            return result.error
        return to_wire(
            TokenOut(access_token=result.access_token, expires_in=result.expires_in)
        )

    return router


def create_auth_app(router: CommandRouter | None = None) -> FastAPI:
    """Auth service app. Without a router, wiring comes from the container."""
    if router is None:
        from ..container import get_token_codec, get_user_repository

        router = build_auth_router(get_user_repository(), get_token_codec())

    app = FastAPI(
        title="EAMS Auth Service",
        docs_url=None,
        redoc_url=None,
        lifespan=database_lifespan,
    )
    app.include_router(build_rpc_router(router))
    app.add_middleware(RequestContextMiddleware, service_name=SERVICE_NAME)
    return app
