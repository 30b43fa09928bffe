"""
Name: Edge Gateway Application

Responsibilities:
  - Build the FastAPI app clients talk to
  - Attach request context middleware and RFC7807 exception handlers
  - Mount the guarded business routes and an unguarded /healthz

Collaborators:
  - gateway.routes.router: guarded endpoints
  - gateway.exception_handlers: error rendering
  - crosscutting.middleware.RequestContextMiddleware: X-Request-Id + logs

Notes:
  - The gateway holds no store; every business operation is dispatched to the
    owning backend service.
  - /healthz is not a business operation and is never dispatched.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from .. import __version__
from ..container import close_command_dispatcher
from ..crosscutting.config import get_settings
from ..crosscutting.logger import logger
from ..crosscutting.middleware import RequestContextMiddleware
from .exception_handlers import register_exception_handlers
from .routes import router

SERVICE_NAME = "gateway"


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    logger.info(
        "gateway started",
        extra={
            "auth_url": settings.auth_base_url(),
            "absence_url": settings.absence_base_url(),
        },
    )
    try:
        yield
    finally:
        close_command_dispatcher()
        logger.info("gateway stopped")


def create_gateway_app() -> FastAPI:
    app = FastAPI(
        title="EAMS Gateway",
        version=__version__,
        lifespan=lifespan,
    )
    app.include_router(router)

    @app.get("/healthz", tags=["health"])
    def healthz():
        return {"ok": True, "service": SERVICE_NAME}

    register_exception_handlers(app)
    app.add_middleware(RequestContextMiddleware, service_name=SERVICE_NAME)
    return app
