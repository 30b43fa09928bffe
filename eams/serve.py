"""
Process launcher.

    python -m eams.serve gateway
    python -m eams.serve auth
    python -m eams.serve absence

Each target binds to its configured host/port (GATEWAY_*, AUTH_*, ABSENCE_*).
Backend services open the DB pool in their lifespan when DATABASE_URL is set.
"""

from __future__ import annotations

import argparse
from typing import Callable

import uvicorn
from fastapi import FastAPI

from .crosscutting.config import Settings, get_settings
from .crosscutting.logger import logger


def _gateway() -> FastAPI:
    from .gateway.app import create_gateway_app

    return create_gateway_app()


def _auth() -> FastAPI:
    from .services.auth_service import create_auth_app

    return create_auth_app()


def _absence() -> FastAPI:
    from .services.absence_service import create_absence_app

    return create_absence_app()


TARGETS: dict[str, tuple[Callable[[], FastAPI], Callable[[Settings], tuple[str, int]]]] = {
    "gateway": (_gateway, lambda s: (s.gateway_host, s.gateway_port)),
    "auth": (_auth, lambda s: (s.auth_host, s.auth_port)),
    "absence": (_absence, lambda s: (s.absence_host, s.absence_port)),
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="eams-serve", description="Run one EAMS process."
    )
    parser.add_argument("target", choices=sorted(TARGETS))
    parser.add_argument("--host", default=None, help="override the configured host")
    parser.add_argument(
        "--port", type=int, default=None, help="override the configured port"
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    settings = get_settings()

    factory, address = TARGETS[args.target]
    host, port = address(settings)
    host = args.host or host
    port = args.port or port

    logger.info("starting process", extra={"target": args.target, "port": port})
    uvicorn.run(
        factory(),
        host=host,
        port=port,
        log_level=settings.log_level.lower(),
        access_log=False,
    )


if __name__ == "__main__":
    main()
