"""
Startup/shutdown lifecycle for backend services.

Opens the DB pool when DATABASE_URL is set and closes it on shutdown. With no
DATABASE_URL the service runs on in-memory stores and nothing is opened.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from ..crosscutting.config import get_settings
from ..crosscutting.logger import logger
from ..infrastructure.db.pool import close_pool, init_pool


@asynccontextmanager
async def database_lifespan(app: FastAPI):
    settings = get_settings()
    uses_db = settings.uses_database()

    if uses_db:
        init_pool(
            database_url=settings.database_url,
            min_size=settings.db_pool_min_size,
            max_size=settings.db_pool_max_size,
        )
    logger.info(
        "service started",
        extra={"app": app.title, "storage": "postgres" if uses_db else "memory"},
    )

    try:
        yield
    finally:
        if uses_db:
            close_pool()
        logger.info("service stopped", extra={"app": app.title})
