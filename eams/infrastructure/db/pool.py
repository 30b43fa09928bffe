"""
===============================================================================
CRC CARD — infrastructure/db/pool.py
===============================================================================

Component:
  Process-wide PostgreSQL connection pool

Responsibilities:
  - Open the pool once per backend process (auth or absence) and close it on
    shutdown.
  - Hand the pool to the PostgreSQL repositories.
  - Bound every statement with the configured statement_timeout.

Collaborators:
  - psycopg_pool.ConnectionPool
  - crosscutting/config.py (db_statement_timeout_ms)
  - services/lifespan.py (open/close)
  - crosscutting/exceptions.py (PoolAlreadyInitializedError,
    PoolNotInitializedError)
===============================================================================
"""

from __future__ import annotations

import threading
from typing import Optional

from psycopg_pool import ConnectionPool

from ...crosscutting.config import get_settings
from ...crosscutting.exceptions import (
    PoolAlreadyInitializedError,
    PoolNotInitializedError,
)
from ...crosscutting.logger import logger

_lock = threading.Lock()
_pool: Optional[ConnectionPool] = None


def _session_options() -> dict[str, str]:
    timeout_ms = get_settings().db_statement_timeout_ms
    if timeout_ms <= 0:
        return {}
    return {"options": f"-c statement_timeout={int(timeout_ms)}"}


def init_pool(database_url: str, min_size: int, max_size: int) -> ConnectionPool:
    global _pool

    with _lock:
        if _pool is not None:
            raise PoolAlreadyInitializedError("DB pool already open in this process")
        logger.info(
            "opening DB pool", extra={"min_size": min_size, "max_size": max_size}
        )
        _pool = ConnectionPool(
            conninfo=database_url,
            min_size=min_size,
            max_size=max_size,
            kwargs=_session_options(),
            open=True,
        )
        return _pool


def get_pool() -> ConnectionPool:
    pool = _pool
    if pool is None:
        raise PoolNotInitializedError("DB pool is not open; call init_pool() first")
    return pool


def close_pool() -> None:
    """Close the pool if open. Safe to call more than once."""
    global _pool

    with _lock:
        pool, _pool = _pool, None
    if pool is not None:
        logger.info("closing DB pool")
        pool.close()
