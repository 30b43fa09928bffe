"""
===============================================================================
MODULE: Typed internal exceptions
===============================================================================

Internal errors that are NOT business faults (those are values, see
domain/faults.py). They carry:
- a stable error_code
- an error_id for log correlation
- a human message (no secrets)

Collaborators:
  - infrastructure/repositories/postgres/* (raise DatabaseError)
  - infrastructure/db/pool.py (pool lifecycle errors)
  - rpc/server.py (logs and turns them into InternalError faults)
===============================================================================
"""

from __future__ import annotations

from uuid import uuid4


class EAMSError(Exception):
    """Base for internal system errors: error_code + error_id + message."""

    error_code: str = "EAMS_ERROR"

    def __init__(
        self,
        message: str,
        error_id: str | None = None,
    ):
        self.message = message
        self.error_id = error_id or str(uuid4())
        super().__init__(message)


class DatabaseError(EAMSError):
    """DB errors (connection, query, timeout, pool)."""

    error_code: str = "DATABASE_ERROR"


class PoolAlreadyInitializedError(DatabaseError):
    """init_pool() was called twice in one process."""

    error_code: str = "DB_POOL_ALREADY_INITIALIZED"


class PoolNotInitializedError(DatabaseError):
    """A repository asked for the pool before init_pool()."""

    error_code: str = "DB_POOL_NOT_INITIALIZED"
