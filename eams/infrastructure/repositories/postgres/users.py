"""
============================================================
TARJETA CRC — infrastructure/repositories/postgres/users.py
============================================================
Class: PostgresUserRepository

Responsibilities:
  - Create users and load them by email / id.
  - Parameterized SQL against the `users` table (contract with migrations).
  - Map raw rows -> domain `User`, validating `UserRole`.
  - Surface failures consistently via `DatabaseError` with structured logs.

Collaborators:
  - psycopg_pool.ConnectionPool
  - infrastructure.db.pool.get_pool
  - identity.users.User / UserRole

Constraints / Notes:
  - Email uniqueness is enforced by the UNIQUE constraint; add_user uses
    ON CONFLICT DO NOTHING so concurrent registrations cannot both win.
  - Email is matched exactly (no lower/trim).
============================================================
"""

from __future__ import annotations

from typing import Iterable, Optional

from psycopg_pool import ConnectionPool

from ....crosscutting.exceptions import DatabaseError
from ....crosscutting.logger import logger
from ....identity.users import User, UserRole

_USER_COLUMNS = "id, name, email, role, created_at"


class PostgresUserRepository:
    """R: PostgreSQL implementation of UserRepository."""

    def __init__(self, pool: Optional[ConnectionPool] = None):
        self._pool = pool

    def _get_pool(self) -> ConnectionPool:
        if self._pool is not None:
            return self._pool

        from ...db.pool import get_pool

        return get_pool()

    @staticmethod
    def _row_to_user(row: tuple) -> User:
        try:
            role = UserRole(row[3])
        except ValueError as exc:
            raise DatabaseError(f"Invalid user role in database: {row[3]}") from exc

        return User(id=row[0], name=row[1], email=row[2], role=role, created_at=row[4])

    def _fetchone(
        self, *, query: str, params: Iterable[object], context_msg: str, extra: dict
    ) -> tuple | None:
        try:
            with self._get_pool().connection() as conn:
                return conn.execute(query, tuple(params)).fetchone()
        except Exception as exc:
            logger.exception(context_msg, extra={**extra, "error": str(exc)})
            raise DatabaseError(f"{context_msg}: {exc}") from exc

    def add_user(self, user: User) -> bool:
        row = self._fetchone(
            query=f"""
                INSERT INTO users ({_USER_COLUMNS})
                VALUES (%s, %s, %s, %s, COALESCE(%s, now()))
                ON CONFLICT (email) DO NOTHING
                RETURNING id
            """,
            params=(user.id, user.name, user.email, user.role.value, user.created_at),
            context_msg="PostgresUserRepository: add_user failed",
            extra={"user_id": str(user.id)},
        )
        return row is not None

    def get_user_by_email(self, email: str) -> Optional[User]:
        row = self._fetchone(
            query=f"SELECT {_USER_COLUMNS} FROM users WHERE email = %s",
            params=(email,),
            context_msg="PostgresUserRepository: get_user_by_email failed",
            extra={},
        )
        return self._row_to_user(row) if row else None

    def count_users(self) -> int:
        row = self._fetchone(
            query="SELECT COUNT(*) FROM users",
            params=(),
            context_msg="PostgresUserRepository: count_users failed",
            extra={},
        )
        return int(row[0]) if row else 0
