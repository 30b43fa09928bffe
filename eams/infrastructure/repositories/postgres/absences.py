"""
============================================================
TARJETA CRC — infrastructure/repositories/postgres/absences.py
============================================================
Class: PostgresAbsenceRepository

Responsibilities:
  - Persist absence requests in `absence_requests`.
  - Page / count with optional owner scoping (created_at DESC, id DESC).
  - Compare-and-set status updates in a single UPDATE ... WHERE status = %s.

Collaborators:
  - psycopg_pool.ConnectionPool
  - infrastructure.db.pool.get_pool
  - domain.absences.AbsenceRequest / AbsenceStatus

Constraints / Notes:
  - employee_id is a UUID column (FK users.id); owner ids that are not UUIDs
    own nothing.
  - where_sql fragments are built only inside this repository.
============================================================
"""

from __future__ import annotations

from typing import Iterable, List, Optional
from uuid import UUID

from psycopg_pool import ConnectionPool

from ....crosscutting.exceptions import DatabaseError
from ....crosscutting.logger import logger
from ....domain.absences import AbsenceRequest, AbsenceStatus


def _as_uuid(value: str) -> UUID | None:
    try:
        return UUID(str(value))
    except ValueError:
        return None


class PostgresAbsenceRepository:
    """R: PostgreSQL implementation of AbsenceRepository."""

    _SELECT_COLUMNS = """
        id, reason, start_date, end_date, status, employee_id, created_at
    """

    _ORDER_BY = "ORDER BY created_at DESC, id DESC"

    def __init__(self, pool: Optional[ConnectionPool] = None):
        self._pool = pool

    def _get_pool(self) -> ConnectionPool:
        if self._pool is not None:
            return self._pool

        from ...db.pool import get_pool

        return get_pool()

    # =========================================================
    # Mapping
    # =========================================================
    @staticmethod
    def _row_to_absence(row: tuple) -> AbsenceRequest:
        (
            absence_id,
            reason,
            start_date,
            end_date,
            status,
            employee_id,
            created_at,
        ) = row
        try:
            parsed_status = AbsenceStatus(status)
        except ValueError as exc:
            raise DatabaseError(f"Invalid absence status in database: {status}") from exc

        return AbsenceRequest(
            id=absence_id,
            reason=reason,
            start_date=start_date,
            end_date=end_date,
            status=parsed_status,
            employee_id=str(employee_id),
            created_at=created_at,
        )

    # =========================================================
    # Execution helpers
    # =========================================================
    def _fetchall(
        self, *, query: str, params: Iterable[object], context_msg: str, extra: dict
    ) -> list[tuple]:
        try:
            with self._get_pool().connection() as conn:
                return conn.execute(query, tuple(params)).fetchall()
        except Exception as exc:
            logger.exception(context_msg, extra={**extra, "error": str(exc)})
            raise DatabaseError(f"{context_msg}: {exc}") from exc

    def _fetchone(
        self, *, query: str, params: Iterable[object], context_msg: str, extra: dict
    ) -> tuple | None:
        try:
            with self._get_pool().connection() as conn:
                return conn.execute(query, tuple(params)).fetchone()
        except Exception as exc:
            logger.exception(context_msg, extra={**extra, "error": str(exc)})
            raise DatabaseError(f"{context_msg}: {exc}") from exc

    @staticmethod
    def _owner_filter(employee_id: Optional[str]) -> tuple[str, list[object]] | None:
        """WHERE fragment for an owner scope; None when the owner cannot match."""
        if employee_id is None:
            return "", []
        owner = _as_uuid(employee_id)
        if owner is None:
            return None
        return "WHERE employee_id = %s", [owner]

    # =========================================================
    # Public API
    # =========================================================
    def add_absence(self, absence: AbsenceRequest) -> None:
        owner = _as_uuid(absence.employee_id)
        if owner is None:
            raise DatabaseError(f"employee_id is not a UUID: {absence.employee_id}")

        self._fetchone(
            query=f"""
                INSERT INTO absence_requests ({self._SELECT_COLUMNS})
                VALUES (%s, %s, %s, %s, %s, %s, %s)
                RETURNING id
            """,
            params=(
                absence.id,
                absence.reason,
                absence.start_date,
                absence.end_date,
                absence.status.value,
                owner,
                absence.created_at,
            ),
            context_msg="PostgresAbsenceRepository: add_absence failed",
            extra={"absence_id": str(absence.id)},
        )

    def get_absence(self, absence_id: UUID) -> Optional[AbsenceRequest]:
        row = self._fetchone(
            query=f"""
                SELECT {self._SELECT_COLUMNS}
                FROM absence_requests
                WHERE id = %s
            """,
            params=(absence_id,),
            context_msg="PostgresAbsenceRepository: get_absence failed",
            extra={"absence_id": str(absence_id)},
        )
        return self._row_to_absence(row) if row else None

    def list_absences(
        self,
        *,
        employee_id: Optional[str] = None,
        offset: int = 0,
        limit: int = 10,
    ) -> List[AbsenceRequest]:
        scope = self._owner_filter(employee_id)
        if scope is None or limit <= 0:
            return []
        where_sql, params = scope

        rows = self._fetchall(
            query=f"""
                SELECT {self._SELECT_COLUMNS}
                FROM absence_requests
                {where_sql}
                {self._ORDER_BY}
                LIMIT %s OFFSET %s
            """,
            params=[*params, limit, max(0, offset)],
            context_msg="PostgresAbsenceRepository: list_absences failed",
            extra={"scoped": employee_id is not None},
        )
        return [self._row_to_absence(r) for r in rows]

    def count_absences(self, *, employee_id: Optional[str] = None) -> int:
        scope = self._owner_filter(employee_id)
        if scope is None:
            return 0
        where_sql, params = scope

        row = self._fetchone(
            query=f"SELECT COUNT(*) FROM absence_requests {where_sql}",
            params=params,
            context_msg="PostgresAbsenceRepository: count_absences failed",
            extra={"scoped": employee_id is not None},
        )
        return int(row[0]) if row else 0

    def update_status(
        self,
        absence_id: UUID,
        *,
        expected: AbsenceStatus,
        new_status: AbsenceStatus,
    ) -> Optional[AbsenceRequest]:
        row = self._fetchone(
            query=f"""
                UPDATE absence_requests
                SET status = %s
                WHERE id = %s AND status = %s
                RETURNING {self._SELECT_COLUMNS}
            """,
            params=(new_status.value, absence_id, expected.value),
            context_msg="PostgresAbsenceRepository: update_status failed",
            extra={"absence_id": str(absence_id), "new_status": new_status.value},
        )
        return self._row_to_absence(row) if row else None
