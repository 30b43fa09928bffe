"""
============================================================
TARJETA CRC (Class / Responsibilities / Collaborators)
============================================================
Class: 001_foundation (Alembic Migration)

Responsibilities:
  - Create the schema from scratch (baseline migration).
  - Define the users and absence_requests tables with their constraints and
    indexes.

Collaborators:
  - PostgreSQL 14+
  - Repositories in eams.infrastructure.repositories.postgres (this schema is
    their contract)

Policy:
  - BASELINE migration. Downgrade is NOT supported.
  - Naming convention:
      pk_<table>                         - Primary keys
      uq_<table>_<col>                   - Unique constraints
      ix_<table>_<col>                   - Indexes
      fk_<table>_<col>__<ref_table>      - Foreign keys
      ck_<table>_<name>                  - Check constraints
============================================================
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "001_foundation"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # =========================================================
    # 1) IDENTITY (users)
    # =========================================================
    op.create_table(
        "users",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        # Exact match; no lower() index on purpose.
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column(
            "role",
            sa.String(50),
            nullable=False,
            server_default=sa.text("'EMPLOYEE'"),
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
        sa.UniqueConstraint("email", name="uq_users_email"),
        sa.CheckConstraint(
            "role IN ('EMPLOYEE', 'ADMIN')", name="ck_users_role"
        ),
    )

    # =========================================================
    # 2) ABSENCE REQUESTS
    # =========================================================
    op.create_table(
        "absence_requests",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("reason", sa.Text, nullable=False),
        sa.Column("start_date", sa.Date, nullable=False),
        sa.Column("end_date", sa.Date, nullable=False),
        sa.Column(
            "status",
            sa.String(20),
            nullable=False,
            server_default=sa.text("'PENDING'"),
        ),
        sa.Column("employee_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id", name="pk_absence_requests"),
        sa.ForeignKeyConstraint(
            ["employee_id"],
            ["users.id"],
            name="fk_absence_requests_employee_id__users",
            ondelete="CASCADE",
        ),
        sa.CheckConstraint(
            "status IN ('PENDING', 'APPROVED', 'REJECTED')",
            name="ck_absence_requests_status",
        ),
        sa.CheckConstraint(
            "end_date >= start_date", name="ck_absence_requests_date_range"
        ),
        sa.CheckConstraint(
            "length(btrim(reason)) > 0", name="ck_absence_requests_reason"
        ),
    )

    # Listing: per-owner page ordered by newest first.
    op.create_index(
        "ix_absence_requests_employee_id_created_at",
        "absence_requests",
        ["employee_id", sa.text("created_at DESC")],
    )
    op.create_index(
        "ix_absence_requests_created_at",
        "absence_requests",
        [sa.text("created_at DESC")],
    )


def downgrade() -> None:
    """Downgrade is not supported for the baseline migration."""
    raise NotImplementedError(
        "Baseline: downgrade not supported. Drop and recreate the database instead."
    )
