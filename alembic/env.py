"""
============================================================
TARJETA CRC (Class / Responsibilities / Collaborators)
============================================================
Class: alembic/env.py (Alembic Environment Configuration)

Responsibilities:
  - Run the EAMS schema migrations against the database the services use.
  - Resolve the URL from eams Settings (DATABASE_URL) and pin the psycopg 3
    driver for SQLAlchemy.

Collaborators:
  - eams.crosscutting.config.get_settings
  - Alembic (context, config)
  - SQLAlchemy create_engine (NullPool, one connection per run)

Policy:
  - Revisions are plain op.* calls; there is no ORM metadata to compare
    against, so autogenerate stays off.
  - Refuses to run without DATABASE_URL: the in-memory mode has no schema.
============================================================
"""

from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine, pool

from eams.crosscutting.config import get_settings

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name, disable_existing_loggers=False)

_DRIVER = "postgresql+psycopg://"


def database_url() -> str:
    url = get_settings().database_url.strip()
    if not url:
        raise RuntimeError("DATABASE_URL must be set to run migrations")
    for scheme in ("postgresql://", "postgres://"):
        if url.startswith(scheme):
            return _DRIVER + url[len(scheme) :]
    return url


if context.is_offline_mode():
    context.configure(
        url=database_url(),
        target_metadata=None,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()
else:
    engine = create_engine(database_url(), poolclass=pool.NullPool)
    with engine.connect() as connection:
        context.configure(connection=connection, target_metadata=None)
        with context.begin_transaction():
            context.run_migrations()
    engine.dispose()
