"""Alembic migration environment with async asyncpg support.

The service owns two databases: the write database (outbox) and the read
database (materialized views, processed-event ledger, sync status). Select
one with ``-x target=write`` (default) or ``-x target=read``; each target
has its own revision branch, metadata and version table::

    alembic -x target=write upgrade write@head
    alembic -x target=read upgrade read@head
"""

from __future__ import annotations

import asyncio
from logging.config import fileConfig
from typing import TYPE_CHECKING

from sqlalchemy import pool
from sqlalchemy.ext.asyncio import create_async_engine

from alembic import context

from infrastructure.database.engines import build_async_url
from infrastructure.database.models import Base, ReadModelBase
from infrastructure.outbox import models as outbox_models  # noqa: F401
from infrastructure.settings import get_database_settings, get_read_database_settings
from projection.infrastructure import models as view_models  # noqa: F401

if TYPE_CHECKING:
    from sqlalchemy.engine import Connection

# Alembic Config object
config = context.config

# Setup Python logging from alembic.ini
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

TARGET = context.get_x_argument(as_dictionary=True).get("target", "write")

if TARGET == "write":
    target_metadata = Base.metadata
    database_url = build_async_url(get_database_settings())
elif TARGET == "read":
    target_metadata = ReadModelBase.metadata
    database_url = build_async_url(get_read_database_settings())
else:
    raise ValueError(f"Unknown migration target {TARGET!r}; use 'write' or 'read'")

VERSION_TABLE = f"alembic_version_{TARGET}"


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode (generate SQL only)."""
    context.configure(
        url=database_url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        version_table=VERSION_TABLE,
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection) -> None:
    """Configure and run migrations with connection."""
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        compare_type=True,
        version_table=VERSION_TABLE,
    )

    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    """Run migrations with an async engine built from settings."""
    connectable = create_async_engine(database_url, poolclass=pool.NullPool)

    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)

    await connectable.dispose()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode."""
    asyncio.run(run_async_migrations())


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
