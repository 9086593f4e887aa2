"""Alembic environment for the pending-secret table (SECRET_STORE_BACKEND=sql).

Migrations are hand-written raw SQL; PendingSecretORM mirrors the DDL but
nothing is autogenerated from it. The revision is tracked in its own version
table so the schema can live in a database shared with other services.
"""
import asyncio
from logging.config import fileConfig
from typing import Any

from alembic import context
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine

from config.settings import settings

VERSION_TABLE = "darkpool_alembic_version"

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)


def _context_options() -> dict[str, Any]:
    return {"target_metadata": None, "version_table": VERSION_TABLE}


def run_migrations_offline() -> None:
    """Emit the SQL script instead of executing it."""
    context.configure(
        url=settings.DATABASE_URL,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **_context_options(),
    )
    with context.begin_transaction():
        context.run_migrations()


def _migrate(connection: Connection) -> None:
    context.configure(connection=connection, **_context_options())
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    connectable = create_async_engine(settings.DATABASE_URL)
    try:
        async with connectable.connect() as connection:
            await connection.run_sync(_migrate)
    finally:
        await connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
