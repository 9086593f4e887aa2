"""Async engine for the SQL secret store.

Only imported when SECRET_STORE_BACKEND=sql, so the file and memory backends
never need a database driver at runtime.
"""
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from config.settings import settings


class Base(DeclarativeBase):
    """Declarative base for ORM models that document the migrated DDL."""


# One trader's pending secrets: a few connections, checked before reuse so a
# restarted database does not fail the next put.
engine: AsyncEngine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_size=settings.DB_POOL_SIZE,
    max_overflow=0,
    pool_pre_ping=True,
)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)
