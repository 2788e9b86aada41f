"""
Storefront Backend — Database Engine & Session Factory
=======================================================

What:  Async SQLAlchemy engine construction, session factory, and declarative base.
How:   create_engine_from_settings() builds a pooled async engine from Settings;
       the AppContext owns the engine and its session factory for the life of
       the application. Per-request sessions are opened by the
       `get_db_session` dependency (storefront.dependencies).

Connection Pooling Strategy (PostgreSQL):
    pool_size=20:      Persistent connections for normal load
    max_overflow=10:   Temporary connections for traffic spikes (total max = 30)
    pool_pre_ping:     Validates connections before use
    pool_recycle=3600: Recycles connections every hour

    SQLite (tests, local experiments) keeps the dialect's default pool; the
    sizing options above do not apply to it.
"""

from typing import Any, Dict

from sqlalchemy import MetaData
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from storefront.config import Settings

# Deterministic constraint names keep Alembic diffs stable across dialects
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    All models inherit from this class to register with the shared metadata
    (used by Alembic for migrations and by the test-suite's create_all()).
    """

    metadata = MetaData(naming_convention=NAMING_CONVENTION)


def create_engine_from_settings(settings: Settings) -> AsyncEngine:
    """
    Build the async engine for the configured database.

    Echoes SQL when LOG_LEVEL is DEBUG.
    """
    options: Dict[str, Any] = {"echo": settings.log_level == "DEBUG"}
    if not settings.is_sqlite:
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_recycle=3600,
        )
    return create_async_engine(settings.database_url, **options)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """
    Session factory bound to `engine`.

    expire_on_commit=False: attributes stay loaded after commit so services
    can build responses from committed rows without another round-trip.
    """
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
