"""
QuickNotes Backend — Database Engine & Session Management
===========================================================

What:  Async SQLAlchemy engine factory, session factory, and schema setup.
How:   Builds an async engine from settings and an async_sessionmaker bound
       to it. The persistent note store opens one session per operation.
Who:   Used by stores.database.DatabaseNoteStore and the health route.
When:  Only when STORE_BACKEND=database; the memory backend never
       touches this module's engine helpers.

Supported URLs:
    sqlite+aiosqlite:///./quicknotes.db          (local development, tests)
    postgresql+asyncpg://user:pw@host:5432/db    (deployment)
"""

from typing import Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from quicknotes.config import settings


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    All models inherit from this class so that `Base.metadata` knows every
    table; init_schema() creates them with metadata.create_all.
    """
    pass


# ── Engine & Session Factories ────────────────────────────────────────────
def build_engine(
    database_url: Optional[str] = None,
    echo: Optional[bool] = None,
) -> AsyncEngine:
    """
    Create the async engine for the persistent store.

    Pool sizing is left to SQLAlchemy's per-dialect defaults so the same
    call works for SQLite files and PostgreSQL.
    """
    return create_async_engine(
        database_url or settings.database_url,
        pool_pre_ping=settings.db_pool_pre_ping,
        echo=settings.db_echo if echo is None else echo,
    )


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """
    Creates new AsyncSession instances with consistent configuration.

    expire_on_commit=False: rows stay readable after commit, so the store
    can convert them to Note records once the transaction has closed.
    """
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def init_schema(engine: AsyncEngine) -> None:
    """
    Create the notes table (and index/constraints) if it does not exist.

    Schema migrations are out of scope: the table layout is created once
    and never altered in place.
    """
    # Import registers NoteRow with Base.metadata
    from quicknotes.models.note import NoteRow  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def ping(engine: AsyncEngine) -> None:
    """Runs SELECT 1; raises whatever the driver raises when unreachable."""
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))


async def dispose_engine(engine: AsyncEngine) -> None:
    """
    What:  Gracefully closes all connections in the pool.
    When:  Called during application shutdown (lifespan handler).
    """
    await engine.dispose()
