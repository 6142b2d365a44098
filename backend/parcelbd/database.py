"""
ParcelBD Backend — Database Connection Management
==================================================

What:  The `Database` object (async engine + session factory) and the FastAPI
       dependency that hands a session to each request.
How:   One `Database` is created when the application is built, stored on
       `app.state.database`, and disposed during shutdown. Handlers never touch
       a module-level engine; they receive a session through `get_db_session`.
Who:   Built by `parcelbd.main.create_app`; used by route handlers via Depends().

Connection Pooling:
    PostgreSQL (asyncpg): pool_size / max_overflow / pre_ping from settings,
    connections recycled every hour.
    SQLite (aiosqlite):   a single StaticPool connection, so an in-memory
    database survives across sessions (tests, local experiments).
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Optional

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from parcelbd.config import settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares a single metadata object, which Alembic and `Database.create_all`
    read to build the schema.
    """
    pass


def _engine_options(url: str) -> Dict[str, Any]:
    """Pool options appropriate for the database backend in `url`."""
    if url.startswith("sqlite"):
        return {
            "poolclass": StaticPool,
            "connect_args": {"check_same_thread": False},
        }
    return {
        "pool_size": settings.db_pool_size,
        "max_overflow": settings.db_max_overflow,
        "pool_pre_ping": settings.db_pool_pre_ping,
        "pool_recycle": 3600,
    }


class Database:
    """
    Long-lived database handle with an explicit lifecycle.

    Lifecycle:
        1. Constructed at application build time (no I/O yet)
        2. `create_all()` during startup when DB_CREATE_ALL is enabled
        3. `session()` per request through `get_db_session`
        4. `dispose()` during shutdown closes every pooled connection
    """

    def __init__(self, url: Optional[str] = None, echo: Optional[bool] = None):
        self.url = url or settings.database_url
        if echo is None:
            echo = settings.log_level == "DEBUG"
        self.engine: AsyncEngine = create_async_engine(
            self.url,
            echo=echo,
            **_engine_options(self.url),
        )
        # expire_on_commit=False keeps attributes readable after commit,
        # services serialize rows after committing.
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    async def create_all(self) -> None:
        """Create any missing tables registered on `Base.metadata`."""
        # Import models so they register with Base before create_all runs.
        from parcelbd.models import parcel, payment  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database schema ensured (%d tables)", len(Base.metadata.tables))

    async def ping(self) -> bool:
        """Run `SELECT 1`; used by the health check."""
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Yield a session that commits on success and rolls back on error.

        Services commit their own writes; the commit here flushes anything a
        handler left pending.
        """
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def dispose(self) -> None:
        """Close all connections in the pool."""
        await self.engine.dispose()


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    The `Database` comes from `request.app.state.database`, set by
    `create_app`. Example:

        @router.get("/parcels")
        async def list_parcels(db: AsyncSession = Depends(get_db_session)):
            ...
    """
    database: Database = request.app.state.database
    async with database.session() as session:
        yield session
