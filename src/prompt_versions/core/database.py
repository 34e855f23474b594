"""Database engine and session management.

Production runs against the PostgreSQL database that owns the version
tables and stored procedures; SQLite (aiosqlite) is accepted for local
development and tests, where only the read and tag/pin paths work.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import structlog
from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from .config import settings
from .exceptions import InternalError

logger = structlog.get_logger(__name__)


class Base(DeclarativeBase):
    """Base class for all database models."""
    pass


def mask_database_url(url: str) -> str:
    """Hide the password in a database URL."""
    try:
        return make_url(url).render_as_string(hide_password=True)
    except Exception:
        return "<unparseable database url>"


class DatabaseManager:
    """Owns the async engine and hands out request-scoped sessions."""

    def __init__(self, database_url: Optional[str] = None):
        self.database_url = database_url or settings.database_url
        self.engine: Optional[AsyncEngine] = None
        self.session_maker: Optional[async_sessionmaker] = None
        self._is_connected = False

    @property
    def db_type(self) -> str:
        """Backend name of the configured URL (``postgresql``, ``sqlite``...)."""
        try:
            return make_url(self.database_url).get_backend_name()
        except Exception:
            return "unknown"

    @property
    def is_connected(self) -> bool:
        return self._is_connected

    def _engine_options(self) -> dict:
        options = {"echo": settings.database_echo}
        if self.db_type == "postgresql":
            options.update(pool_pre_ping=True, pool_recycle=3600)
        return options

    async def initialize(self) -> bool:
        """Create the engine and verify connectivity.

        Returns:
            True when the database answered, False otherwise
        """
        try:
            self.engine = create_async_engine(self.database_url, **self._engine_options())
            self.session_maker = async_sessionmaker(
                bind=self.engine,
                class_=AsyncSession,
                expire_on_commit=False,
            )
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except Exception as e:
            logger.error(
                "Database initialization failed",
                error=str(e),
                database_url=mask_database_url(self.database_url),
            )
            self._is_connected = False
            return False

        self._is_connected = True
        logger.info(
            "Database initialized",
            database_type=self.db_type,
            echo_enabled=settings.database_echo,
        )
        return True

    @asynccontextmanager
    async def get_session(self) -> AsyncIterator[AsyncSession]:
        """Session committed on success and rolled back on any error."""
        if not self.session_maker:
            raise RuntimeError("Database not initialized")

        async with self.session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def create_tables(self) -> None:
        """Create the version tables from the ORM metadata."""
        if not self.engine:
            raise RuntimeError("Database engine not initialized")

        # registers the version tables on Base.metadata
        from ..models import versions  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        logger.info("Database tables created", tables=sorted(Base.metadata.tables))

    async def close(self) -> None:
        if self.engine:
            await self.engine.dispose()
            self._is_connected = False
            logger.info("Database connections closed")


db_manager = DatabaseManager()


async def get_database_session() -> AsyncIterator[AsyncSession]:
    """FastAPI dependency yielding a session for the current request."""
    if not db_manager.is_connected:
        raise InternalError("Database not connected", operation="get_database_session")

    async with db_manager.get_session() as session:
        yield session


async def init_database() -> bool:
    return await db_manager.initialize()


async def close_database() -> None:
    await db_manager.close()


async def check_database_health() -> dict:
    """Check database connectivity for the detailed health endpoint."""
    if not db_manager.is_connected:
        return {
            "status": "disconnected",
            "database_type": db_manager.db_type,
            "error": "Database not connected",
        }

    try:
        async with db_manager.get_session() as session:
            await session.execute(text("SELECT 1"))
    except Exception as e:
        logger.warning("Database health check failed", error=str(e))
        return {
            "status": "error",
            "database_type": db_manager.db_type,
            "error": str(e),
        }

    return {
        "status": "healthy",
        "database_type": db_manager.db_type,
        "echo_enabled": settings.database_echo,
    }
