"""
Database configuration and session management.

This module provides:
- Async SQLAlchemy engine setup
- Database session management
- SQLite connection tuning for development and tests
- Database dependency injection
"""

from typing import AsyncGenerator, Optional

from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from structlog import get_logger

from strideboard.core.config import get_settings
from strideboard.core.models import Base

logger = get_logger(__name__)
settings = get_settings()


def configure_sqlite_engine(engine: AsyncEngine) -> None:
    """
    Make SQLite behave like the production store for our purposes.

    pysqlite defers BEGIN until the first DML statement, which breaks SAVEPOINT
    handling and lets two writers read the same max(position). Every transaction
    is opened with BEGIN IMMEDIATE instead, so writers are serialized, and
    foreign keys are enforced on each new connection.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


class DatabaseManager:
    """Manages database connections and sessions."""

    def __init__(self) -> None:
        self._engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[async_sessionmaker[AsyncSession]] = None

    @property
    def engine(self) -> AsyncEngine:
        """Get the database engine, creating it if necessary."""
        if self._engine is None:
            self._engine = self._create_engine()
        return self._engine

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        """Get the session factory, creating it if necessary."""
        if self._session_factory is None:
            self._session_factory = async_sessionmaker(
                bind=self.engine,
                class_=AsyncSession,
                expire_on_commit=False,
                autoflush=False,
            )
        return self._session_factory

    def _create_engine(self) -> AsyncEngine:
        """Create and configure the async database engine."""
        engine_kwargs = {
            "url": settings.database_url,
            "echo": settings.debug,
        }

        if not settings.is_sqlite:
            engine_kwargs.update({
                "pool_size": settings.database_pool_size,
                "max_overflow": settings.database_max_overflow,
                "pool_timeout": 30,
                "pool_recycle": 3600,  # 1 hour
                "pool_pre_ping": True,
            })

        engine = create_async_engine(**engine_kwargs)

        if settings.is_sqlite:
            configure_sqlite_engine(engine)

        logger.info(
            "Database engine created",
            database_url=settings.database_url.split("@")[-1],  # Hide credentials
            dialect=engine.dialect.name,
        )

        return engine

    async def create_tables(self) -> None:
        """Create all database tables."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables created")

    async def close(self) -> None:
        """Close the database engine and all connections."""
        if self._engine:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None
            logger.info("Database engine closed")

    async def health_check(self) -> bool:
        """Check if the database is accessible."""
        try:
            async with self.session_factory() as session:
                await session.execute(text("SELECT 1"))
                return True
        except Exception as e:
            logger.error("Database health check failed", error=str(e))
            return False


# Global database manager instance
db_manager = DatabaseManager()


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency to get a database session.

    One session (and one transaction) per request: services commit their own
    unit of work, anything left pending is committed here, and any exception
    rolls the whole request back.

    Yields:
        AsyncSession: Database session for the request
    """
    async with db_manager.session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception as e:
            await session.rollback()
            logger.debug("Database session rolled back", error=str(e))
            raise
