"""
Database connection management for the summary datastore (PostgreSQL).

Provides async SQLAlchemy engine and session management.
"""
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from sqlalchemy import MetaData, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from ...config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()


# Naming convention for database constraints
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

metadata = MetaData(naming_convention=NAMING_CONVENTION)


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    metadata = metadata


class DatabaseManager:
    """
    Manages database connections and sessions.

    Implements the connection pool and provides async session factory.
    """

    _engine: Optional[AsyncEngine] = None
    _session_factory: Optional[async_sessionmaker[AsyncSession]] = None

    @classmethod
    def get_engine(cls) -> AsyncEngine:
        """
        Get or create the async database engine.

        Raises:
            ConfigurationException: If datastore credentials are missing
        """
        if cls._engine is None:
            cls._engine = create_async_engine(
                settings.database.url,
                echo=settings.database.echo_sql,
                pool_size=settings.database.pool_size,
                max_overflow=settings.database.max_overflow,
                pool_pre_ping=True,  # Verify connections before use
                pool_recycle=3600,   # Recycle connections every hour
            )
        return cls._engine

    @classmethod
    def get_session_factory(cls) -> async_sessionmaker[AsyncSession]:
        """Get or create the async session factory."""
        if cls._session_factory is None:
            cls._session_factory = async_sessionmaker(
                bind=cls.get_engine(),
                class_=AsyncSession,
                expire_on_commit=False,
                autoflush=False,
            )
        return cls._session_factory

    @classmethod
    async def close(cls) -> None:
        """Close the database engine and all connections."""
        if cls._engine is not None:
            await cls._engine.dispose()
            cls._engine = None
            cls._session_factory = None


@asynccontextmanager
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Provide a transactional scope around a series of operations.

    Usage:
        async with get_db_session() as session:
            repo = SummaryRepository(session)
            await repo.upsert_daily_summaries(rows)
    """
    session_factory = DatabaseManager.get_session_factory()
    session = session_factory()
    try:
        yield session
        await session.commit()
    except Exception:
        await session.rollback()
        raise
    finally:
        await session.close()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency for FastAPI to get database session.

    Usage in FastAPI:
        @router.get("/items")
        async def get_items(db: AsyncSession = Depends(get_db)):
            ...
    """
    async with get_db_session() as session:
        yield session


async def init_db() -> None:
    """
    Create the summary tables if they do not exist.

    The hosted datastore normally owns the schema; this is for local
    development and tests against a scratch database.
    """
    engine = DatabaseManager.get_engine()
    async with engine.begin() as conn:
        # Import models to register them with metadata
        from .models import summary_model  # noqa: F401
        await conn.run_sync(Base.metadata.create_all)


async def health_check() -> bool:
    """
    Check database connectivity.

    Returns True if database is accessible.
    """
    try:
        async with get_db_session() as session:
            await session.execute(text("SELECT 1"))
        return True
    except (SQLAlchemyError, OSError) as e:
        logger.warning(f"Database health check failed: {e}")
        return False
